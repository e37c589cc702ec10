# block_structure.py
from __future__ import annotations

from typing import Any

from html_doc import content_region, ensure_soup

PREVIEW_CHARS = 100


def _preview(text: str) -> str:
    if len(text) > PREVIEW_CHARS:
        return f"{text[:PREVIEW_CHARS]}..."
    return text


def analyze_blocks(doc) -> dict[str, Any]:
    """
    Sections are the <div> children of the content region; blocks are the
    classed <div> children of a section. First class = block name, the rest
    are variants.
    """
    soup = ensure_soup(doc)
    main = content_region(soup)

    sections = main.find_all("div", recursive=False)
    blocks: list[dict[str, Any]] = []
    block_summary: dict[str, int] = {}

    for section_index, section in enumerate(sections, start=1):
        for block in section.find_all("div", recursive=False):
            classes = [c for c in (block.get("class") or []) if c]
            if not classes:
                continue

            name = classes[0]
            blocks.append({
                "name": name,
                "section": section_index,
                "variants": classes[1:],
                "contentPreview": _preview(block.get_text().strip()),
            })
            block_summary[name] = block_summary.get(name, 0) + 1

    # Distinct names, first-seen order
    block_names = list(dict.fromkeys(b["name"] for b in blocks))

    return {
        "totalBlocks": len(blocks),
        "totalSections": len(sections),
        "blocks": blocks,
        "blockNames": block_names,
        "blockSummary": block_summary,
    }
