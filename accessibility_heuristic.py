"""
accessibility_heuristic.py - Lightweight A11y Checks.

Usage:
    report = analyze_accessibility(soup_or_html)
"""

from html_doc import ensure_soup, round_half_up


def analyze_accessibility(doc) -> dict:
    soup = ensure_soup(doc)

    # alt="" marks a decorative image; a missing attribute is a defect
    imgs = soup.find_all("img")
    with_alt = 0
    without_alt = 0
    decorative = 0
    for img in imgs:
        alt = img.get("alt")
        if alt == "":
            decorative += 1
        elif alt:
            with_alt += 1
        else:
            without_alt += 1

    total_images = len(imgs)
    if total_images > 0:
        alt_coverage = round_half_up((with_alt + decorative) / total_images * 100)
    else:
        alt_coverage = 100

    aria_labels = len(soup.find_all(attrs={"aria-label": True}))
    aria_roles = len(soup.find_all(attrs={"role": True}))

    issues = []
    if without_alt > 0:
        issues.append(f"{without_alt} images missing alt text")
    if alt_coverage < 100:
        issues.append("Not all images have alt attributes")

    return {
        "images": {
            "total": total_images,
            "withAlt": with_alt,
            "withoutAlt": without_alt,
            "decorative": decorative,
            "altCoveragePercent": alt_coverage,
        },
        "aria": {
            "labels": aria_labels,
            "roles": aria_roles,
        },
        "issues": issues,
        "score": alt_coverage,
    }
