"""
content_metrics.py - Word, sentence and reading-time metrics for the main content.

Usage:
    metrics = analyze_content(soup_or_html)
"""

import math
import re

from html_doc import content_region, ensure_soup, round_half_up

WORDS_PER_MINUTE = 200


def normalize_text(s: str) -> str:
    return re.sub(r"\s+", " ", s or "").strip()


def analyze_content(doc) -> dict:
    """
    Measures the primary content container (<main>, falling back to <body>).
    Absent content yields zeroed metrics.
    """
    soup = ensure_soup(doc)
    main = content_region(soup)
    clean_text = normalize_text(main.get_text())

    words = [w for w in re.split(r"\s+", clean_text) if w]
    sentences = [s for s in re.split(r"[.!?]+", clean_text) if s.strip()]
    paragraphs = main.find_all("p")

    word_count = len(words)
    sentence_count = len(sentences)
    avg_words_per_sentence = round_half_up(word_count / sentence_count) if sentence_count else 0

    return {
        "wordCount": word_count,
        "characterCount": len(clean_text),
        "characterCountNoSpaces": len(re.sub(r"\s", "", clean_text)),
        "sentenceCount": sentence_count,
        "paragraphCount": len(paragraphs),
        "avgWordsPerSentence": avg_words_per_sentence,
        "readingTimeMinutes": math.ceil(word_count / WORDS_PER_MINUTE),
    }
