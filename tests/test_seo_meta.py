from seo_meta import analyze_seo

GOOD_TITLE = "A perfectly reasonable page title here"  # 38 chars
GOOD_DESC = "d" * 130


def _page(title=GOOD_TITLE, desc=GOOD_DESC, canonical=True, lang="en", robots=None):
    head = []
    if title is not None:
        head.append(f"<title>{title}</title>")
    if desc is not None:
        head.append(f'<meta name="description" content="{desc}">')
    if canonical:
        head.append('<link rel="canonical" href="https://example.com/page">')
    if robots is not None:
        head.append(f'<meta name="robots" content="{robots}">')
    lang_attr = f' lang="{lang}"' if lang else ""
    return f"<html{lang_attr}><head>{''.join(head)}</head><body></body></html>"


def test_clean_page_has_no_issues():
    report = analyze_seo(_page())
    assert report["issues"] == []
    assert report["title"] == {"content": GOOD_TITLE, "length": len(GOOD_TITLE)}
    assert report["metaDescription"]["length"] == 130
    assert report["canonical"] == "https://example.com/page"
    assert report["lang"] == "en"


def test_everything_missing():
    report = analyze_seo(_page(title=None, desc=None, canonical=False, lang=None))
    assert report["issues"] == [
        "Missing page title",
        "Missing meta description",
        "Missing canonical URL",
        "Missing lang attribute",
    ]


def test_length_thresholds():
    short = analyze_seo(_page(title="Short", desc="tiny"))
    assert "Title too short (< 30 chars)" in short["issues"]
    assert "Meta description too short (< 120 chars)" in short["issues"]

    long = analyze_seo(_page(title="t" * 61, desc="d" * 161))
    assert "Title too long (> 60 chars)" in long["issues"]
    assert "Meta description too long (> 160 chars)" in long["issues"]


def test_robots_reported_verbatim():
    report = analyze_seo(_page(robots="noindex, nofollow"))
    assert report["robots"] == "noindex, nofollow"
    assert report["issues"] == []
