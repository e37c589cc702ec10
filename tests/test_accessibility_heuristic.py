from accessibility_heuristic import analyze_accessibility


def test_no_images_is_full_coverage():
    report = analyze_accessibility("<main><p>text</p></main>")
    assert report["images"]["total"] == 0
    assert report["images"]["altCoveragePercent"] == 100
    assert report["score"] == 100
    assert report["issues"] == []


def test_decorative_images_count_towards_coverage():
    html = '<img src="a" alt="Logo"><img src="b" alt="Chart"><img src="c" alt="">'
    report = analyze_accessibility(html)
    assert report["images"] == {
        "total": 3,
        "withAlt": 2,
        "withoutAlt": 0,
        "decorative": 1,
        "altCoveragePercent": 100,
    }
    assert report["issues"] == []


def test_missing_alt_is_reported():
    html = '<img src="a" alt="ok"><img src="b"><img src="c">'
    report = analyze_accessibility(html)
    assert report["images"]["withoutAlt"] == 2
    assert report["images"]["altCoveragePercent"] == 33
    assert report["score"] == 33
    assert report["issues"] == [
        "2 images missing alt text",
        "Not all images have alt attributes",
    ]


def test_aria_usage_counts():
    html = """
    <nav aria-label="Main" role="navigation"></nav>
    <button aria-label="Close"></button>
    <div role="dialog"></div>
    """
    report = analyze_accessibility(html)
    assert report["aria"] == {"labels": 2, "roles": 2}
