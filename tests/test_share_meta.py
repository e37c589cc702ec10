from share_meta import analyze_open_graph, calculate_og_score


def test_complete_open_graph_scores_100():
    html = """
    <head>
      <meta property="og:title" content="Title">
      <meta property="og:description" content="Desc">
      <meta property="og:image" content="/img.png">
      <meta name="twitter:card" content="summary_large_image">
    </head>
    """
    report = analyze_open_graph(html)
    assert report["openGraph"] == {"title": "Title", "description": "Desc", "image": "/img.png"}
    assert report["twitter"] == {"card": "summary_large_image"}
    assert report["issues"] == []
    assert report["score"] == 100
    assert report["hasSocialMeta"] is True


def test_partial_metadata_scores_50():
    report = analyze_open_graph('<meta property="og:title" content="Only title">')
    assert report["issues"] == ["Missing og:description", "Missing og:image"]
    assert report["score"] == 50


def test_twitter_only_still_counts_as_present():
    report = analyze_open_graph('<meta name="twitter:title" content="T">')
    assert report["hasSocialMeta"] is True
    assert len(report["issues"]) == 3
    assert report["score"] == 50


def test_no_social_metadata_scores_zero():
    report = analyze_open_graph("<head><title>x</title></head>")
    assert report["openGraph"] == {}
    assert report["twitter"] == {}
    assert report["hasSocialMeta"] is False
    assert report["score"] == 0


def test_score_rules():
    assert calculate_og_score(False, 0) == 0
    assert calculate_og_score(True, 0) == 100
    assert calculate_og_score(True, 2) == 50
