import requests

from max_codegen import sources
from max_codegen.sources import (
    SOURCES,
    SOCIAL_SOURCES,
    WEB_SOURCES,
    fetch_duckduckgo,
    fetch_gnews,
    fetch_instagram,
    fetch_reddit,
    fetch_rss,
    fetch_wikipedia,
    fetch_youtube,
    is_configured,
)


class FakeResponse:
    def __init__(self, payload=None, status=200, content=b""):
        self._payload = payload
        self.status_code = status
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


def _stub_get(monkeypatch, responses):
    """Route requests.get by URL prefix; records every call."""
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        for prefix, resp in responses.items():
            if url.startswith(prefix):
                return resp
        raise requests.ConnectionError(f"unexpected URL {url}")

    monkeypatch.setattr(sources.requests, "get", fake_get)
    return calls


def test_wikipedia_maps_summary(monkeypatch):
    calls = _stub_get(monkeypatch, {
        sources.WIKIPEDIA_SUMMARY_URL: FakeResponse({
            "title": "Nairobi",
            "extract": "Nairobi is the capital of Kenya.",
            "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Nairobi"}},
            "thumbnail": {"source": "https://upload.wikimedia.org/n.jpg"},
        }),
    })
    results = fetch_wikipedia("Nairobi city")
    assert len(results) == 1
    r = results[0]
    assert r.title == "Nairobi"
    assert r.url == "https://en.wikipedia.org/wiki/Nairobi"
    assert r.image == "https://upload.wikimedia.org/n.jpg"
    assert r.source == "Wikipedia"
    assert calls[0]["url"].endswith("Nairobi%20city")
    assert calls[0]["timeout"] == 15.0


def test_http_error_degrades_to_empty(monkeypatch):
    _stub_get(monkeypatch, {sources.WIKIPEDIA_SUMMARY_URL: FakeResponse({"title": "x"}, status=404)})
    assert fetch_wikipedia("nothing") == []


def test_network_error_degrades_to_empty(monkeypatch):
    _stub_get(monkeypatch, {})
    assert fetch_duckduckgo("anything") == []
    assert fetch_reddit("anything") == []


def test_malformed_payload_degrades_to_empty(monkeypatch):
    _stub_get(monkeypatch, {sources.REDDIT_SEARCH_URL: FakeResponse({"data": {"children": [None]}})})
    assert fetch_reddit("rust") == []


def test_gnews_requires_key(monkeypatch):
    calls = _stub_get(monkeypatch, {})
    assert fetch_gnews("elections") == []
    assert calls == []


def test_gnews_maps_articles(monkeypatch):
    monkeypatch.setenv("GNEWS_API_KEY", "k")
    calls = _stub_get(monkeypatch, {
        sources.GNEWS_SEARCH_URL: FakeResponse({"articles": [
            {"title": "Vote count begins", "description": "Tallying", "url": "https://n.example/a",
             "image": "https://n.example/a.jpg", "source": {"name": "Daily Nation"}},
            {"title": None, "url": "https://n.example/b", "source": {}},
        ]}),
    })
    results = fetch_gnews("elections")
    assert [r.source for r in results] == ["Daily Nation", "GNews"]
    assert results[1].title == "Untitled Article"
    assert results[1].image is None
    assert calls[0]["params"]["apikey"] == "k"
    assert calls[0]["params"]["max"] == 5


def test_reddit_maps_posts(monkeypatch):
    calls = _stub_get(monkeypatch, {
        sources.REDDIT_SEARCH_URL: FakeResponse({"data": {"children": [
            {"data": {"title": "Rust 2.0?", "selftext": "x" * 500, "permalink": "/r/rust/1",
                      "thumbnail": "self", "author": "ferris"}},
            {"data": {"title": "", "selftext": "", "url": "https://blog.example/post",
                      "permalink": "/r/rust/2", "thumbnail": "https://thumbs.example/2.jpg"}},
        ]}}),
    })
    results = fetch_reddit("rust")
    assert len(results) == 2
    assert len(results[0].snippet) == 200
    assert results[0].image is None
    assert results[0].url == "https://reddit.com/r/rust/1"
    assert results[0].author == "ferris"
    assert results[1].title == "Untitled Reddit Post"
    assert results[1].snippet == "https://blog.example/post"
    assert results[1].image == "https://thumbs.example/2.jpg"
    assert calls[0]["headers"]["User-Agent"] == "MaxCodeGenAI/1.0"


def test_duckduckgo_abstract_first_and_capped(monkeypatch):
    topics = [{"Text": f"Topic {i} - details", "FirstURL": f"https://ddg.example/{i}",
               "Icon": {"URL": "/i/icon.png"}} for i in range(6)]
    topics.insert(2, {"Name": "Group", "Topics": []})
    _stub_get(monkeypatch, {
        sources.DUCKDUCKGO_URL: FakeResponse({
            "Heading": "Python",
            "AbstractText": "Python is a programming language.",
            "AbstractURL": "https://en.wikipedia.org/wiki/Python",
            "Image": "",
            "RelatedTopics": topics,
        }),
    })
    results = fetch_duckduckgo("python")
    assert len(results) == 5
    assert results[0].title == "Python"
    assert results[0].image is None
    assert results[1].title == "Topic 0"
    assert results[1].image == "https://duckduckgo.com/i/icon.png"
    assert all(r.source == "DuckDuckGo" for r in results)


def test_youtube_maps_videos(monkeypatch):
    monkeypatch.setenv("YOUTUBE_API_KEY", "yt")
    _stub_get(monkeypatch, {
        sources.YOUTUBE_SEARCH_URL: FakeResponse({"items": [
            {"id": {"videoId": "abc"}, "snippet": {"title": "Django in 10 minutes",
             "channelTitle": "CodeKE", "description": "Quick start",
             "thumbnails": {"medium": {"url": "https://i.ytimg.com/abc.jpg"}}}},
            {"id": {"channelId": "skip-me"}, "snippet": {"title": "A channel"}},
        ]}),
    })
    results = fetch_youtube("django")
    assert len(results) == 1
    assert results[0].url == "https://www.youtube.com/watch?v=abc"
    assert results[0].author == "CodeKE"
    assert results[0].image == "https://i.ytimg.com/abc.jpg"


def test_instagram_resolves_hashtag_then_media(monkeypatch):
    monkeypatch.setenv("INSTAGRAM_ACCESS_TOKEN", "tok")
    monkeypatch.setenv("INSTAGRAM_USER_ID", "42")
    calls = _stub_get(monkeypatch, {
        f"{sources.INSTAGRAM_GRAPH_URL}/ig_hashtag_search": FakeResponse({"data": [{"id": "999"}]}),
        f"{sources.INSTAGRAM_GRAPH_URL}/999/top_media": FakeResponse({"data": [
            {"caption": "Sunset over Nairobi\n#nairobi", "media_url": "https://cdn.example/1.jpg",
             "permalink": "https://instagram.com/p/1", "username": "kenyalens"},
        ]}),
    })
    results = fetch_instagram("nairobi sunset")
    assert len(results) == 1
    assert results[0].title == "Sunset over Nairobi"
    assert results[0].author == "kenyalens"
    assert calls[0]["params"]["q"] == "nairobisunset"


def test_instagram_requires_token_and_user(monkeypatch):
    monkeypatch.setenv("INSTAGRAM_ACCESS_TOKEN", "tok")
    calls = _stub_get(monkeypatch, {})
    assert fetch_instagram("nairobi") == []
    assert calls == []


RSS_FEED = b"""<?xml version="1.0"?>
<rss version="2.0"><channel>
<title>World Desk</title><link>https://news.example</link><description>News</description>
<item><title>Elections in Kenya</title><link>https://news.example/1</link>
<description>&lt;p&gt;Voters head to the &lt;b&gt;polls&lt;/b&gt; today&lt;/p&gt;</description></item>
<item><title>Football results</title><link>https://news.example/2</link>
<description>Weekend scores</description></item>
</channel></rss>"""


def test_rss_filters_by_query_words_and_strips_html(monkeypatch):
    monkeypatch.setenv("RSS_FEEDS", "https://news.example/rss")
    _stub_get(monkeypatch, {"https://news.example/rss": FakeResponse(content=RSS_FEED)})
    results = fetch_rss("kenya elections")
    assert len(results) == 1
    assert results[0].title == "Elections in Kenya"
    assert results[0].snippet == "Voters head to the polls today"
    assert results[0].source == "World Desk"
    assert results[0].url == "https://news.example/1"


def test_rss_skips_unreachable_feed(monkeypatch):
    monkeypatch.setenv("RSS_FEEDS", "https://down.example/rss,https://news.example/rss")
    _stub_get(monkeypatch, {
        "https://down.example/rss": FakeResponse(status=503),
        "https://news.example/rss": FakeResponse(content=RSS_FEED),
    })
    assert [r.title for r in fetch_rss("football")] == ["Football results"]


def test_registry_priority_order():
    assert list(SOURCES)[:2] == ["wikipedia", "gnews"]
    assert list(SOURCES)[-1] == "duckduckgo"
    for group in (WEB_SOURCES, SOCIAL_SOURCES):
        positions = [list(SOURCES).index(name) for name in group]
        assert positions == sorted(positions)


def test_is_configured(monkeypatch):
    assert is_configured("wikipedia")
    assert not is_configured("gnews")
    monkeypatch.setenv("GNEWS_API_KEY", "k")
    assert is_configured("gnews")
    assert not is_configured("nope")
