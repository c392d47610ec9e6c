"""Source adapters: one function per upstream provider.

Every adapter takes the raw query string and returns a list of
``NormalizedResult``. Adapters never raise; any failure (network, HTTP status,
unexpected payload, missing credential) yields an empty list.
"""

import functools
import logging
import re
from collections import OrderedDict
from typing import Callable, Dict, List, Optional
from urllib.parse import quote

import feedparser
import requests
from bs4 import BeautifulSoup

from .config import get_settings
from .models import NormalizedResult

log = logging.getLogger(__name__)

Adapter = Callable[[str], List[NormalizedResult]]

SNIPPET_LIMIT = 200

WIKIPEDIA_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary/"
GNEWS_SEARCH_URL = "https://gnews.io/api/v4/search"
REDDIT_SEARCH_URL = "https://www.reddit.com/search.json"
INSTAGRAM_GRAPH_URL = "https://graph.facebook.com/v20.0"
YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
DUCKDUCKGO_URL = "https://api.duckduckgo.com/"
DUCKDUCKGO_ORIGIN = "https://duckduckgo.com"


# ── Helpers ──


def _get_json(url: str, params: Optional[dict] = None, headers: Optional[dict] = None):
    """GET *url* and decode JSON. Returns ``None`` on any failure."""
    settings = get_settings()
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=settings.request_timeout)
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as exc:
        log.warning("Fetch failed for %s: %s", url, exc)
        return None


def _strip_html(text: str) -> str:
    if not text or "<" not in text:
        return (text or "").strip()
    return BeautifulSoup(text, "html.parser").get_text(separator=" ", strip=True)


def _never_raises(fn: Adapter) -> Adapter:
    """Turn any exception escaping an adapter into an empty result list."""

    @functools.wraps(fn)
    def wrapper(query: str) -> List[NormalizedResult]:
        try:
            return fn(query)
        except Exception as exc:
            log.warning("Adapter %s failed for %r: %s", fn.__name__, query, exc)
            return []

    return wrapper


# ── Encyclopedia ──


@_never_raises
def fetch_wikipedia(query: str) -> List[NormalizedResult]:
    data = _get_json(WIKIPEDIA_SUMMARY_URL + quote(query, safe=""))
    if not isinstance(data, dict):
        return []
    return [
        NormalizedResult(
            title=data.get("title") or "Wikipedia",
            snippet=data.get("extract") or "",
            url=((data.get("content_urls") or {}).get("desktop") or {}).get("page") or "",
            image=(data.get("thumbnail") or {}).get("source"),
            source="Wikipedia",
        )
    ]


# ── News ──


@_never_raises
def fetch_gnews(query: str) -> List[NormalizedResult]:
    key = get_settings().gnews_api_key
    if not key:
        return []
    data = _get_json(GNEWS_SEARCH_URL, params={"q": query, "lang": "en", "max": 5, "apikey": key})
    if not isinstance(data, dict):
        return []
    results = []
    for article in data.get("articles") or []:
        results.append(
            NormalizedResult(
                title=article.get("title") or "Untitled Article",
                snippet=article.get("description") or "",
                url=article.get("url"),
                image=article.get("image") or None,
                source=(article.get("source") or {}).get("name") or "GNews",
            )
        )
    return results


def _query_terms(query: str) -> List[str]:
    terms = [w for w in re.findall(r"\w+", query.lower()) if len(w) >= 3]
    return terms or [query.lower().strip()]


@_never_raises
def fetch_rss(query: str) -> List[NormalizedResult]:
    """Scan the configured feeds for entries mentioning any query word."""
    settings = get_settings()
    terms = _query_terms(query)
    results: List[NormalizedResult] = []
    for feed_url in settings.rss_feeds:
        try:
            resp = requests.get(
                feed_url,
                headers={"User-Agent": settings.user_agent},
                timeout=settings.request_timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            log.warning("Feed fetch failed for %s: %s", feed_url, exc)
            continue
        feed = feedparser.parse(resp.content)
        label = feed.feed.get("title") or "RSS"
        for entry in feed.entries:
            title = _strip_html(entry.get("title", ""))
            summary = _strip_html(entry.get("summary", ""))
            haystack = f"{title} {summary}".lower()
            if not any(t in haystack for t in terms):
                continue
            image = None
            for media in entry.get("media_thumbnail") or entry.get("media_content") or []:
                if media.get("url"):
                    image = media["url"]
                    break
            results.append(
                NormalizedResult(
                    title=title or label,
                    snippet=summary[:SNIPPET_LIMIT],
                    url=entry.get("link") or "",
                    image=image,
                    source=label,
                )
            )
            if len(results) >= 5:
                return results
    return results


# ── Social ──


@_never_raises
def fetch_reddit(query: str) -> List[NormalizedResult]:
    data = _get_json(
        REDDIT_SEARCH_URL,
        params={"q": query, "sort": "top", "t": "month", "limit": 5},
        headers={"User-Agent": get_settings().user_agent},
    )
    children = ((data or {}).get("data") or {}).get("children") if isinstance(data, dict) else None
    if not children:
        return []
    results = []
    for child in children:
        post = child.get("data") or {}
        thumbnail = post.get("thumbnail") or ""
        results.append(
            NormalizedResult(
                title=post.get("title") or "Untitled Reddit Post",
                snippet=(post.get("selftext") or "")[:SNIPPET_LIMIT] or post.get("url") or "",
                url=f"https://reddit.com{post.get('permalink', '')}",
                image=thumbnail if thumbnail.startswith("http") else None,
                source="Reddit",
                author=post.get("author"),
            )
        )
    return results


@_never_raises
def fetch_instagram(query: str) -> List[NormalizedResult]:
    settings = get_settings()
    token, user_id = settings.instagram_access_token, settings.instagram_user_id
    if not token or not user_id:
        return []
    hashtag = re.sub(r"\W+", "", query)
    if not hashtag:
        return []
    tags = _get_json(
        f"{INSTAGRAM_GRAPH_URL}/ig_hashtag_search",
        params={"user_id": user_id, "q": hashtag, "access_token": token},
    )
    matches = (tags or {}).get("data") if isinstance(tags, dict) else None
    if not matches:
        return []
    posts = _get_json(
        f"{INSTAGRAM_GRAPH_URL}/{matches[0]['id']}/top_media",
        params={
            "user_id": user_id,
            "fields": "caption,media_url,permalink,username",
            "access_token": token,
        },
    )
    if not isinstance(posts, dict):
        return []
    results = []
    for post in (posts.get("data") or [])[:10]:
        caption = post.get("caption") or ""
        results.append(
            NormalizedResult(
                title=caption.split("\n", 1)[0][:100] or "Instagram post",
                snippet=caption[:SNIPPET_LIMIT],
                url=post.get("permalink"),
                image=post.get("media_url"),
                source="Instagram",
                author=post.get("username"),
            )
        )
    return results


@_never_raises
def fetch_youtube(query: str) -> List[NormalizedResult]:
    key = get_settings().youtube_api_key
    if not key:
        return []
    data = _get_json(
        YOUTUBE_SEARCH_URL,
        params={"part": "snippet", "type": "video", "maxResults": 10, "q": query, "key": key},
    )
    if not isinstance(data, dict):
        return []
    results = []
    for item in data.get("items") or []:
        video_id = (item.get("id") or {}).get("videoId")
        if not video_id:
            continue
        snippet = item.get("snippet") or {}
        thumbs = snippet.get("thumbnails") or {}
        thumb = thumbs.get("medium") or thumbs.get("default") or {}
        results.append(
            NormalizedResult(
                title=snippet.get("title") or "YouTube video",
                snippet=(snippet.get("description") or "")[:SNIPPET_LIMIT],
                url=f"https://www.youtube.com/watch?v={video_id}",
                image=thumb.get("url"),
                source="YouTube",
                author=snippet.get("channelTitle"),
            )
        )
    return results


# ── Generic web ──


def _ddg_image(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return path if path.startswith("http") else f"{DUCKDUCKGO_ORIGIN}{path}"


@_never_raises
def fetch_duckduckgo(query: str) -> List[NormalizedResult]:
    data = _get_json(
        DUCKDUCKGO_URL,
        params={"q": query, "format": "json", "no_redirect": 1, "no_html": 1},
    )
    if not isinstance(data, dict):
        return []
    results: List[NormalizedResult] = []
    for topic in data.get("RelatedTopics") or []:
        text = topic.get("Text")
        if not text:
            continue  # topic groups carry no text of their own
        results.append(
            NormalizedResult(
                title=text.split(" - ")[0],
                snippet=text,
                url=topic.get("FirstURL") or "",
                image=_ddg_image((topic.get("Icon") or {}).get("URL")),
                source="DuckDuckGo",
            )
        )
    if data.get("AbstractText"):
        results.insert(
            0,
            NormalizedResult(
                title=data.get("Heading") or "DuckDuckGo",
                snippet=data["AbstractText"],
                url=data.get("AbstractURL") or "",
                image=_ddg_image(data.get("Image")),
                source="DuckDuckGo",
            ),
        )
    return results[:5]


# ── Registry ──


# Merge priority: encyclopedia, news, social, generic web.
SOURCES: "OrderedDict[str, Adapter]" = OrderedDict(
    [
        ("wikipedia", fetch_wikipedia),
        ("gnews", fetch_gnews),
        ("rss", fetch_rss),
        ("reddit", fetch_reddit),
        ("instagram", fetch_instagram),
        ("youtube", fetch_youtube),
        ("duckduckgo", fetch_duckduckgo),
    ]
)

WEB_SOURCES = ("wikipedia", "gnews", "reddit", "duckduckgo")
SOCIAL_SOURCES = ("reddit", "instagram", "youtube")


def is_configured(name: str) -> bool:
    """Whether the adapter has the credentials it needs to do anything."""
    settings = get_settings()
    checks: Dict[str, bool] = {
        "gnews": bool(settings.gnews_api_key),
        "rss": bool(settings.rss_feeds),
        "instagram": bool(settings.instagram_access_token and settings.instagram_user_id),
        "youtube": bool(settings.youtube_api_key),
    }
    return checks.get(name, name in SOURCES)
