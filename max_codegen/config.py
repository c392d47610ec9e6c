import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


load_dotenv()


DEFAULT_RSS_FEEDS: Tuple[str, ...] = (
    "https://feeds.bbci.co.uk/news/world/rss.xml",
    "https://feeds.npr.org/1001/rss.xml",
    "https://www.aljazeera.com/xml/rss/all.xml",
)


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gnews_api_key: str = ""
    youtube_api_key: str = ""
    instagram_access_token: str = ""
    instagram_user_id: str = ""
    rss_feeds: Tuple[str, ...] = DEFAULT_RSS_FEEDS
    memory_dir: Path = Path("/tmp/memory")
    max_results: int = 10
    max_images: int = 6
    max_turns: Optional[int] = None  # None keeps every turn
    request_timeout: float = 15.0  # seconds, per upstream HTTP call
    user_agent: str = "MaxCodeGenAI/1.0"

    @property
    def has_gemini(self) -> bool:
        return bool(self.gemini_api_key)


def _split_feeds(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_RSS_FEEDS
    return tuple(u.strip() for u in raw.split(",") if u.strip())


def get_settings() -> Settings:
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        gnews_api_key=os.getenv("GNEWS_API_KEY", ""),
        youtube_api_key=os.getenv("YOUTUBE_API_KEY", ""),
        instagram_access_token=os.getenv("INSTAGRAM_ACCESS_TOKEN", ""),
        instagram_user_id=os.getenv("INSTAGRAM_USER_ID", ""),
        rss_feeds=_split_feeds(os.getenv("RSS_FEEDS")),
        memory_dir=Path(os.getenv("MEMORY_DIR", "/tmp/memory")),
        max_results=int(os.getenv("MAX_RESULTS", "10")),
        max_images=int(os.getenv("MAX_IMAGES", "6")),
        max_turns=int(os.getenv("MAX_TURNS") or "0") or None,
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "15")),
        user_agent=os.getenv("SOURCE_USER_AGENT", "MaxCodeGenAI/1.0"),
    )
