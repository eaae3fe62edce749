from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

from ai_news_ingest.core.constants import IMAGE_FALLBACK_POLICIES
from ai_news_ingest.core.errors import ConfigError

load_dotenv(dotenv_path=Path(__file__).resolve().parents[3] / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return raw in {"1", "true", "True", "yes", "YES"}


def _parse_csv_env(name: str) -> list[str]:
    """CSV 형태의 환경변수를 리스트로 파싱."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


# ==========================================
# 경로 설정
# ==========================================

REPO_ROOT = Path(__file__).resolve().parents[3]
DATA_DIR = Path(os.getenv("DATA_DIR", str(REPO_ROOT / "data")))

CATEGORIES_PATH = os.getenv("CATEGORIES_PATH", str(DATA_DIR / "article_categories.json"))
SOURCES_PATH = os.getenv("SOURCES_PATH", str(DATA_DIR / "ai_sources.tsv"))
YOUTUBE_CACHE_PATH = os.getenv("YOUTUBE_CACHE_PATH", str(DATA_DIR / ".cache" / "youtube_feeds.json"))

# ==========================================
# 수집 실행 설정
# ==========================================

MAX_SOURCES_PER_RUN = _env_int("MAX_SOURCES_PER_RUN", 30)
SELF_TEST_MAX_SOURCES = 2
SELF_TEST_MAX_ARTICLES = 5
MAX_ITEMS_PER_FEED = _env_int("MAX_ITEMS_PER_FEED", 15)
HF_MODELS_MAX_ITEMS = 15
ITEM_CONCURRENCY = max(1, _env_int("ITEM_CONCURRENCY", 4))
FEED_TIMEOUT_SEC = _env_int("FEED_TIMEOUT_SEC", 15)
YOUTUBE_RESOLVE_TIMEOUT_SEC = _env_int("YOUTUBE_RESOLVE_TIMEOUT_SEC", 10)
SELF_TEST = _env_bool("SELF_TEST", False)
AUTO_FETCH_NEWS_MINUTES = _env_int("AUTO_FETCH_NEWS_MINUTES", 0)
PORT = _env_int("PORT", 3001)

FEED_USER_AGENT = "Mozilla/5.0 (compatible; NewsFetcher/1.0; +https://example.com)"
FEED_ACCEPT = (
    "application/rss+xml, application/atom+xml, application/xml, text/xml;q=0.9, text/html;q=0.8"
)
HF_MODELS_API = "https://huggingface.co/api/models?sort=lastModified&direction=-1&limit=20"

# ==========================================
# 에디토리얼 재작성 (LLM)
# ==========================================

REWRITE_MAX_ATTEMPTS = _env_int("REWRITE_MAX_ATTEMPTS", 3)
REWRITE_BASE_DELAY_SEC = _env_float("REWRITE_BASE_DELAY_SEC", 1.0)
REWRITE_TEMPERATURE = 0.5
REWRITE_MAX_TOKENS = 1500
REWRITE_INPUT_MAX_CHARS = 3000

# ==========================================
# 이미지 백필
# ==========================================

IMAGE_BACKFILL_BATCH_SIZE = _env_int("IMAGE_BACKFILL_BATCH_SIZE", 15)
UNSPLASH_ACCESS_KEY = os.getenv("UNSPLASH_ACCESS_KEY", "").strip()
PIXABAY_API_KEY = os.getenv("PIXABAY_API_KEY", "").strip()

SERVER_URL = os.getenv("SERVER_URL", os.getenv("VITE_SERVER_URL", "")).strip()


def _default_image_fallback_policy() -> str:
    raw = (os.getenv("IMAGE_FALLBACK_POLICY", "fallback") or "fallback").strip().lower()
    if raw not in IMAGE_FALLBACK_POLICIES:
        return "fallback"
    return raw


def _parse_image_size(raw: str) -> tuple[int, int]:
    parts = (raw or "").lower().split("x")
    try:
        width, height = int(parts[0]), int(parts[1])
    except (IndexError, ValueError):
        return 1024, 576
    return width, height


@dataclass(frozen=True)
class OpenRouterConfig:
    api_key: str = os.getenv("OPENROUTER_API_KEY", "").strip()
    base_url: str = os.getenv("OPENROUTER_BASE_URL", "").strip() or "https://openrouter.ai/api/v1"
    model: str = os.getenv("OPENROUTER_DEFAULT_MODEL", "").strip() or "nvidia/nemotron-3-nano-30b-a3b:free"
    site_url: str = os.getenv("OPENROUTER_SITE_URL", "https://github.com/ai-news-ingest/ai-news-ingest")
    app_name: str = os.getenv("OPENROUTER_APP_NAME", "ai-news-ingest")
    timeout_sec: float = _env_float("OPENROUTER_TIMEOUT_SEC", 20.0)


@dataclass(frozen=True)
class ImageResolverConfig:
    hf_api_token: str = os.getenv("HF_API_TOKEN", "").strip()
    hf_image_model: str = os.getenv("HF_IMAGE_MODEL", "stabilityai/stable-diffusion-xl-base-1.0")
    hf_image_endpoint: str = os.getenv("HF_IMAGE_ENDPOINT", "")
    hf_image_size: tuple[int, int] = _parse_image_size(os.getenv("HF_IMAGE_SIZE", "1024x576"))
    hf_image_guidance: float = _env_float("HF_IMAGE_GUIDANCE", 7.0)
    hf_negative_prompt: str = os.getenv(
        "HF_IMAGE_NEGATIVE_PROMPT",
        "text, watermark, logo, politics, war, violence, weapons, gore",
    )
    hf_timeout_sec: int = _env_int("HF_IMAGE_TIMEOUT_SEC", 60)
    fallback_policy: str = _default_image_fallback_policy()

    @property
    def endpoint(self) -> str:
        if self.hf_image_endpoint:
            return self.hf_image_endpoint
        return f"https://router.huggingface.co/hf-inference/models/{self.hf_image_model}"


@dataclass(frozen=True)
class ServerSettings:
    """Credentials and endpoints the server refuses to start without."""

    supabase_url: str
    supabase_service_key: str
    admin_api_key: str
    allowed_origins: tuple[str, ...]
    openrouter_api_key: str

    @classmethod
    def from_env(cls) -> "ServerSettings":
        supabase_url = (os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "").strip()
        values = {
            "SUPABASE_URL": supabase_url,
            "SUPABASE_SERVICE_ROLE_KEY": os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip(),
            "ADMIN_API_KEY": os.getenv("ADMIN_API_KEY", "").strip(),
            "API_ALLOWED_ORIGINS": os.getenv("API_ALLOWED_ORIGINS", "").strip(),
            "OPENROUTER_API_KEY": os.getenv("OPENROUTER_API_KEY", "").strip(),
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")
        origins = tuple(_parse_csv_env("API_ALLOWED_ORIGINS"))
        if not origins:
            raise ConfigError("API_ALLOWED_ORIGINS must contain at least one domain.")
        return cls(
            supabase_url=supabase_url,
            supabase_service_key=values["SUPABASE_SERVICE_ROLE_KEY"],
            admin_api_key=values["ADMIN_API_KEY"],
            allowed_origins=origins,
            openrouter_api_key=values["OPENROUTER_API_KEY"],
        )

    @property
    def supabase_project_ref(self) -> str | None:
        try:
            hostname = urlparse(self.supabase_url).hostname or ""
        except ValueError:
            return None
        return hostname.split(".")[0] or None
