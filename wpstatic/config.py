"""Settings for the static build, read from the environment with defaults."""

from __future__ import annotations

import os
import pathlib


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    return raw or default


def _env_int(name: str, default: int) -> int:
    """Return an integer from the environment or ``default`` on failure."""

    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        print(f"[WARN] Invalid {name}={raw!r}; falling back to {default}")
        return default


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# ------------------ Paths ------------------
ROOT = pathlib.Path(__file__).resolve().parent.parent
OUTPUT_DIR = pathlib.Path(os.getenv("WPSTATIC_OUTPUT_DIR") or (ROOT / "public"))
HEALTH_DIR = ROOT / "_health"

# ------------------ Site ------------------
PRIMARY_DOMAIN = _env_str("PRIMARY_DOMAIN", "dragosroua.com")
MEDIA_DOMAIN = _env_str("MEDIA_DOMAIN", "wp.dragosroua.com")
SITE_URL = _env_str("SITE_URL", f"https://{PRIMARY_DOMAIN}").rstrip("/")
MEDIA_URL = _env_str("MEDIA_URL", f"https://{MEDIA_DOMAIN}").rstrip("/")
SITE_NAME = _env_str("SITE_NAME", "Dragos Roua")
SITE_AUTHOR = _env_str("SITE_AUTHOR", "Dragos Roua")
SITE_TAGLINE = _env_str(
    "SITE_TAGLINE",
    "Productivity, personal development and running, written by Dragos Roua.",
)
AUTHOR_SAME_AS = (
    "https://twitter.com/dragosroua",
    "https://www.linkedin.com/in/dragosroua",
    "https://github.com/dragosroua",
)

UPLOADS_PATH = "/wp-content/uploads/"
TRACKING_PIXEL_HOST = _env_str("TRACKING_PIXEL_HOST", "feeds.feedburner.com")

# ------------------ Content source ------------------
WP_GRAPHQL_URL = _env_str("WP_GRAPHQL_URL", f"{MEDIA_URL}/graphql")
HTTP_TIMEOUT = _env_int("HTTP_TIMEOUT", 30)
GRAPHQL_PAGE_SIZE = _env_int("GRAPHQL_PAGE_SIZE", 100)
DEV_MODE = _env_flag("WPSTATIC_DEV")
DEV_POST_LIMIT = _env_int("DEV_POST_LIMIT", 500)
CACHE_TTL_SECONDS = _env_int("CACHE_TTL_SECONDS", 60 * 60)
USER_AGENT = _env_str("WPSTATIC_USER_AGENT", "Mozilla/5.0 (wpstatic build)")

# ------------------ Listings ------------------
SITEMAP_PAGE_SIZE = _env_int("SITEMAP_PAGE_SIZE", 20)
SCHEMA_LIST_LIMIT = 20
EXCERPT_WORDS = _env_int("EXCERPT_WORDS", 20)
META_DESCRIPTION_WORDS = _env_int("META_DESCRIPTION_WORDS", 30)

# Image widths used when a template needs a display variant.
DEFAULT_IMAGE_WIDTH = 800
DEFAULT_IMAGE_HEIGHT = 600
CARD_IMAGE_WIDTH = _env_int("CARD_IMAGE_WIDTH", 600)
