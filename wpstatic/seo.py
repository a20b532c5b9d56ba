"""Page-level SEO metadata and JSON-LD documents."""

from __future__ import annotations

import json
import sys
from typing import Any

from .common import absolute_url, excerpt, strip_markup
from .config import (
    AUTHOR_SAME_AS,
    MEDIA_URL,
    META_DESCRIPTION_WORDS,
    SITE_AUTHOR,
    SITE_NAME,
    SITE_TAGLINE,
    SITE_URL,
    UPLOADS_PATH,
)
from .models import ContentItem

__all__ = [
    "to_json_ld",
    "clean_schema",
    "website_schema",
    "person_schema",
    "webpage_schema",
    "canonical_url",
    "page_meta",
]

_LEGACY_PREFIXES = (
    "http://www." + SITE_URL.split("://", 1)[-1],
    "https://www." + SITE_URL.split("://", 1)[-1],
    "http://" + SITE_URL.split("://", 1)[-1],
)


def to_json_ld(document: dict) -> str:
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


def _canonicalize(value: str) -> str:
    """Point legacy hosts and non-upload media URLs at the static site."""

    for prefix in _LEGACY_PREFIXES:
        if value.startswith(prefix):
            value = SITE_URL + value[len(prefix):]
            break
    if value.startswith(MEDIA_URL) and not value.startswith(MEDIA_URL + UPLOADS_PATH):
        value = SITE_URL + value[len(MEDIA_URL):]
    return value


def _walk(node: Any) -> Any:
    if isinstance(node, dict):
        return {key: _walk(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_walk(value) for value in node]
    if isinstance(node, str):
        return _canonicalize(node)
    return node


def clean_schema(raw: str | None) -> str:
    """Rewrite URLs inside a Yoast ``schema.raw`` payload.

    Malformed payloads are reported and returned unchanged.
    """

    if not raw:
        return ""
    try:
        document = json.loads(raw)
        return to_json_ld(_walk(document))
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        print(f"[WARN] Could not clean structured data: {exc}", file=sys.stderr)
        return raw


def website_schema() -> dict:
    return {
        "@context": "https://schema.org",
        "@type": "WebSite",
        "name": SITE_NAME,
        "url": SITE_URL + "/",
        "description": SITE_TAGLINE,
        "publisher": {"@type": "Person", "name": SITE_AUTHOR},
    }


def person_schema() -> dict:
    return {
        "@context": "https://schema.org",
        "@type": "Person",
        "name": SITE_AUTHOR,
        "url": absolute_url("/about/"),
        "sameAs": list(AUTHOR_SAME_AS),
    }


def canonical_url(item: ContentItem) -> str:
    if item.seo is not None and item.seo.canonical:
        return _canonicalize(item.seo.canonical)
    return absolute_url(item.uri)


def webpage_schema(item: ContentItem, description: str = "") -> dict:
    document = {
        "@context": "https://schema.org",
        "@type": "WebPage",
        "name": strip_markup(item.title),
        "url": canonical_url(item),
        "author": {"@type": "Person", "name": SITE_AUTHOR},
        "isPartOf": {"@type": "WebSite", "name": SITE_NAME, "url": SITE_URL + "/"},
    }
    if description:
        document["description"] = description
    if item.date is not None:
        document["datePublished"] = item.date.date().isoformat()
    if item.last_modified is not None:
        document["dateModified"] = item.last_modified.date().isoformat()
    if item.featured_image is not None:
        document["primaryImageOfPage"] = {
            "@type": "ImageObject",
            "url": item.featured_image.source_url,
        }
    return document


def page_meta(item: ContentItem) -> dict:
    """Title, description, canonical URL and JSON-LD for one post or page."""

    seo = item.seo
    title = strip_markup(seo.title) if seo is not None and seo.title else strip_markup(item.title)
    if seo is not None and seo.meta_desc:
        description = strip_markup(seo.meta_desc)
    else:
        description = excerpt(item.content, META_DESCRIPTION_WORDS)
    if seo is not None and seo.schema_raw:
        schema = clean_schema(seo.schema_raw)
    else:
        schema = to_json_ld(webpage_schema(item, description))
    image = ""
    if seo is not None and seo.opengraph_image:
        image = seo.opengraph_image
    elif item.featured_image is not None:
        image = item.featured_image.source_url
    return {
        "title": title,
        "description": description,
        "canonical": canonical_url(item),
        "og_image": image,
        "schema": schema,
    }
