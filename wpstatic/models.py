"""Value objects for content fetched from WordPress and for sitemap output."""

from __future__ import annotations

import dataclasses
import datetime as _dt
from typing import Any

from .common import parse_datetime

__all__ = [
    "SizeVariant",
    "ImageRef",
    "SeoFields",
    "TermRef",
    "ContentItem",
    "TaxonomyTerm",
    "SitemapEntry",
    "CHANGE_FREQUENCIES",
]

CHANGE_FREQUENCIES = ("yearly", "monthly", "weekly", "daily")


def _text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    return str(value).strip()


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _nodes(value: Any) -> list[dict]:
    """Unwrap GraphQL connections (``{"nodes": [...]}``) or plain lists."""

    if isinstance(value, dict):
        value = value.get("nodes")
    if not isinstance(value, list):
        return []
    return [node for node in value if isinstance(node, dict)]


@dataclasses.dataclass(frozen=True, slots=True)
class SizeVariant:
    url: str
    width: int
    height: int | None = None
    name: str = ""
    synthesized: bool = False

    @classmethod
    def from_node(cls, node: dict) -> "SizeVariant | None":
        url = _text(node.get("sourceUrl") or node.get("url"))
        width = _int_or_none(node.get("width"))
        if not url or not width:
            return None
        return cls(
            url=url,
            width=width,
            height=_int_or_none(node.get("height")),
            name=_text(node.get("name")),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ImageRef:
    source_url: str
    alt_text: str = ""
    width: int | None = None
    height: int | None = None
    variants: tuple[SizeVariant, ...] = ()

    @classmethod
    def from_node(cls, node: Any) -> "ImageRef | None":
        """Build from ``featuredImage`` (``{"node": {...}}``) or its inner node."""

        if not isinstance(node, dict):
            return None
        if isinstance(node.get("node"), dict):
            node = node["node"]
        source_url = _text(node.get("sourceUrl"))
        if not source_url:
            return None
        details = node.get("mediaDetails") or {}
        variants = []
        for size in details.get("sizes") or ():
            if not isinstance(size, dict):
                continue
            variant = SizeVariant.from_node(size)
            if variant is not None:
                variants.append(variant)
        return cls(
            source_url=source_url,
            alt_text=_text(node.get("altText")),
            width=_int_or_none(details.get("width")),
            height=_int_or_none(details.get("height")),
            variants=tuple(variants),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class SeoFields:
    title: str = ""
    meta_desc: str = ""
    canonical: str = ""
    opengraph_title: str = ""
    opengraph_description: str = ""
    opengraph_image: str = ""
    schema_raw: str = ""

    @classmethod
    def from_node(cls, node: Any) -> "SeoFields | None":
        if not isinstance(node, dict):
            return None
        og_image = node.get("opengraphImage") or {}
        schema = node.get("schema") or {}
        return cls(
            title=_text(node.get("title")),
            meta_desc=_text(node.get("metaDesc")),
            canonical=_text(node.get("canonical")),
            opengraph_title=_text(node.get("opengraphTitle")),
            opengraph_description=_text(node.get("opengraphDescription")),
            opengraph_image=_text(og_image.get("sourceUrl") if isinstance(og_image, dict) else ""),
            schema_raw=_text(schema.get("raw") if isinstance(schema, dict) else ""),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class TermRef:
    id: str
    name: str
    slug: str

    @classmethod
    def from_node(cls, node: dict) -> "TermRef":
        return cls(id=_text(node.get("id")), name=_text(node.get("name")), slug=_text(node.get("slug")))


@dataclasses.dataclass(frozen=True, slots=True)
class ContentItem:
    """A post or a page as delivered by WPGraphQL."""

    id: str
    title: str
    slug: str
    uri: str
    content: str
    date: _dt.datetime | None = None
    modified: _dt.datetime | None = None
    database_id: int | None = None
    featured_image: ImageRef | None = None
    seo: SeoFields | None = None
    tags: tuple[TermRef, ...] = ()
    categories: tuple[TermRef, ...] = ()

    @classmethod
    def from_node(cls, node: dict) -> "ContentItem":
        slug = _text(node.get("slug"))
        uri = _text(node.get("uri")) or (f"/{slug}/" if slug else "/")
        return cls(
            id=_text(node.get("id")),
            database_id=_int_or_none(node.get("databaseId")),
            title=_text(node.get("title")),
            slug=slug,
            uri=uri,
            content=node.get("content") or "",
            date=parse_datetime(node.get("date")),
            modified=parse_datetime(node.get("modified")),
            featured_image=ImageRef.from_node(node.get("featuredImage")),
            seo=SeoFields.from_node(node.get("seo")),
            tags=tuple(TermRef.from_node(tag) for tag in _nodes(node.get("tags"))),
            categories=tuple(TermRef.from_node(cat) for cat in _nodes(node.get("categories"))),
        )

    @property
    def last_modified(self) -> _dt.datetime | None:
        return self.modified or self.date

    @property
    def path(self) -> str:
        return self.uri

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True, slots=True)
class TaxonomyTerm:
    id: str
    name: str
    slug: str
    count: int = 0
    description: str = ""

    @classmethod
    def from_node(cls, node: dict) -> "TaxonomyTerm":
        return cls(
            id=_text(node.get("id")),
            name=_text(node.get("name")),
            slug=_text(node.get("slug")),
            count=_int_or_none(node.get("count")) or 0,
            description=_text(node.get("description")),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class SitemapEntry:
    url: str
    lastmod: _dt.date
    changefreq: str = "monthly"
    priority: float = 0.5

    def __post_init__(self) -> None:
        if self.changefreq not in CHANGE_FREQUENCIES:
            raise ValueError(f"Unsupported changefreq {self.changefreq!r}")
        if not 0.0 <= self.priority <= 1.0:
            raise ValueError(f"Priority out of range: {self.priority}")
