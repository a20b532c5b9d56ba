"""Descriptions, breadcrumbs and JSON-LD for tag and category archive pages."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from .common import absolute_url, strip_markup, truncate
from .config import SCHEMA_LIST_LIMIT, SITE_AUTHOR
from .models import ContentItem, TaxonomyTerm

__all__ = [
    "TAXONOMY_KINDS",
    "GENERIC_DESCRIPTION_PATTERNS",
    "TITLE_LIMIT",
    "term_path",
    "is_generic_description",
    "describe_term",
    "build_breadcrumbs",
    "breadcrumb_schema",
    "build_term_schema",
    "posts_for_term",
]

# kind -> (archive path prefix, index label, index path)
TAXONOMY_KINDS = {
    "tag": ("/tag/", "Tags", "/tags/"),
    "category": ("/category/", "Categories", "/categories/"),
}

# Descriptions WordPress or old SEO plugins filled in automatically.
GENERIC_DESCRIPTION_PATTERNS = (
    re.compile(r"^\s*$"),
    re.compile(r"^(posts|articles)\s+(tagged|filed under|in|about)\b", re.I),
    re.compile(r"^(tag|category)\s*(archive|archives)?\s*:", re.I),
    re.compile(r"^archives?\s+for\b", re.I),
)

TITLE_LIMIT = 50


def _kind(kind: str) -> tuple[str, str, str]:
    try:
        return TAXONOMY_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown taxonomy kind {kind!r}") from None


def term_path(term: TaxonomyTerm, kind: str) -> str:
    prefix, _label, _index = _kind(kind)
    return f"{prefix}{term.slug}/"


def is_generic_description(description: str | None, term_name: str = "") -> bool:
    text = strip_markup(description)
    if not text:
        return True
    if term_name and text.lower() == term_name.strip().lower():
        return True
    return any(pattern.search(text) for pattern in GENERIC_DESCRIPTION_PATTERNS)


def _post_title(post: ContentItem) -> str:
    return truncate(strip_markup(post.title), TITLE_LIMIT)


def describe_term(term: TaxonomyTerm, posts: Sequence[ContentItem]) -> str:
    """Return a meta description for a tag/category archive.

    A hand-written description on the term wins.  Otherwise the text is
    generated from the posts: with three or more, the first two titles are
    quoted as examples.
    """

    if not is_generic_description(term.description, term.name):
        return term.description.strip()

    posts = list(posts or ())
    count = term.count or len(posts)
    name = term.name

    if len(posts) >= 3:
        first, second = _post_title(posts[0]), _post_title(posts[1])
        return (
            f"Explore {count} articles about {name} by {SITE_AUTHOR}, "
            f'including "{first}" and "{second}".'
        )
    if posts:
        noun = "article" if count == 1 else "articles"
        return f"{count} {noun} about {name} by {SITE_AUTHOR}."
    return f"Articles and insights about {name} by {SITE_AUTHOR}."


def build_breadcrumbs(term: TaxonomyTerm, kind: str) -> list[dict]:
    """Home -> Tags/Categories -> term, with 1-based positions."""

    _prefix, label, index_path = _kind(kind)
    trail = (
        ("Home", "/"),
        (label, index_path),
        (term.name, term_path(term, kind)),
    )
    return [
        {"name": name, "url": absolute_url(path), "position": position}
        for position, (name, path) in enumerate(trail, start=1)
    ]


def breadcrumb_schema(crumbs: Iterable[dict]) -> dict:
    return {
        "@type": "BreadcrumbList",
        "itemListElement": [
            {
                "@type": "ListItem",
                "position": crumb["position"],
                "name": crumb["name"],
                "item": crumb["url"],
            }
            for crumb in crumbs
        ],
    }


def _list_item(position: int, post: ContentItem) -> dict:
    item = {
        "@type": "ListItem",
        "position": position,
        "url": absolute_url(post.uri),
        "name": strip_markup(post.title),
    }
    if post.date is not None:
        item["datePublished"] = post.date.date().isoformat()
    return item


def build_term_schema(term: TaxonomyTerm, posts: Sequence[ContentItem], kind: str) -> dict:
    """CollectionPage document for a tag/category archive."""

    url = absolute_url(term_path(term, kind))
    document = {
        "@context": "https://schema.org",
        "@type": "CollectionPage",
        "name": term.name,
        "description": describe_term(term, posts),
        "url": url,
        "breadcrumb": breadcrumb_schema(build_breadcrumbs(term, kind)),
    }
    posts = list(posts or ())
    if posts:
        listed = posts[:SCHEMA_LIST_LIMIT]
        document["mainEntity"] = {
            "@type": "ItemList",
            "numberOfItems": len(listed),
            "itemListElement": [
                _list_item(position, post) for position, post in enumerate(listed, start=1)
            ],
        }
    return document


def posts_for_term(posts: Iterable[ContentItem], slug: str, kind: str) -> list[ContentItem]:
    """Loaded posts that reference the term ``slug``."""

    _kind(kind)
    matched = []
    for post in posts:
        refs = post.tags if kind == "tag" else post.categories
        if any(ref.slug == slug for ref in refs):
            matched.append(post)
    return matched
