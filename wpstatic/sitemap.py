"""Aggregate posts, pages and taxonomy terms into the sitemap.

Entries are produced in a fixed order: static routes, monthly archives, blog
pagination, categories, tags, posts, pages.  The first occurrence of a URL
wins, so a WordPress page that shadows a static route (``/about/``) keeps the
static route's priority.
"""

from __future__ import annotations

import datetime as _dt
import math
import pathlib
from typing import Iterable, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .common import absolute_url, to_date
from .config import SITEMAP_PAGE_SIZE
from .models import ContentItem, SitemapEntry, TaxonomyTerm
from .taxonomy import posts_for_term, term_path

__all__ = [
    "STATIC_ROUTES",
    "STRATEGIC_TERM_PRIORITIES",
    "DEFAULT_CATEGORY_PRIORITY",
    "DEFAULT_TAG_PRIORITY",
    "SITEMAP_HEADERS",
    "build_sitemap_entries",
    "render_sitemap",
    "sitemap_response",
]

TEMPLATE_DIR = pathlib.Path(__file__).resolve().parent / "templates"

# (path, priority, changefreq)
STATIC_ROUTES = (
    ("/", 1.0, "daily"),
    ("/blog/", 0.9, "daily"),
    ("/categories/", 0.8, "weekly"),
    ("/tags/", 0.6, "weekly"),
    ("/about/", 0.7, "monthly"),
    ("/books/", 0.7, "monthly"),
    ("/work-with-me/", 0.7, "monthly"),
    ("/assess-decide-do/", 0.6, "monthly"),
    ("/privacy-policy/", 0.3, "yearly"),
    ("/terms-and-conditions/", 0.3, "yearly"),
)

STRATEGIC_TERM_PRIORITIES = {
    "productivity": 0.8,
    "personal-development": 0.8,
    "assess-decide-do": 0.8,
    "running": 0.7,
    "minimalism": 0.7,
    "relationships": 0.7,
    "blogging": 0.7,
    "lifestyle-design": 0.7,
}
DEFAULT_CATEGORY_PRIORITY = 0.6
DEFAULT_TAG_PRIORITY = 0.4
ARCHIVE_PRIORITY = 0.3
BLOG_PAGE_PRIORITY = 0.5
TERM_PAGE_PRIORITY = 0.3
POST_PRIORITY = 0.7
PAGE_PRIORITY = 0.6

SITEMAP_HEADERS = {
    "Content-Type": "application/xml",
    "Cache-Control": "public, max-age=86400",
}


def _page_count(total: int, per_page: int = SITEMAP_PAGE_SIZE) -> int:
    if total <= 0 or per_page <= 0:
        return 0
    return math.ceil(total / per_page)


def _item_date(item: ContentItem, fallback: _dt.date) -> _dt.date:
    return to_date(item.last_modified) or fallback


class _EntryList:
    """Ordered entries with first-wins URL deduplication."""

    def __init__(self) -> None:
        self.entries: list[SitemapEntry] = []
        self._seen: set[str] = set()

    def add(self, path: str, lastmod: _dt.date, changefreq: str, priority: float) -> bool:
        url = absolute_url(path)
        if url in self._seen:
            return False
        self._seen.add(url)
        self.entries.append(SitemapEntry(url=url, lastmod=lastmod, changefreq=changefreq, priority=priority))
        return True


def _monthly_archives(posts: Iterable[ContentItem]) -> list[tuple[int, int, _dt.date]]:
    latest: dict[tuple[int, int], _dt.date] = {}
    for post in posts:
        if post.date is None:
            continue
        key = (post.date.year, post.date.month)
        day = post.date.date()
        if key not in latest or day > latest[key]:
            latest[key] = day
    return [(year, month, latest[(year, month)]) for year, month in sorted(latest, reverse=True)]


def _term_priority(term: TaxonomyTerm, kind: str) -> float:
    if term.slug in STRATEGIC_TERM_PRIORITIES:
        return STRATEGIC_TERM_PRIORITIES[term.slug]
    return DEFAULT_CATEGORY_PRIORITY if kind == "category" else DEFAULT_TAG_PRIORITY


def _add_terms(
    result: _EntryList,
    terms: Iterable[TaxonomyTerm],
    posts: Sequence[ContentItem],
    kind: str,
    today: _dt.date,
) -> None:
    for term in terms:
        if term.count <= 0 or not term.slug:
            continue
        tagged = posts_for_term(posts, term.slug, kind)
        dates = [to_date(post.last_modified) for post in tagged if post.last_modified is not None]
        lastmod = max(dates) if dates else today
        path = term_path(term, kind)
        result.add(path, lastmod, "weekly", _term_priority(term, kind))
        # count comes from WordPress and may exceed the posts loaded in dev mode
        for page in range(2, _page_count(term.count) + 1):
            result.add(f"{path}{page}/", lastmod, "weekly", TERM_PAGE_PRIORITY)


def build_sitemap_entries(
    posts: Sequence[ContentItem],
    pages: Sequence[ContentItem],
    categories: Iterable[TaxonomyTerm],
    tags: Iterable[TaxonomyTerm],
    today: _dt.date | None = None,
) -> list[SitemapEntry]:
    today = today or _dt.date.today()
    posts = list(posts or ())
    result = _EntryList()

    for path, priority, changefreq in STATIC_ROUTES:
        result.add(path, today, changefreq, priority)

    for year, month, lastmod in _monthly_archives(posts):
        result.add(f"/{year:04d}/{month:02d}/", lastmod, "monthly", ARCHIVE_PRIORITY)

    for page in range(2, _page_count(len(posts)) + 1):
        result.add(f"/blog/{page}/", today, "daily", BLOG_PAGE_PRIORITY)

    _add_terms(result, categories or (), posts, "category", today)
    _add_terms(result, tags or (), posts, "tag", today)

    for post in posts:
        result.add(post.uri, _item_date(post, today), "monthly", POST_PRIORITY)
    for page in pages or ():
        result.add(page.uri, _item_date(page, today), "monthly", PAGE_PRIORITY)

    return result.entries


def _isodate(value: _dt.date) -> str:
    if isinstance(value, _dt.datetime):
        value = value.date()
    return value.isoformat()


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["xml"]),
    )
    env.filters["isodate"] = _isodate
    return env


def render_sitemap(entries: Sequence[SitemapEntry]) -> str:
    template = _environment().get_template("sitemap.xml")
    return template.render(entries=entries) + "\n"


def sitemap_response(entries: Sequence[SitemapEntry]) -> tuple[str, dict[str, str]]:
    """Body and HTTP headers for serving the sitemap."""

    return render_sitemap(entries), dict(SITEMAP_HEADERS)
