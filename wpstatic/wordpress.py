"""Fetch posts, pages, tags and categories from the WPGraphQL endpoint.

Every resource is read with a cursor loop (``first``/``after``): a page is
awaited before the next one is requested.  The four resources are independent
and ``fetch_site_content`` requests them concurrently.  Any HTTP or GraphQL
error aborts the fetch with :class:`ContentSourceError`; there are no retries.
"""

from __future__ import annotations

import asyncio
import dataclasses
import sys
from typing import Any, Iterable

import aiohttp

from .cache import TimedCache, default_cache
from .config import (
    DEV_MODE,
    DEV_POST_LIMIT,
    GRAPHQL_PAGE_SIZE,
    HTTP_TIMEOUT,
    USER_AGENT,
    WP_GRAPHQL_URL,
)
from .models import ContentItem, TaxonomyTerm
from .taxonomy import posts_for_term

__all__ = [
    "ContentSourceError",
    "SiteContent",
    "WordPressClient",
    "fetch_site_content",
    "get_posts_by_tag",
    "get_posts_by_category",
    "slug_from_uri",
]

_IMAGE_FIELDS = """
    featuredImage {
      node {
        sourceUrl
        altText
        mediaDetails {
          width
          height
          sizes { sourceUrl name width height }
        }
      }
    }
"""

_SEO_FIELDS = """
    seo {
      title
      metaDesc
      canonical
      opengraphTitle
      opengraphDescription
      opengraphImage { sourceUrl }
      schema { raw }
    }
"""

_TERM_FIELDS = "id name slug count description"

POSTS_QUERY = (
    """
query GetAllPosts($first: Int!, $after: String) {
  posts(first: $first, after: $after, where: {status: PUBLISH}) {
    pageInfo { hasNextPage endCursor }
    nodes {
      id databaseId title slug uri content date modified
"""
    + _IMAGE_FIELDS
    + _SEO_FIELDS
    + """
      tags { nodes { id name slug } }
      categories { nodes { id name slug } }
    }
  }
}
"""
)

PAGES_QUERY = (
    """
query GetAllPages($first: Int!, $after: String) {
  pages(first: $first, after: $after, where: {status: PUBLISH}) {
    pageInfo { hasNextPage endCursor }
    nodes {
      id databaseId title slug uri content date modified
"""
    + _IMAGE_FIELDS
    + _SEO_FIELDS
    + """
    }
  }
}
"""
)

TAGS_QUERY = f"""
query GetAllTags($first: Int!, $after: String) {{
  tags(first: $first, after: $after, where: {{hideEmpty: true}}) {{
    pageInfo {{ hasNextPage endCursor }}
    nodes {{ {_TERM_FIELDS} }}
  }}
}}
"""

CATEGORIES_QUERY = f"""
query GetAllCategories($first: Int!, $after: String) {{
  categories(first: $first, after: $after, where: {{hideEmpty: true}}) {{
    pageInfo {{ hasNextPage endCursor }}
    nodes {{ {_TERM_FIELDS} }}
  }}
}}
"""


class ContentSourceError(RuntimeError):
    """The GraphQL endpoint answered with an HTTP error or an ``errors`` payload."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclasses.dataclass(slots=True)
class SiteContent:
    posts: list[ContentItem]
    pages: list[ContentItem]
    tags: list[TaxonomyTerm]
    categories: list[TaxonomyTerm]


def _keep_with_content(items: Iterable[ContentItem], label: str) -> list[ContentItem]:
    kept = []
    for item in items:
        if not item.content:
            print(f"[WARN] Skipping {label} {item.title!r}: no content", file=sys.stderr)
            continue
        kept.append(item)
    return kept


class WordPressClient:
    """Thin async client for the WPGraphQL endpoint.

    Pass an existing ``aiohttp.ClientSession`` to share connections; otherwise
    use the client as an async context manager so it owns one.
    """

    def __init__(
        self,
        endpoint: str = WP_GRAPHQL_URL,
        *,
        session: aiohttp.ClientSession | None = None,
        cache: TimedCache | None = None,
        dev_mode: bool = DEV_MODE,
        dev_post_limit: int = DEV_POST_LIMIT,
        page_size: int = GRAPHQL_PAGE_SIZE,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint
        self.cache = cache if cache is not None else default_cache
        self.dev_mode = dev_mode
        self.dev_post_limit = dev_post_limit
        self.page_size = page_size
        self.timeout = timeout
        self._session = session
        self._owns_session = False

    async def __aenter__(self) -> "WordPressClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_session = True
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def query(self, query: str, variables: dict[str, Any] | None = None) -> dict:
        """POST one GraphQL query and return its ``data`` member."""

        if self._session is None:
            raise RuntimeError("WordPressClient used outside of 'async with' and without a session")
        payload = {"query": query, "variables": variables or {}}
        async with self._session.post(
            self.endpoint,
            json=payload,
            headers={"Content-Type": "application/json"},
        ) as response:
            if response.status < 200 or response.status >= 300:
                body = await response.text()
                print(f"[ERROR] GraphQL HTTP {response.status}: {body[:500]}", file=sys.stderr)
                raise ContentSourceError(f"GraphQL HTTP error: {response.status}", status=response.status)
            document = await response.json()

        errors = document.get("errors") if isinstance(document, dict) else None
        if errors:
            for error in errors:
                message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
                print(f"[ERROR] GraphQL: {message}", file=sys.stderr)
            first = errors[0]
            message = first.get("message", "unknown error") if isinstance(first, dict) else str(first)
            raise ContentSourceError(f"GraphQL query failed: {message}", status=response.status)
        data = document.get("data") if isinstance(document, dict) else None
        if not isinstance(data, dict):
            raise ContentSourceError("GraphQL response carried no data", status=response.status)
        return data

    async def fetch_nodes(self, resource: str, query: str, *, limit: int | None = None) -> list[dict]:
        """Follow ``pageInfo.endCursor`` until ``hasNextPage`` is false."""

        nodes: list[dict] = []
        cursor: str | None = None
        batch = 0
        while True:
            if limit is not None and len(nodes) >= limit:
                print(f"[INFO] Reached limit of {limit} {resource}")
                break
            data = await self.query(query, {"first": self.page_size, "after": cursor})
            connection = data.get(resource) or {}
            page_nodes = [node for node in connection.get("nodes") or () if isinstance(node, dict)]
            nodes.extend(page_nodes)
            batch += 1
            print(f"[INFO] {resource} batch {batch}: {len(page_nodes)} (total {len(nodes)})")
            page_info = connection.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor:
                break
        return nodes

    async def get_all_posts(self) -> list[ContentItem]:
        async def _fetch() -> list[ContentItem]:
            limit = self.dev_post_limit if self.dev_mode else None
            nodes = await self.fetch_nodes("posts", POSTS_QUERY, limit=limit)
            posts = _keep_with_content((ContentItem.from_node(node) for node in nodes), "post")
            print(f"[INFO] {len(posts)} of {len(nodes)} posts have content")
            return posts

        return await self.cache.get_or_fetch("all-posts", _fetch)

    async def get_all_pages(self) -> list[ContentItem]:
        async def _fetch() -> list[ContentItem]:
            nodes = await self.fetch_nodes("pages", PAGES_QUERY)
            return _keep_with_content((ContentItem.from_node(node) for node in nodes), "page")

        return await self.cache.get_or_fetch("all-pages", _fetch)

    async def get_all_tags(self) -> list[TaxonomyTerm]:
        async def _fetch() -> list[TaxonomyTerm]:
            return [TaxonomyTerm.from_node(node) for node in await self.fetch_nodes("tags", TAGS_QUERY)]

        return await self.cache.get_or_fetch("all-tags", _fetch)

    async def get_all_categories(self) -> list[TaxonomyTerm]:
        async def _fetch() -> list[TaxonomyTerm]:
            nodes = await self.fetch_nodes("categories", CATEGORIES_QUERY)
            return [TaxonomyTerm.from_node(node) for node in nodes]

        return await self.cache.get_or_fetch("all-categories", _fetch)


async def fetch_site_content(client: WordPressClient) -> SiteContent:
    posts, pages, tags, categories = await asyncio.gather(
        client.get_all_posts(),
        client.get_all_pages(),
        client.get_all_tags(),
        client.get_all_categories(),
    )
    return SiteContent(posts=posts, pages=pages, tags=tags, categories=categories)


def get_posts_by_tag(posts: Iterable[ContentItem], tag_slug: str) -> list[ContentItem]:
    return posts_for_term(posts, tag_slug, "tag")


def get_posts_by_category(posts: Iterable[ContentItem], category_slug: str) -> list[ContentItem]:
    return posts_for_term(posts, category_slug, "category")


def slug_from_uri(uri: str) -> str:
    """``/2019/05/some-post/`` -> ``2019/05/some-post/``."""

    return uri[1:] if uri.startswith("/") else uri
