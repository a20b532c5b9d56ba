#!/usr/bin/env python3
"""Fetch WordPress content and write the static build data and sitemap.

Run:
  python -m wpstatic.build [--output-dir public] [--dev]

Writes ``data/{posts,pages,tags,categories}.json``, ``sitemap.xml`` and
``_headers`` under the output directory and a heartbeat file under
``_health/build.json``.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import datetime as _dt
import json
import pathlib
import sys
from typing import Any, Sequence

import aiohttp

from .common import excerpt
from .config import (
    CARD_IMAGE_WIDTH,
    DEV_MODE,
    EXCERPT_WORDS,
    HEALTH_DIR,
    OUTPUT_DIR,
    WP_GRAPHQL_URL,
)
from .images import select_image
from .models import ContentItem, TaxonomyTerm
from .report import BuildReport
from .rewrite import RewriteStats, rewrite_item
from .seo import page_meta, to_json_ld
from .sitemap import SITEMAP_HEADERS, build_sitemap_entries, render_sitemap
from .taxonomy import build_breadcrumbs, build_term_schema, describe_term, posts_for_term, term_path
from .wordpress import ContentSourceError, SiteContent, WordPressClient, fetch_site_content


def _json_default(value: Any) -> Any:
    if isinstance(value, (_dt.datetime, _dt.date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_json(path: pathlib.Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default)
    path.write_text(text + "\n", encoding="utf-8")


def item_record(item: ContentItem) -> dict:
    record = item.to_dict()
    record["excerpt"] = excerpt(item.content, EXCERPT_WORDS)
    record["meta"] = page_meta(item)
    card = select_image(item.featured_image, CARD_IMAGE_WIDTH)
    record["card_image"] = dataclasses.asdict(card) if card is not None else None
    return record


def term_record(term: TaxonomyTerm, posts: Sequence[ContentItem], kind: str) -> dict:
    tagged = posts_for_term(posts, term.slug, kind)
    return {
        **dataclasses.asdict(term),
        "path": term_path(term, kind),
        "description": describe_term(term, tagged),
        "breadcrumbs": build_breadcrumbs(term, kind),
        "schema": to_json_ld(build_term_schema(term, tagged, kind)),
        "loaded_posts": len(tagged),
    }


def _headers_file() -> str:
    lines = ["/sitemap.xml"]
    lines.extend(f"  {name}: {value}" for name, value in SITEMAP_HEADERS.items())
    return "\n".join(lines) + "\n"


def build_site(
    content: SiteContent,
    output_dir: pathlib.Path,
    *,
    stats: RewriteStats | None = None,
    today: _dt.date | None = None,
) -> dict[str, int]:
    """Rewrite ``content`` and write every build artefact to ``output_dir``."""

    stats = stats if stats is not None else RewriteStats()
    posts = [rewrite_item(post, stats) for post in content.posts]
    pages = [rewrite_item(page, stats) for page in content.pages]

    data_dir = output_dir / "data"
    write_json(data_dir / "posts.json", [item_record(post) for post in posts])
    write_json(data_dir / "pages.json", [item_record(page) for page in pages])
    write_json(data_dir / "categories.json", [term_record(term, posts, "category") for term in content.categories])
    write_json(data_dir / "tags.json", [term_record(term, posts, "tag") for term in content.tags])

    entries = build_sitemap_entries(posts, pages, content.categories, content.tags, today=today)
    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / "sitemap.xml").write_text(render_sitemap(entries), encoding="utf-8")
    (output_dir / "_headers").write_text(_headers_file(), encoding="utf-8")

    return {
        "posts": len(posts),
        "pages": len(pages),
        "categories": len(content.categories),
        "tags": len(content.tags),
        "sitemap_urls": len(entries),
    }


async def fetch_content(endpoint: str, *, dev_mode: bool) -> SiteContent:
    async with WordPressClient(endpoint, dev_mode=dev_mode) as client:
        return await fetch_site_content(client)


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--output-dir", type=pathlib.Path, default=OUTPUT_DIR, help="Build output directory.")
    parser.add_argument("--health-dir", type=pathlib.Path, default=HEALTH_DIR, help="Where to write build.json.")
    parser.add_argument("--endpoint", default=WP_GRAPHQL_URL, help="WPGraphQL endpoint URL.")
    parser.add_argument("--dev", action="store_true", default=DEV_MODE, help="Stop fetching posts at the dev limit.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    report = BuildReport("build", health_dir=args.health_dir)
    stats = RewriteStats()

    try:
        content = asyncio.run(fetch_content(args.endpoint, dev_mode=args.dev))
    except (ContentSourceError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
        print(f"[ERROR] Content fetch failed: {exc}", file=sys.stderr)
        report.record_error(f"fetch: {exc}")
        report.write(stats)
        return 1

    counts = build_site(content, args.output_dir, stats=stats)
    for name, value in counts.items():
        report.set_count(name, value)
    report.write(stats)

    print(
        f"Wrote {counts['posts']} posts, {counts['pages']} pages and "
        f"{counts['sitemap_urls']} sitemap URLs to {args.output_dir}."
    )
    print(
        f"Rewrote {stats.links_rewritten} links and {stats.images_rewritten} images "
        f"across {stats.items_processed} items."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
