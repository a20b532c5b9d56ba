"""Rewrite links and images in WordPress markup for the static site layout.

WordPress now lives on the media subdomain while the static build serves the
primary domain.  Post bodies still carry absolute links to the old host, links
into ``/wp-content/uploads/``, legacy pages that no longer exist and a few
tracking pixels.  ``rewrite_content`` runs an ordered list of regex stages over
the markup; each stage sees the output of the previous one, so the order in
``REWRITE_RULES`` matters (e.g. path redirects rely on links having been
normalised first, and the final catch-all must run last).

Counting happens per match and only when the match actually changes, which
keeps a second pass over already rewritten markup free of substitutions.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Callable

from .config import MEDIA_DOMAIN, MEDIA_URL, PRIMARY_DOMAIN, TRACKING_PIXEL_HOST, UPLOADS_PATH
from .models import ContentItem

__all__ = [
    "RewriteStats",
    "ABOUT_PAGE",
    "BOOKS_PAGE",
    "CATEGORIES_PAGE",
    "WORK_WITH_ME_PAGE",
    "PATH_REDIRECTS",
    "LOCAL_IMAGE_ASSETS",
    "REWRITE_RULES",
    "rewrite_content",
    "rewrite_item",
    "make_links_relative",
]


@dataclasses.dataclass(slots=True)
class RewriteStats:
    """Counters for one build; create one per run and pass it to every call."""

    links_rewritten: int = 0
    images_rewritten: int = 0
    items_processed: int = 0

    def reset(self) -> None:
        self.links_rewritten = 0
        self.images_rewritten = 0
        self.items_processed = 0

    def as_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)


# ------------------ Redirect tables ------------------
ABOUT_PAGE = "/about/"
BOOKS_PAGE = "/books/"
CATEGORIES_PAGE = "/categories/"
WORK_WITH_ME_PAGE = "/work-with-me/"

ABOUT_LEGACY_PATHS = ("about", "contact", "contact-2")
BOOK_LEGACY_PATHS = (
    "the-book",
    "ebooks",
    "books-by-dragos-roua",
    "the-ultimate-productivity-guide",
    "40-days-of-blogging",
    "how-to-start-a-blog-book",
    "assess-decide-do-book",
)
TOP_POSTS_PATH = "top-posts"
HUB_PAGES = {
    "productivity-hub": "/category/productivity/",
    "personal-development-hub": "/category/personal-development/",
    "running-hub": "/category/running/",
}
UTILITY_LEGACY_PATHS = (
    "advertise",
    "sponsored-posts",
    "coaching",
    "consulting",
    "hire-me",
    "services",
    "resources",
    "newsletter",
)

PATH_REDIRECTS: dict[str, str] = {
    **{path: ABOUT_PAGE for path in ABOUT_LEGACY_PATHS},
    **{path: BOOKS_PAGE for path in BOOK_LEGACY_PATHS},
    TOP_POSTS_PATH: CATEGORIES_PAGE,
    **HUB_PAGES,
    **{path: WORK_WITH_ME_PAGE for path in UTILITY_LEGACY_PATHS},
}

# Upload file names served from a pre-converted local copy instead of the
# media subdomain.
LOCAL_IMAGE_ASSETS = {
    "dragos-roua-profile.png": "/images/dragos-roua-profile.webp",
}


# ------------------ Patterns ------------------
def _host_pattern(domain: str) -> str:
    return r"(?i:https?://(?:www\.)?" + re.escape(domain) + r")"


_PRIMARY = _host_pattern(PRIMARY_DOMAIN)
_MEDIA = _host_pattern(MEDIA_DOMAIN)
_UPLOADS = re.escape(UPLOADS_PATH)
_HREF = r"""(\b(?i:href)=["'])"""
_SRC = r"""(\b(?i:src)=["'])"""
_END = r"""(?=["'#?])"""

_PRIMARY_HREF_RE = re.compile(_HREF + _PRIMARY + r"/")
_TRACKING_PIXEL_RE = re.compile(
    r"""<img\b[^>]*?\bsrc=["']"""
    + _host_pattern(TRACKING_PIXEL_HOST)
    + r"""(?:/[^"']*)?["'][^>]*>""",
    re.I,
)
_UPLOAD_SRC_RE = re.compile(_SRC + _PRIMARY + "(" + _UPLOADS + r"""[^"']*)""")
_SRCSET_RE = re.compile(r"""(\b(?i:srcset)=)(["'])([^"']*)\2""")
_SRCSET_URL_RE = re.compile(_PRIMARY + "(" + _UPLOADS + r"""[^\s,"']*)""")
_UPLOAD_HREF_RE = re.compile(_HREF + _PRIMARY + "(" + _UPLOADS + ")")


def _redirect_pattern() -> re.Pattern:
    paths = sorted(PATH_REDIRECTS, key=len, reverse=True)
    alternation = "|".join(re.escape(path) for path in paths)
    # media host too: relativize_media_links runs later and must not leave
    # a legacy path behind
    hosts = "(?:" + _PRIMARY + "|" + _MEDIA + ")?"
    return re.compile(_HREF + hosts + "/(" + alternation + ")/?" + _END)


_PATH_REDIRECT_RE = _redirect_pattern()
_MEDIA_CATEGORY_RE = re.compile(
    _HREF + _MEDIA + r"""(/category/[^"'#?]+?/)(?:page/(\d+)/?)?""" + _END
)
_MEDIA_DATE_ARCHIVE_RE = re.compile(
    _HREF + _MEDIA + r"/(\d{4})/(\d{2})/(?:\d{2}/)?(?:page/\d+/?)?" + _END
)
_MEDIA_CONTENT_RE = re.compile(
    _HREF + _MEDIA + "(?!" + _UPLOADS + r""")(/[^"']*)?(?=["'])"""
)
_PRIMARY_ABSOLUTE_RE = re.compile(_HREF + _PRIMARY + r"""(/[^"']*)?(?=["'])""")


# ------------------ Substitution helper ------------------
def _counted_sub(
    pattern: re.Pattern,
    replace: Callable[[re.Match], str],
    text: str,
    stats: RewriteStats,
    field: str,
) -> str:
    def _apply(match: re.Match) -> str:
        new = replace(match)
        if new != match.group(0):
            setattr(stats, field, getattr(stats, field) + 1)
        return new

    return pattern.sub(_apply, text)


def _upload_target(path: str) -> str:
    filename = path.split("?", 1)[0].split("#", 1)[0].rsplit("/", 1)[-1]
    local = LOCAL_IMAGE_ASSETS.get(filename)
    if local:
        return local
    return MEDIA_URL + path


# ------------------ Stages ------------------
def normalize_primary_links(text: str, stats: RewriteStats) -> str:
    """http/https and www variants of the primary host become ``https://host/``."""

    canonical = f"https://{PRIMARY_DOMAIN}/"
    return _counted_sub(
        _PRIMARY_HREF_RE, lambda m: m.group(1) + canonical, text, stats, "links_rewritten"
    )


def strip_tracking_pixels(text: str, stats: RewriteStats) -> str:
    return _counted_sub(_TRACKING_PIXEL_RE, lambda m: "", text, stats, "images_rewritten")


def redirect_upload_images(text: str, stats: RewriteStats) -> str:
    """Point ``src``/``srcset`` upload URLs at the media subdomain."""

    text = _counted_sub(
        _UPLOAD_SRC_RE,
        lambda m: m.group(1) + _upload_target(m.group(2)),
        text,
        stats,
        "images_rewritten",
    )

    def _rewrite_srcset(match: re.Match) -> str:
        value = _counted_sub(
            _SRCSET_URL_RE,
            lambda m: _upload_target(m.group(1)),
            match.group(3),
            stats,
            "images_rewritten",
        )
        return match.group(1) + match.group(2) + value + match.group(2)

    return _SRCSET_RE.sub(_rewrite_srcset, text)


def redirect_upload_links(text: str, stats: RewriteStats) -> str:
    """Click-to-enlarge links into the uploads folder follow the images."""

    return _counted_sub(
        _UPLOAD_HREF_RE,
        lambda m: m.group(1) + MEDIA_URL + m.group(2),
        text,
        stats,
        "links_rewritten",
    )


def apply_path_redirects(text: str, stats: RewriteStats) -> str:
    return _counted_sub(
        _PATH_REDIRECT_RE,
        lambda m: m.group(1) + PATH_REDIRECTS[m.group(2)],
        text,
        stats,
        "links_rewritten",
    )


def relativize_media_links(text: str, stats: RewriteStats) -> str:
    """Media subdomain archives and content links become site-relative."""

    def _category(match: re.Match) -> str:
        page = match.group(3)
        suffix = f"{page}/" if page and page != "1" else ""
        return match.group(1) + match.group(2) + suffix

    text = _counted_sub(_MEDIA_CATEGORY_RE, _category, text, stats, "links_rewritten")
    text = _counted_sub(
        _MEDIA_DATE_ARCHIVE_RE,
        lambda m: f"{m.group(1)}/{m.group(2)}/{m.group(3)}/",
        text,
        stats,
        "links_rewritten",
    )
    return _counted_sub(
        _MEDIA_CONTENT_RE,
        lambda m: m.group(1) + (m.group(2) or "/"),
        text,
        stats,
        "links_rewritten",
    )


def relativize_primary_links(text: str, stats: RewriteStats) -> str:
    return _counted_sub(
        _PRIMARY_ABSOLUTE_RE,
        lambda m: m.group(1) + (m.group(2) or "/"),
        text,
        stats,
        "links_rewritten",
    )


REWRITE_RULES: tuple[tuple[str, Callable[[str, RewriteStats], str]], ...] = (
    ("normalize_primary_links", normalize_primary_links),
    ("strip_tracking_pixels", strip_tracking_pixels),
    ("redirect_upload_images", redirect_upload_images),
    ("redirect_upload_links", redirect_upload_links),
    ("apply_path_redirects", apply_path_redirects),
    ("relativize_media_links", relativize_media_links),
    ("relativize_primary_links", relativize_primary_links),
)


def rewrite_content(content: str | None, stats: RewriteStats | None = None) -> str:
    """Run every stage of ``REWRITE_RULES`` over ``content``."""

    if not content:
        return ""
    if stats is None:
        stats = RewriteStats()
    text = content
    for _name, stage in REWRITE_RULES:
        text = stage(text, stats)
    return text


def rewrite_item(item: ContentItem, stats: RewriteStats) -> ContentItem:
    """Return a copy of ``item`` with its body rewritten."""

    stats.items_processed += 1
    return dataclasses.replace(item, content=rewrite_content(item.content, stats))


def make_links_relative(content: str | None) -> str:
    """Only turn absolute primary-domain links into relative ones."""

    if not content:
        return ""
    return relativize_primary_links(content, RewriteStats())

