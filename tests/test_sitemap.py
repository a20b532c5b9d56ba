import datetime as _dt
import xml.etree.ElementTree as ET

from wpstatic import sitemap
from wpstatic.config import SITE_URL
from wpstatic.models import ContentItem, TaxonomyTerm, TermRef

TODAY = _dt.date(2024, 6, 1)
NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


def _item(slug: str, date: _dt.datetime, modified: _dt.datetime | None = None, *, uri: str | None = None, categories=()):
    return ContentItem(
        id=slug,
        title=slug.title(),
        slug=slug,
        uri=uri or f"/{slug}/",
        content="<p>body</p>",
        date=date,
        modified=modified,
        categories=tuple(categories),
    )


def _by_url(entries):
    return {entry.url: entry for entry in entries}


def test_monthly_archives_have_one_entry_each():
    posts = [
        _item("january", _dt.datetime(2024, 1, 15, 8, 30)),
        _item("february", _dt.datetime(2024, 2, 10, 19, 0)),
    ]
    entries = sitemap.build_sitemap_entries(posts, [], [], [], today=TODAY)
    archive_urls = [e.url for e in entries if e.url.endswith(("/2024/01/", "/2024/02/"))]
    assert archive_urls == [SITE_URL + "/2024/02/", SITE_URL + "/2024/01/"]
    lookup = _by_url(entries)
    assert lookup[SITE_URL + "/2024/01/"].lastmod == _dt.date(2024, 1, 15)
    assert lookup[SITE_URL + "/2024/02/"].lastmod == _dt.date(2024, 2, 10)
    assert lookup[SITE_URL + "/2024/01/"].priority == sitemap.ARCHIVE_PRIORITY


def test_static_routes_come_first_and_are_not_duplicated():
    about = _item("about", _dt.datetime(2020, 1, 1))
    entries = sitemap.build_sitemap_entries([], [about], [], [], today=TODAY)
    urls = [entry.url for entry in entries]
    assert urls[0] == SITE_URL + "/"
    assert entries[0].priority == 1.0
    assert urls.count(SITE_URL + "/about/") == 1
    assert _by_url(entries)[SITE_URL + "/about/"].lastmod == TODAY
    assert len(urls) == len(set(urls))


def test_posts_use_modified_or_published_date():
    posts = [
        _item("edited", _dt.datetime(2023, 3, 1, 10), _dt.datetime(2024, 5, 2, 23, 59)),
        _item("untouched", _dt.datetime(2023, 4, 1, 10)),
    ]
    lookup = _by_url(sitemap.build_sitemap_entries(posts, [], [], [], today=TODAY))
    assert lookup[SITE_URL + "/edited/"].lastmod == _dt.date(2024, 5, 2)
    assert lookup[SITE_URL + "/untouched/"].lastmod == _dt.date(2023, 4, 1)
    assert lookup[SITE_URL + "/edited/"].priority == sitemap.POST_PRIORITY


def test_blog_pagination():
    posts = [_item(f"post-{i}", _dt.datetime(2024, 1, 1)) for i in range(41)]
    urls = [e.url for e in sitemap.build_sitemap_entries(posts, [], [], [], today=TODAY)]
    assert SITE_URL + "/blog/2/" in urls
    assert SITE_URL + "/blog/3/" in urls
    assert SITE_URL + "/blog/4/" not in urls


def test_term_priorities_and_pagination():
    productivity = TermRef(id="c1", name="Productivity", slug="productivity")
    posts = [
        _item("p1", _dt.datetime(2024, 1, 1), categories=[productivity]),
        _item("p2", _dt.datetime(2024, 3, 9), categories=[productivity]),
    ]
    categories = [
        TaxonomyTerm(id="c1", name="Productivity", slug="productivity", count=45),
        TaxonomyTerm(id="c2", name="Misc", slug="misc", count=3),
        TaxonomyTerm(id="c3", name="Empty", slug="empty", count=0),
    ]
    tags = [TaxonomyTerm(id="t1", name="Habits", slug="habits", count=2)]
    lookup = _by_url(sitemap.build_sitemap_entries(posts, [], categories, tags, today=TODAY))

    strategic = lookup[SITE_URL + "/category/productivity/"]
    assert strategic.priority == sitemap.STRATEGIC_TERM_PRIORITIES["productivity"]
    assert strategic.lastmod == _dt.date(2024, 3, 9)
    assert lookup[SITE_URL + "/category/misc/"].priority == sitemap.DEFAULT_CATEGORY_PRIORITY
    assert lookup[SITE_URL + "/category/misc/"].lastmod == TODAY
    assert lookup[SITE_URL + "/tag/habits/"].priority == sitemap.DEFAULT_TAG_PRIORITY
    assert SITE_URL + "/category/empty/" not in lookup

    page_two = lookup[SITE_URL + "/category/productivity/2/"]
    assert page_two.priority < strategic.priority
    assert SITE_URL + "/category/productivity/3/" in lookup
    assert SITE_URL + "/category/productivity/4/" not in lookup
    assert SITE_URL + "/category/misc/2/" not in lookup


def test_render_sitemap_document():
    posts = [_item("hello & goodbye", _dt.datetime(2024, 1, 15), uri="/hello-goodbye/?a=1&b=2")]
    entries = sitemap.build_sitemap_entries(posts, [], [], [], today=TODAY)
    body, headers = sitemap.sitemap_response(entries)

    assert headers == {"Content-Type": "application/xml", "Cache-Control": "public, max-age=86400"}
    assert body.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    root = ET.fromstring(body.encode("utf-8"))
    urls = root.findall("sm:url", NS)
    assert len(urls) == len(entries)
    first = urls[0]
    assert first.findtext("sm:loc", namespaces=NS) == SITE_URL + "/"
    assert first.findtext("sm:lastmod", namespaces=NS) == "2024-06-01"
    assert first.findtext("sm:priority", namespaces=NS) == "1.0"
    assert first.findtext("sm:changefreq", namespaces=NS) == "daily"
    locs = [u.findtext("sm:loc", namespaces=NS) for u in urls]
    assert SITE_URL + "/hello-goodbye/?a=1&b=2" in locs
