import datetime as _dt

import pytest

from wpstatic import taxonomy
from wpstatic.config import SITE_URL
from wpstatic.models import ContentItem, TaxonomyTerm, TermRef

RUNNING = TermRef(id="t1", name="Running", slug="running")


def _post(index: int, title: str | None = None, tags=(RUNNING,)) -> ContentItem:
    return ContentItem(
        id=f"p{index}",
        title=title or f"Post Number {index}",
        slug=f"post-{index}",
        uri=f"/post-{index}/",
        content="<p>body</p>",
        date=_dt.datetime(2024, 1, index % 28 + 1, 9, 0),
        tags=tuple(tags),
    )


def test_explicit_description_is_returned_verbatim():
    term = TaxonomyTerm(id="t1", name="Running", slug="running", count=5,
                        description="  Stories from the road, the trail and the track.  ")
    assert taxonomy.describe_term(term, [_post(1)]) == "Stories from the road, the trail and the track."


def test_generated_description_quotes_two_titles():
    term = TaxonomyTerm(id="t2", name="Productivity", slug="productivity", count=5)
    posts = [_post(i, f"Title {name}") for i, name in enumerate(["Alpha", "Beta", "Gamma", "Delta", "Eps"], 1)]
    description = taxonomy.describe_term(term, posts)
    assert "Productivity" in description
    assert "5 articles" in description
    assert '"Title Alpha"' in description
    assert '"Title Beta"' in description
    assert "Gamma" not in description
    assert description.count('"') == 4


def test_generated_description_strips_and_truncates_titles():
    long_title = "<em>A</em> " + "very long title " * 6
    term = TaxonomyTerm(id="t2", name="Minimalism", slug="minimalism", count=3)
    description = taxonomy.describe_term(term, [_post(1, long_title), _post(2), _post(3)])
    quoted = description.split('"')[1]
    assert "<em>" not in quoted
    assert len(quoted) <= taxonomy.TITLE_LIMIT
    assert quoted.endswith("...")


def test_generic_description_is_replaced():
    term = TaxonomyTerm(id="t1", name="Running", slug="running", count=2, description="Posts tagged running")
    assert taxonomy.describe_term(term, [_post(1), _post(2)]).startswith("2 articles about Running")


def test_single_post_and_empty_descriptions():
    term = TaxonomyTerm(id="t1", name="Running", slug="running", count=1)
    assert taxonomy.describe_term(term, [_post(1)]).startswith("1 article about Running")
    empty = TaxonomyTerm(id="t3", name="Zen", slug="zen")
    assert taxonomy.describe_term(empty, []).startswith("Articles and insights about Zen")


def test_breadcrumbs_for_tags_and_categories():
    term = TaxonomyTerm(id="t1", name="Running", slug="running", count=1)
    crumbs = taxonomy.build_breadcrumbs(term, "tag")
    assert crumbs == [
        {"name": "Home", "url": SITE_URL + "/", "position": 1},
        {"name": "Tags", "url": SITE_URL + "/tags/", "position": 2},
        {"name": "Running", "url": SITE_URL + "/tag/running/", "position": 3},
    ]
    category_crumbs = taxonomy.build_breadcrumbs(term, "category")
    assert category_crumbs[1]["name"] == "Categories"
    assert category_crumbs[2]["url"] == SITE_URL + "/category/running/"


def test_unknown_kind_is_rejected():
    term = TaxonomyTerm(id="t1", name="Running", slug="running")
    with pytest.raises(ValueError):
        taxonomy.build_breadcrumbs(term, "author")


def test_term_schema_lists_first_twenty_posts():
    term = TaxonomyTerm(id="t1", name="Running", slug="running", count=25)
    posts = [_post(i) for i in range(1, 26)]
    document = taxonomy.build_term_schema(term, posts, "tag")
    assert document["@type"] == "CollectionPage"
    assert document["url"] == SITE_URL + "/tag/running/"
    assert document["breadcrumb"]["@type"] == "BreadcrumbList"
    assert len(document["breadcrumb"]["itemListElement"]) == 3
    items = document["mainEntity"]["itemListElement"]
    assert len(items) == 20
    assert items[0] == {
        "@type": "ListItem",
        "position": 1,
        "url": SITE_URL + "/post-1/",
        "name": "Post Number 1",
        "datePublished": "2024-01-02",
    }


def test_term_schema_without_posts_has_no_item_list():
    term = TaxonomyTerm(id="t1", name="Running", slug="running", count=0)
    document = taxonomy.build_term_schema(term, [], "category")
    assert "mainEntity" not in document
    assert document["description"].startswith("Articles and insights about Running")


def test_posts_for_term():
    other = TermRef(id="t9", name="Other", slug="other")
    posts = [_post(1), _post(2, tags=(other,))]
    assert [p.id for p in taxonomy.posts_for_term(posts, "running", "tag")] == ["p1"]
    assert taxonomy.posts_for_term(posts, "running", "category") == []
