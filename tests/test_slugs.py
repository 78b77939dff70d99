import asyncio
import re

import pytest

from apps.blog.slugs import first_free_slug, resolve_slug, slugify

SLUG_SHAPE = re.compile(r"^([a-z0-9]+(-[a-z0-9]+)*)?$")


@pytest.mark.parametrize("title,expected", [
    ("My First Post", "my-first-post"),
    ("Hello, World!", "hello-world"),
    ("  --Leading and trailing--  ", "leading-and-trailing"),
    ("Python 3.12: What's New?", "python-3-12-what-s-new"),
    ("ALL CAPS", "all-caps"),
    ("already-a-slug", "already-a-slug"),
    ("Café déjà vu", "caf-d-j-vu"),
    ("!!!", ""),
    ("", ""),
])
def test_slugify(title, expected):
    assert slugify(title) == expected


@pytest.mark.parametrize("title", [
    "My First Post",
    "  spaced   out  ",
    "under_scores_and.dots",
    "Ünïcödé títle ✨",
    "---",
    "a--b__c  d",
    "Tabs\tand\nnewlines",
])
def test_slugify_output_shape(title):
    slug = slugify(title)
    assert SLUG_SHAPE.match(slug), slug
    assert not slug.startswith("-")
    assert not slug.endswith("-")


def test_first_free_slug_bare_candidate_free():
    assert first_free_slug("my-post", {"my-postal", "my-post-2"}) == "my-post"


def test_first_free_slug_tries_ascending_suffixes():
    assert first_free_slug("my-post", {"my-post"}) == "my-post-2"
    assert first_free_slug("my-post", {"my-post", "my-post-2"}) == "my-post-3"
    # Fills the lowest gap
    assert first_free_slug("my-post", {"my-post", "my-post-3"}) == "my-post-2"


def test_first_free_slug_empty_candidate():
    assert first_free_slug("", set()) == ""
    assert first_free_slug("", {""}) == "-2"


class FakeLookup:
    def __init__(self, slugs_by_site):
        self.slugs_by_site = slugs_by_site
        self.calls = []

    async def __call__(self, target_site, prefix):
        self.calls.append((target_site, prefix))
        return [s for s in self.slugs_by_site.get(target_site, []) if s.startswith(prefix)]


def test_resolve_slug_derives_and_dedups_per_site():
    lookup = FakeLookup({"a.com": ["my-post", "my-post-2"], "b.com": []})

    assert asyncio.run(resolve_slug("My Post", None, "a.com", lookup)) == "my-post-3"
    assert asyncio.run(resolve_slug("My Post", None, "b.com", lookup)) == "my-post"
    assert lookup.calls == [("a.com", "my-post"), ("b.com", "my-post")]


def test_resolve_slug_explicit_is_verbatim():
    lookup = FakeLookup({"a.com": ["custom-slug"]})

    slug = asyncio.run(resolve_slug("My Post", "custom-slug", "a.com", lookup))

    assert slug == "custom-slug"
    assert lookup.calls == []


def test_resolve_slug_blank_explicit_falls_back_to_title():
    lookup = FakeLookup({})

    assert asyncio.run(resolve_slug("My Post", "   ", "a.com", lookup)) == "my-post"
    assert asyncio.run(resolve_slug("My Post", "", "a.com", lookup)) == "my-post"
