from datetime import UTC, datetime
from uuid import uuid4

import pytest

from src.domain.slug import SlugGenerator, slugify, with_suffix

NOW = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)
MILLIS = int(NOW.timestamp() * 1000)


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Hello World!", "hello-world"),
        ("  Spaces   everywhere  ", "spaces-everywhere"),
        ("Crème brûlée recipe", "creme-brulee-recipe"),
        ("snake_case_title", "snake-case-title"),
        ("a -- b", "a-b"),
        ("--edge--", "edge"),
        ("100% Python", "100-python"),
        ("ภาษาไทย", ""),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_with_suffix_uses_millisecond_epoch():
    assert with_suffix("post", NOW) == f"post-{MILLIS}"


def test_generate_free_slug():
    gen = SlugGenerator(lambda slug: None)
    assert gen.generate("Hello World!", NOW) == "hello-world"


def test_generate_taken_slug_gets_suffix():
    owner = uuid4()
    gen = SlugGenerator(lambda slug: owner if slug == "hello-world" else None)
    assert gen.generate("Hello World!", NOW) == f"hello-world-{MILLIS}"


def test_own_slug_is_not_a_collision():
    post_id = uuid4()
    gen = SlugGenerator(lambda slug: post_id)
    assert gen.generate("Hello World!", NOW, post_id=post_id) == "hello-world"


def test_empty_base_uses_fallback():
    gen = SlugGenerator(lambda slug: None, fallback="post")
    assert gen.generate("!!!", NOW) == "post"


def test_regenerate_differs_from_rejected():
    gen = SlugGenerator(lambda slug: None)
    rejected = f"hello-world-{MILLIS}"
    fresh = gen.regenerate("Hello World!", NOW, rejected)
    assert fresh != rejected
    assert fresh.startswith("hello-world-")


def test_slugs_are_url_safe():
    gen = SlugGenerator(lambda slug: None)
    slug = gen.generate("Ünïcödé & <script> Tags?", NOW)
    assert slug
    assert set(slug) <= set("abcdefghijklmnopqrstuvwxyz0123456789-")
