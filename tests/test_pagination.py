"""Tests for Link header parsing and last-page counting."""

from __future__ import annotations

from eco_stats.github.pagination import (
    last_page_number,
    last_page_or_item_count,
    next_page_url,
    parse_link_header,
)

CONTRIBUTORS_LINK = (
    '<https://api.github.com/repositories/1/contributors?per_page=1&anon=true&page=2>; rel="next", '
    '<https://api.github.com/repositories/1/contributors?per_page=1&anon=true&page=57>; rel="last"'
)


def test_parse_link_header():
    links = parse_link_header(CONTRIBUTORS_LINK)
    assert set(links) == {"next", "last"}
    assert links["last"].endswith("page=57")


def test_parse_link_header_empty():
    assert parse_link_header(None) == {}
    assert parse_link_header("") == {}


def test_last_page_number():
    assert last_page_number(CONTRIBUTORS_LINK) == 57


def test_last_page_number_page_not_last_param():
    header = '<https://api.github.com/x?page=12&per_page=1>; rel="last"'
    assert last_page_number(header) == 12


def test_last_page_number_without_last_rel():
    header = '<https://api.github.com/x?page=2>; rel="next"'
    assert last_page_number(header) is None


def test_last_page_number_non_numeric():
    header = '<https://api.github.com/x?page=abc>; rel="last"'
    assert last_page_number(header) is None


def test_count_uses_last_page_marker():
    """With per_page=1 the last page number is the item count."""
    assert last_page_or_item_count(CONTRIBUTORS_LINK, 1) == 57


def test_count_falls_back_to_items_returned():
    assert last_page_or_item_count(None, 0) == 0
    assert last_page_or_item_count(None, 1) == 1
    assert last_page_or_item_count("", 1) == 1


def test_count_ignores_link_without_last():
    header = '<https://api.github.com/x?page=1>; rel="prev", <https://api.github.com/x?page=1>; rel="first"'
    assert last_page_or_item_count(header, 1) == 1


def test_next_page_url():
    assert next_page_url(CONTRIBUTORS_LINK).endswith("page=2")
    assert next_page_url(None) is None
