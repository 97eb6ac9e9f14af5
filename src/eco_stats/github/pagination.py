"""Link header parsing and the last-page counting trick.

GitHub does not report totals for contributors, open issues or open pull
requests. Requesting those listings with ``per_page=1`` makes the page
number in the ``rel="last"`` link equal to the item count.
"""

from __future__ import annotations

import httpx


def parse_link_header(header: str | None) -> dict[str, str]:
    """Map each ``rel`` in a ``Link`` header to its URL."""
    links: dict[str, str] = {}
    if not header:
        return links
    for part in header.split(","):
        segments = part.split(";")
        url = segments[0].strip().strip("<>")
        if not url:
            continue
        for param in segments[1:]:
            key, _, value = param.strip().partition("=")
            if key.strip() == "rel":
                for rel in value.strip().strip('"').split():
                    links[rel] = url
    return links


def last_page_number(header: str | None) -> int | None:
    """Return the ``page`` query parameter of the ``rel="last"`` link, if any."""
    url = parse_link_header(header).get("last")
    if url is None:
        return None
    try:
        page = httpx.URL(url).params.get("page")
    except httpx.InvalidURL:
        return None
    if page is None or not page.isdigit():
        return None
    return int(page)


def last_page_or_item_count(link_header: str | None, items_returned: int) -> int:
    """Count a listing fetched with ``per_page=1``.

    With one item per page, page N holds item N, so the last page number is
    the total. Without a last-page marker there is at most one page, and the
    count is whatever came back (0 or 1).
    """
    last = last_page_number(link_header)
    if last is not None:
        return last
    return items_returned


def next_page_url(header: str | None) -> str | None:
    return parse_link_header(header).get("next")
