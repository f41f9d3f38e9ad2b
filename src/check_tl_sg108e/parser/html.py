"""Base HTML parsing utilities shared across all parsers."""

from __future__ import annotations

from bs4 import BeautifulSoup


def parse_html(html: str, parser: str = "lxml") -> BeautifulSoup:
    """Parse an HTML string and return a BeautifulSoup document.

    Args:
        html: Raw HTML content from the switch response.
        parser: Parser library to use (default: ``lxml``).

    Returns:
        Parsed BeautifulSoup document.
    """
    return BeautifulSoup(html, parser)


def extract_script_text(html: str) -> str:
    """Return the concatenated bodies of all ``<script>`` elements in *html*.

    The switch pages carry their data as JavaScript variables, and some
    models split them over several script blocks (one before ``<head>``,
    one in ``<body>``).  A response without any ``<script>`` element is
    returned unchanged so bare script text can be parsed as well.

    Args:
        html: Raw HTML content from the switch response.

    Returns:
        Script source, blocks separated by newlines.
    """
    soup = parse_html(html)
    scripts = soup.find_all("script")
    if not scripts:
        return html
    return "\n".join(script.string or "" for script in scripts)
