"""Markup stripping for user-supplied text."""
import html
from typing import Optional

from bs4 import BeautifulSoup


def strip_markup(value: Optional[str]) -> Optional[str]:
    """Remove HTML tags and attributes, keeping only text content.

    `script` and `style` elements are dropped together with their contents.
    The remaining text is returned entity-escaped, so `<`, `>` and `&` that
    were written as entities stay inert. Applying it twice gives the same
    result as applying it once.
    """
    if not value:
        return value

    soup = BeautifulSoup(value, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return html.escape(soup.get_text(), quote=False)
