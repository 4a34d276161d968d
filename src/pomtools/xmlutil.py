"""lxml helpers for loading, querying and writing descriptor documents.

All lookups go through `local-name()` XPath so they work with or without the
Maven POM namespace.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

from pomtools.exceptions import PomNotFoundError, PomParseError

logger = logging.getLogger(__name__)


def xpath_for(*steps: str, absolute: bool = True) -> str:
    """Build a namespace-agnostic XPath from element local names.

    `xpath_for("project", "parent", "version")` gives
    `/*[local-name()='project']/*[local-name()='parent']/*[local-name()='version']`.
    """
    body = "/".join(f"*[local-name()='{s}']" for s in steps)
    return f"/{body}" if absolute else f"./{body}"


def first_element(node: etree._Element, xpath_expr: str) -> etree._Element | None:
    """Return the first element matching `xpath_expr`, or None."""
    for found in node.xpath(xpath_expr):
        if isinstance(found, etree._Element):
            return found
    return None


def elements(node: etree._Element, xpath_expr: str) -> list[etree._Element]:
    """Return every element matching `xpath_expr`, in document order."""
    return [n for n in node.xpath(xpath_expr) if isinstance(n, etree._Element)]


def element_text(element: etree._Element | None) -> str | None:
    """Return stripped text of an element, or None if missing or empty."""
    if element is None:
        return None
    text = (element.text or "").strip()
    return text or None


def text_first(node: etree._Element, xpath_expr: str) -> str | None:
    """Get text of the first matching element.

    Args:
        node: Root element to query under.
        xpath_expr: XPath expression (should use local-name()).

    Returns:
        Text content if found and non-empty, otherwise None.
    """
    return element_text(first_element(node, xpath_expr))


def local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def append_element(parent: etree._Element, tag: str, text: str | None = None) -> etree._Element:
    """Append a child element in the same namespace as `parent`.

    Callers that need a different position move the result with
    `addprevious` / `addnext`.
    """
    ns = etree.QName(parent).namespace
    child = etree.SubElement(parent, f"{{{ns}}}{tag}" if ns else tag)
    if text is not None:
        child.text = text
    return child


def parse_xml(path: Path) -> etree._ElementTree:
    """Parse an XML file and return its document tree.

    Whitespace and comments are kept so untouched structure survives a
    later `write_xml`.

    Raises:
        PomNotFoundError: If the file does not exist.
        PomParseError: If XML cannot be parsed.
    """
    if not path.is_file():
        raise PomNotFoundError(f"File not found: {path}")
    try:
        parser = etree.XMLParser(resolve_entities=False, no_network=True, recover=False)
        return etree.parse(str(path), parser=parser)
    except (OSError, etree.XMLSyntaxError) as exc:
        raise PomParseError(f"Failed to parse XML: {path}") from exc


def write_xml(tree: etree._ElementTree, path: Path) -> Path:
    """Serialise `tree` to `path` with an XML declaration."""
    encoding = tree.docinfo.encoding or "UTF-8"
    path.parent.mkdir(parents=True, exist_ok=True)
    tree.write(str(path), xml_declaration=True, encoding=encoding)
    logger.debug("Wrote %s", path)
    return path
