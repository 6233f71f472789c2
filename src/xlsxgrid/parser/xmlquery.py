from __future__ import annotations

from typing import Iterator
from xml.etree import ElementTree as ET


def local_name(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[1]
    if ":" in tag:
        return tag.rsplit(":", 1)[1]
    return tag


class XmlNode:
    """Read-only view over an element, queried by local tag name.

    Lookups on an empty node (wrapping ``None``) return empty results so
    chains over optional elements never need ``None`` checks.
    """

    __slots__ = ("element",)

    def __init__(self, element: ET.Element | None) -> None:
        self.element = element

    def __bool__(self) -> bool:
        return self.element is not None

    def __repr__(self) -> str:
        return f"XmlNode({self.tag or None!r})"

    @property
    def tag(self) -> str:
        if self.element is None:
            return ""
        return local_name(self.element.tag)

    @property
    def text(self) -> str:
        if self.element is None:
            return ""
        return "".join(self.element.itertext())

    def find(self, tag: str) -> XmlNode:
        name = local_name(tag)
        for elem in self._descendants():
            if local_name(elem.tag) == name:
                return XmlNode(elem)
        return XmlNode(None)

    def find_all(self, tag: str) -> list[XmlNode]:
        name = local_name(tag)
        return [XmlNode(elem) for elem in self._descendants() if local_name(elem.tag) == name]

    def children(self, tag: str | None = None) -> list[XmlNode]:
        if self.element is None:
            return []
        name = local_name(tag) if tag else None
        return [XmlNode(child) for child in self.element if name is None or local_name(child.tag) == name]

    def child(self, tag: str) -> XmlNode:
        found = self.children(tag)
        return found[0] if found else XmlNode(None)

    def attr(self, name: str, default: str = "") -> str:
        if self.element is None:
            return default
        attrib = self.element.attrib
        if name in attrib:
            return attrib[name]
        wanted = local_name(name)
        for key, value in attrib.items():
            if local_name(key) == wanted:
                return value
        return default

    def has_attr(self, name: str) -> bool:
        if self.element is None:
            return False
        wanted = local_name(name)
        return any(local_name(key) == wanted for key in self.element.attrib)

    def _descendants(self) -> Iterator[ET.Element]:
        if self.element is None:
            return iter(())
        walker = self.element.iter()
        next(walker)
        return walker


def parse_xml(payload: str | bytes | None) -> XmlNode:
    if not payload:
        return XmlNode(None)
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return XmlNode(ET.fromstring(payload))
