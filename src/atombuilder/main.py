from __future__ import annotations

import datetime
import io
import logging
from typing import IO, Iterator, Optional, Union

logger = logging.getLogger(__name__)

INDENT_SIZE = 2
ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"
DEFAULT_ATTRIBUTES: dict[str, str] = {
    "xmlns:thr": "http://purl.org/syndication/thread/1.0",
    "xmlns:media": "http://search.yahoo.com/mrss/",
}

_UTC = datetime.timezone.utc

_DateValue = Union[str, datetime.datetime]


class AtomBuilderError(ValueError):
    """Base class for errors raised while building a feed."""


class UnknownElement(AtomBuilderError, LookupError):
    """Raised by ``set`` when no element carries the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown element: {name!r}")
        self.name = name


class DuplicateKey(AtomBuilderError, LookupError):
    """Raised by ``get`` when more than one element carries the requested name."""

    def __init__(self, name: str, matches: int) -> None:
        super().__init__(f"Duplicate key: {name!r} matches {matches} elements")
        self.name = name
        self.matches = matches


class Element:
    """One unit of content: optional attributes and optional text.

    Text and attribute values are written out verbatim, no escaping is
    applied, so callers may embed pre-built markup such as
    ``<name>...</name>``.
    """

    __slots__ = ("attributes", "text")

    def __init__(
        self,
        text: Optional[str] = None,
        attributes: Optional[dict[str, str]] = None,
    ) -> None:
        self.text = text
        self.attributes = attributes

    def put(self, name: str, value: str) -> Element:
        """Set an attribute, creating the attribute map if needed.

        Returns the element itself so calls can be chained.
        """
        if self.attributes is None:
            self.attributes = {}
        self.attributes[name] = value
        return self

    def copy(self) -> Element:
        attributes = dict(self.attributes) if self.attributes is not None else None
        return Element(self.text, attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self.text == other.text and self.attributes == other.attributes

    def __repr__(self) -> str:
        return f"Element(text={self.text!r}, attributes={self.attributes!r})"


def _write_indent(output: IO[str], level: int) -> None:
    if level:
        output.write(" " * (level * INDENT_SIZE))


class NamedElement:
    """A tag name paired with its element."""

    __slots__ = ("name", "element")

    def __init__(self, name: str, element: Element) -> None:
        self.name = name
        self.element = element

    def write(self, output: IO[str]) -> None:
        """Render the element as a single tag on ``output``."""
        output.write(f"<{self.name}")
        attributes = self.element.attributes
        if attributes:
            for key, value in attributes.items():
                output.write(f' {key}="{value}"')
        text = self.element.text
        if text is not None:
            output.write(f">{text}</{self.name}>")
        else:
            output.write("/>")

    def __repr__(self) -> str:
        return f"NamedElement({self.name!r}, {self.element!r})"


class ElementCollection:
    """Ordered sequence of named elements.

    Names need not be unique: ``add`` always appends, while ``set`` and
    ``add_or_set`` replace the first element with a matching name in place.
    Sequence order is serialization order.
    """

    def __init__(self) -> None:
        self._items: list[NamedElement] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[NamedElement]:
        return iter(self._items)

    def names(self) -> list[str]:
        return [item.name for item in self._items]

    def _index_of(self, name: str) -> Optional[int]:
        for i, item in enumerate(self._items):
            if item.name == name:
                return i
        return None

    def add(self, name: str, element: Element) -> Element:
        """Append an element unconditionally.

        Returns the stored element, a copy of ``element``.
        """
        stored = element.copy()
        self._items.append(NamedElement(name, stored))
        return stored

    def set(self, name: str, element: Element) -> Element:
        """Replace the first element named ``name`` at its current position.

        Raises:
            UnknownElement: If no element carries ``name``. The collection
                is not modified.
        """
        index = self._index_of(name)
        if index is None:
            raise UnknownElement(name)
        stored = element.copy()
        self._items[index] = NamedElement(name, stored)
        return stored

    def add_or_set(self, name: str, element: Element) -> Element:
        """Replace the first element named ``name`` in place, or append it."""
        index = self._index_of(name)
        stored = element.copy()
        if index is None:
            logger.debug("Appending element %r", name)
            self._items.append(NamedElement(name, stored))
        else:
            logger.debug("Replacing element %r at position %d", name, index)
            self._items[index] = NamedElement(name, stored)
        return stored

    def get(self, name: str) -> Optional[Element]:
        """Return the only element named ``name``, or None.

        Raises:
            DuplicateKey: If two or more elements carry ``name``.
        """
        matches = [item.element for item in self._items if item.name == name]
        if len(matches) > 1:
            raise DuplicateKey(name, len(matches))
        return matches[0] if matches else None

    def get_first(self, name: str) -> Optional[Element]:
        index = self._index_of(name)
        return None if index is None else self._items[index].element

    def write(self, output: IO[str], indent: int = 0) -> None:
        """Write one indented line per element, separated by newlines.

        No newline is written before the first line or after the last.
        """
        for i, item in enumerate(self._items):
            if i:
                output.write("\n")
            _write_indent(output, indent)
            item.write(output)


def _format_date(value: _DateValue) -> str:
    """Render a datetime as RFC 3339 in UTC; strings pass through unchanged."""
    if isinstance(value, str):
        return value
    dt = value.replace(tzinfo=_UTC) if value.tzinfo is None else value.astimezone(_UTC)
    return dt.isoformat().replace("+00:00", "Z")


class _Builder:
    """Setters shared by feeds and entries, all backed by ``self.elements``."""

    elements: ElementCollection

    def add(self, name: str, element: Element) -> Element:
        return self.elements.add(name, element)

    def set(self, name: str, element: Element) -> Element:
        return self.elements.set(name, element)

    def add_or_set(self, name: str, element: Element) -> Element:
        return self.elements.add_or_set(name, element)

    def set_title(self, text: str) -> None:
        self.add_or_set("title", Element(text))

    def set_author(self, name: str) -> None:
        """Set the author, wrapped as an Atom person construct with a name."""
        self.add_or_set("author", Element(f"<name>{name}</name>"))

    def set_id(self, text: str) -> None:
        self.add_or_set("id", Element(text))

    def set_updated(self, value: _DateValue) -> None:
        self.add_or_set("updated", Element(_format_date(value)))

    def new_field(self, name: str, text: str) -> Element:
        """Append a new element with text and an empty attribute map.

        Returns the stored element so attributes can be attached with
        ``put``. Once the same name is replaced through ``set`` or
        ``add_or_set``, the returned element is no longer part of the
        document.
        """
        return self.elements.add(name, Element(text, {}))

    def new_link(self, href: str) -> Element:
        """Append a ``link`` element carrying ``href`` as its first attribute."""
        return self.elements.add("link", Element(None, {"href": href}))

    def get(self, name: str) -> Optional[Element]:
        return self.elements.get(name)

    def get_first(self, name: str) -> Optional[Element]:
        return self.elements.get_first(name)

    def count(self) -> int:
        return len(self.elements)


class Entry(_Builder):
    """View over one entry's element collection.

    The collection is owned by the feed that created the entry; entries are
    never removed or reordered once created.
    """

    def __init__(self, elements: ElementCollection) -> None:
        self.elements = elements

    def set_published(self, value: _DateValue) -> None:
        self.add_or_set("published", Element(_format_date(value)))

    def set_summary(self, text: str) -> None:
        self.add_or_set("summary", Element(text))

    def __repr__(self) -> str:
        return f"Entry({self.elements.names()!r})"


class Feed(_Builder):
    """An Atom feed document under construction.

    Example:
        feed = Feed()
        feed.set_title("Books")
        entry = feed.new_entry()
        entry.set_title("Taste of Honey")
        xml = feed.to_string()
    """

    def __init__(self, *, default_attributes: bool = False) -> None:
        """
        Args:
            default_attributes: Seed the root tag with the namespace
                declarations in ``DEFAULT_ATTRIBUTES``.
        """
        self.elements = ElementCollection()
        self.attributes: dict[str, str] = {}
        self._entries: list[ElementCollection] = []
        if default_attributes:
            self.put_default_attributes()

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(Entry(elements) for elements in self._entries)

    def new_entry(self) -> Entry:
        """Append an empty entry and return a view bound to it."""
        elements = ElementCollection()
        self._entries.append(elements)
        logger.debug("Created entry %d", len(self._entries))
        return Entry(elements)

    def put_attribute(self, name: str, value: str) -> None:
        """Add an attribute to the root ``feed`` tag."""
        self.attributes[name] = value

    def put_default_attributes(self) -> None:
        for name, value in DEFAULT_ATTRIBUTES.items():
            self.put_attribute(name, value)

    def set_subtitle(self, text: str) -> None:
        self.add_or_set("subtitle", Element(text))

    def write(self, output: IO[str]) -> None:
        """Write the whole document to a text stream.

        Output is written incrementally, so a failing stream may be left
        holding a partial document. The feed itself is not modified and
        ``write`` may be called any number of times.

        Args:
            output: Any object with a ``write(str)`` method
        """
        output.write(f'<feed xmlns="{ATOM_NAMESPACE}"')
        for key, value in self.attributes.items():
            output.write(f' {key}="{value}"')
        output.write(">\n")
        self.elements.write(output, 1)

        for elements in self._entries:
            output.write("\n")
            _write_indent(output, 1)
            output.write("<entry>\n")
            elements.write(output, 2)
            output.write("\n")
            _write_indent(output, 1)
            output.write("</entry>")

        output.write("\n</feed>")
        logger.debug("Wrote feed with %d entries", len(self._entries))

    def to_string(self) -> str:
        buffer = io.StringIO()
        self.write(buffer)
        return buffer.getvalue()

    def to_bytes(self) -> bytes:
        return self.to_string().encode("utf-8")

    def __str__(self) -> str:
        return self.to_string()
