from .main import (
    ATOM_NAMESPACE,
    DEFAULT_ATTRIBUTES,
    INDENT_SIZE,
    AtomBuilderError,
    DuplicateKey,
    Element,
    ElementCollection,
    Entry,
    Feed,
    NamedElement,
    UnknownElement,
)

__all__ = [
    "ATOM_NAMESPACE",
    "DEFAULT_ATTRIBUTES",
    "INDENT_SIZE",
    "AtomBuilderError",
    "DuplicateKey",
    "Element",
    "ElementCollection",
    "Entry",
    "Feed",
    "NamedElement",
    "UnknownElement",
]
