"""Exceptions raised by contentmatch."""


class ContentMatchError(Exception):
    """Base class for contentmatch errors."""
    pass


class PayloadError(ContentMatchError):
    """A rules, records or glossary document is structurally invalid."""
    pass


__all__ = [
    "ContentMatchError",
    "PayloadError",
]
