"""
Exceptions raised by the Notas Parser.
"""


class NotasParserError(Exception):
    """Base class for all parser errors."""


class DocumentReadError(NotasParserError):
    """A document location could not be turned into content."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Could not read {location}: {reason}")


class RecordStoreError(NotasParserError):
    """The record store could not be read or written."""
