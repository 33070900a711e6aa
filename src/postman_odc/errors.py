"""Errors that abort a conversion.

Every failure surfaces as a ``ConversionError`` subclass; there is no
partial output.
"""


class ConversionError(Exception):
    """Base class for all conversion failures."""


class UnrecognizedFormatError(ConversionError):
    """The document is not a request, a single export or a collection."""


class EmptyDocumentError(ConversionError):
    """The document contains no request at all."""

    def __init__(self, message: str = "No request found in the document."):
        super().__init__(message)


class AmbiguousRequestError(ConversionError):
    """Several requests match and no (unique) selector was given."""

    def __init__(self, candidates: list[str]):
        self.candidates = list(candidates)
        listing = "\n".join(f"  - {path}" for path in self.candidates)
        super().__init__(
            f"Found {len(self.candidates)} requests, select one with --request:\n{listing}"
        )


class RequestNotFoundError(ConversionError):
    """A selector was given but no request name or path matches it."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = list(available)
        listing = "\n".join(f"  - {path}" for path in self.available)
        super().__init__(f"Request '{name}' not found. Available requests:\n{listing}")
