"""Detect which of the accepted Postman shapes a document has."""

from postman_odc.errors import UnrecognizedFormatError


def detect_shape(document) -> str:
    """Detect the shape of a parsed Postman document.

    Returns: 'export' (a single ``{name, request, response}`` export),
    'request' (a bare request object) or 'collection' (``{item: [...]}``).
    """
    if isinstance(document, dict):
        if "request" in document:
            return "export"
        if "method" in document and "url" in document:
            return "request"
        if "item" in document:
            return "collection"

    raise UnrecognizedFormatError(
        "Unrecognized document: expected a Postman collection, a request export "
        "or a request object."
    )
