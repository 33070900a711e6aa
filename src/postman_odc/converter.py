"""Conversion pipeline: Postman document -> query program -> connection file."""

import logging

from pydantic import BaseModel

from postman_odc.config import DEFAULT_EXTENSION
from postman_odc.generator.odc import output_filename, sanitize_name, serialize
from postman_odc.generator.powerquery import PowerQueryGenerator
from postman_odc.parser.base import PaginationConfig, ResolvedRequest
from postman_odc.parser.normalize import auth_headers, compose_url, normalize_body, normalize_headers
from postman_odc.parser.postman import collection_variables, extract_request

logger = logging.getLogger(__name__)


class Conversion(BaseModel):
    """Result of converting one request."""

    query_name: str
    filename: str
    program: str
    content: str
    request: ResolvedRequest


def convert(
    document: dict,
    request_name: str | None = None,
    variables: dict[str, str] | None = None,
    pagination: PaginationConfig | None = None,
    query_name: str | None = None,
    description: str | None = None,
    extension: str = DEFAULT_EXTENSION,
) -> Conversion:
    """Convert one request of a parsed Postman document.

    Collection variables act as defaults; ``variables`` override them.
    """
    request = extract_request(document, request_name)
    merged = {**collection_variables(document), **(variables or {})}
    logger.debug("Converting %s %s with %d variables", request.method, request.path, len(merged))

    url = compose_url(request.url, merged)
    headers = normalize_headers(auth_headers(request.auth, merged) + request.headers, merged)
    payload = normalize_body(request.body, merged)

    program = PowerQueryGenerator().generate(url, request.method, headers, payload, pagination)

    name = sanitize_name(query_name or request.name)
    if description is None:
        description = request.description or f"{request.method} {request.path}"
    content = serialize(name, description, program)

    return Conversion(
        query_name=name,
        filename=output_filename(name, extension),
        program=program,
        content=content,
        request=request,
    )
