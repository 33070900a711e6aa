"""Postman Collection v2.x parser.

Loads exported Postman JSON, builds a folder/request tree and resolves the
one request to convert.
"""

import json
import logging
from pathlib import Path

from postman_odc.errors import (
    AmbiguousRequestError,
    EmptyDocumentError,
    RequestNotFoundError,
    UnrecognizedFormatError,
)

from .base import (
    FolderNode,
    FormDataBody,
    KeyValue,
    Node,
    RawBody,
    RequestNode,
    ResolvedRequest,
    StructuredUrl,
    UnsupportedBody,
    UrlEncodedBody,
)
from .detect import detect_shape

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_NAME = "Request"


def load_document(file_path: Path) -> dict:
    """Read and parse a Postman JSON file."""
    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnrecognizedFormatError(f"{file_path} is not UTF-8 text: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise UnrecognizedFormatError(f"{file_path} is not valid JSON: {e}") from e


# -- tree ----------------------------------------------------------------------

def build_tree(document: dict) -> list[Node]:
    """Build the top-level nodes of a document of any accepted shape."""
    shape = detect_shape(document)
    if shape == "request":
        return [RequestNode(name=document.get("name") or DEFAULT_REQUEST_NAME, request=document)]
    if shape == "export":
        return [_parse_node(document, "")]
    return _parse_items(document.get("item") or [], "")


def _parse_items(items: list, trail: str) -> list[Node]:
    if not isinstance(items, list):
        raise UnrecognizedFormatError(f"'item' of '{trail or '/'}' is not a list")
    return [_parse_node(item, trail) for item in items]


def _parse_node(raw, trail: str) -> Node:
    """Parse one collection entry: a request wins over a folder."""
    if not isinstance(raw, dict):
        raise UnrecognizedFormatError(f"Unexpected entry under '{trail or '/'}': {raw!r}")

    name = str(raw.get("name") or DEFAULT_REQUEST_NAME)
    location = f"{trail}/{name}" if trail else name
    if "request" in raw:
        return RequestNode(name=name, request=raw["request"], has_scripts=_has_scripts(raw))
    if "item" in raw:
        return FolderNode(name=name, children=_parse_items(raw["item"], location))
    raise UnrecognizedFormatError(f"'{location}' is neither a folder nor a request")


def _has_scripts(raw: dict) -> bool:
    for event in raw.get("event") or []:
        script = event.get("script") or {}
        exec_lines = script.get("exec") or []
        if isinstance(exec_lines, str):
            exec_lines = [exec_lines]
        if any(line.strip() for line in exec_lines):
            return True
    return False


def collect_requests(nodes: list[Node], ancestry: tuple[str, ...] = ()) -> list[tuple[str, RequestNode]]:
    """Return ``(path, node)`` for every request, depth-first in document order."""
    found: list[tuple[str, RequestNode]] = []
    for node in nodes:
        trail = ancestry + (node.name,)
        if isinstance(node, FolderNode):
            found = found + collect_requests(node.children, trail)
        else:
            found = found + [("/".join(trail), node)]
    return found


def list_requests(document: dict) -> list[str]:
    """List the paths of all requests in a document."""
    return [path for path, _ in collect_requests(build_tree(document))]


# -- extraction ----------------------------------------------------------------

def extract_request(document: dict, name: str | None = None) -> ResolvedRequest:
    """Select the request to convert, by exact name or full path.

    Without a name the document must hold exactly one request.
    """
    requests = collect_requests(build_tree(document))
    if not requests:
        raise EmptyDocumentError()

    paths = [path for path, _ in requests]
    if name is None:
        if len(requests) > 1:
            raise AmbiguousRequestError(paths)
        path, node = requests[0]
    else:
        matches = [r for r in requests if r[0] == name] or [r for r in requests if r[1].name == name]
        if not matches:
            raise RequestNotFoundError(name, paths)
        if len(matches) > 1:
            raise AmbiguousRequestError([path for path, _ in matches])
        path, node = matches[0]

    logger.debug("Selected request %s", path)
    if node.has_scripts:
        logger.warning("Request '%s' has pre-request or test scripts; they are not converted.", path)
    return _parse_request(node, path)


def _parse_request(node: RequestNode, path: str) -> ResolvedRequest:
    req = node.request
    if isinstance(req, str):
        return ResolvedRequest(name=node.name, path=path, url=req)

    return ResolvedRequest(
        name=node.name,
        path=path,
        method=str(req.get("method") or "GET").upper(),
        url=_parse_url(req.get("url")),
        headers=_parse_key_values(req.get("header")),
        body=_parse_body(req.get("body")),
        auth=req.get("auth") or None,
        description=_parse_description(req.get("description")),
    )


def _parse_url(url):
    if url is None:
        return ""
    if isinstance(url, str):
        return url

    host = url.get("host") or []
    if isinstance(host, str):
        host = [host]
    path = url.get("path") or []
    if isinstance(path, str):
        path = path.strip("/").split("/") if path.strip("/") else []

    return StructuredUrl(
        protocol=url.get("protocol") or None,
        host=[str(h) for h in host],
        port=str(url["port"]) if url.get("port") else None,
        path=[_segment(p) for p in path],
        query=_parse_key_values(url.get("query")),
        variables=_parse_key_values(url.get("variable")),
        raw=url.get("raw"),
    )


def _segment(segment) -> str:
    if isinstance(segment, dict):
        return str(segment.get("value", ""))
    return str(segment)


def _parse_key_values(entries) -> list[KeyValue]:
    if not entries:
        return []
    result = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("key") is None:
            continue
        value = entry.get("value")
        result.append(
            KeyValue(
                key=str(entry["key"]),
                value="" if value is None else str(value),
                enabled=not entry.get("disabled", False),
            )
        )
    return result


def _parse_body(body: dict | None):
    if not body:
        return None
    mode = body.get("mode")
    if mode == "raw":
        return RawBody(text=body.get("raw") or "")
    if mode == "formdata":
        return FormDataBody(fields=_parse_form_fields(body.get("formdata")))
    if mode == "urlencoded":
        return UrlEncodedBody(fields=_parse_key_values(body.get("urlencoded")))
    if mode:
        return UnsupportedBody(mode=str(mode))
    return None


def _parse_form_fields(entries) -> list[KeyValue]:
    files = [e for e in entries or [] if isinstance(e, dict) and e.get("type") == "file"]
    for entry in files:
        logger.warning("Skipping file field '%s': file uploads are not supported.", entry.get("key"))
    return _parse_key_values([e for e in entries or [] if e not in files])


def _parse_description(description) -> str:
    if isinstance(description, dict):
        return str(description.get("content") or "")
    return str(description or "")


def collection_variables(document: dict) -> dict[str, str]:
    """Enabled collection-level variables, as defaults for substitution."""
    variables = {}
    if not isinstance(document, dict):
        return variables
    for entry in _parse_key_values(document.get("variable")):
        if entry.enabled:
            variables[entry.key] = entry.value
    return variables
