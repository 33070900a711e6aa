"""Normalize a resolved request into a URL string, a header mapping and a payload."""

import base64
import json
import logging
import re

from postman_odc.config import DEFAULT_CONTENT_TYPE

from .base import (
    FormDataBody,
    FormPayload,
    JsonPayload,
    KeyValue,
    RawBody,
    StructuredUrl,
    TextPayload,
    UnsupportedBody,
    UrlEncodedBody,
)
from .variables import substitute

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL = "https"

SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*://")


def compose_url(spec, variables: dict[str, str]) -> str:
    """Render a URL spec as one string, then substitute variables in it."""
    if isinstance(spec, str):
        return substitute(spec, variables)
    if not spec.host and spec.raw:
        return substitute(spec.raw, variables)
    url = substitute(_render_url(spec), variables)
    # A host variable such as {{baseUrl}} may carry its own scheme.
    rest = url.removeprefix(f"{DEFAULT_PROTOCOL}://")
    if spec.protocol is None and SCHEME_RE.match(rest):
        return rest
    return url


def _render_url(spec: StructuredUrl) -> str:
    url = f"{spec.protocol or DEFAULT_PROTOCOL}://" + ".".join(spec.host)
    if spec.port:
        url += f":{spec.port}"
    if spec.path:
        path_vars = {v.key: v.value for v in spec.variables}
        segments = [_path_segment(s, path_vars) for s in spec.path]
        url += "/" + "/".join(segments)
    query = [f"{q.key}={q.value}" for q in spec.query if q.enabled]
    if query:
        url += "?" + "&".join(query)
    return url


def _path_segment(segment: str, path_vars: dict[str, str]) -> str:
    if segment.startswith(":") and segment[1:] in path_vars:
        return path_vars[segment[1:]]
    return segment


def normalize_headers(entries: list[KeyValue], variables: dict[str, str]) -> dict[str, str]:
    """Build the header mapping sent with the request.

    Disabled entries are dropped and a repeated key keeps its last value.
    """
    headers: dict[str, str] = {}
    for entry in entries:
        if entry.enabled:
            headers[entry.key] = entry.value
    if not any(key.lower() == "content-type" for key in headers):
        headers["Content-Type"] = DEFAULT_CONTENT_TYPE
    return {key: substitute(value, variables) for key, value in headers.items()}


def normalize_body(body, variables: dict[str, str]):
    """Turn a body spec into a payload, or None when nothing is sent."""
    if isinstance(body, RawBody):
        text = substitute(body.text, variables)
        if not text.strip():
            return None
        try:
            return JsonPayload(value=json.loads(text))
        except json.JSONDecodeError:
            logger.debug("Raw body is not JSON, sending it as text")
            return TextPayload(text=text)
    if isinstance(body, (FormDataBody, UrlEncodedBody)):
        fields = [
            (entry.key, substitute(entry.value, variables))
            for entry in body.fields
            if entry.enabled
        ]
        return FormPayload(mode=body.kind, fields=fields)
    if isinstance(body, UnsupportedBody):
        logger.warning("Body mode '%s' is not supported; the request is sent without a body.", body.mode)
    return None


def auth_headers(auth: dict | None, variables: dict[str, str]) -> list[KeyValue]:
    """Header entries for Postman bearer, basic and header API key auth."""
    if not auth:
        return []
    auth_type = auth.get("type")
    if auth_type in (None, "noauth", "inherit"):
        return []

    params = {k: substitute(v, variables) for k, v in _auth_params(auth.get(auth_type)).items()}
    if auth_type == "bearer":
        return [KeyValue(key="Authorization", value=f"Bearer {params.get('token', '')}")]
    if auth_type == "basic":
        credentials = f"{params.get('username', '')}:{params.get('password', '')}"
        token = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return [KeyValue(key="Authorization", value=f"Basic {token}")]
    if auth_type == "apikey" and params.get("in", "header") == "header" and params.get("key"):
        return [KeyValue(key=params["key"], value=params.get("value", ""))]

    logger.warning("Auth type '%s' is not supported and is ignored.", auth_type)
    return []


def _auth_params(params) -> dict[str, str]:
    # v2.1 stores a list of {key, value}; v2.0 stores a mapping.
    if isinstance(params, dict):
        return {str(k): "" if v is None else str(v) for k, v in params.items()}
    return {
        str(p["key"]): "" if p.get("value") is None else str(p["value"])
        for p in params or []
        if isinstance(p, dict) and "key" in p
    }
