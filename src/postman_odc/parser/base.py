"""Data models for parsed Postman documents.

The parser turns the raw JSON document into a tagged tree of folders and
requests, then resolves the selected request into a ``ResolvedRequest``.
Normalization produces a ``Payload`` for the request body.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from postman_odc.config import DEFAULT_RESULTS_FIELD, DEFAULT_TOKEN_PARAM, DEFAULT_TOKEN_PATH


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class KeyValue(Frozen):
    """A header, query or form entry."""

    key: str
    value: str = ""
    enabled: bool = True


class StructuredUrl(Frozen):
    """Postman's object form of a URL."""

    protocol: str | None = None
    host: list[str] = []
    port: str | None = None
    path: list[str] = []
    query: list[KeyValue] = []
    variables: list[KeyValue] = []  # path variables (:id)
    raw: str | None = None


UrlSpec = Union[str, StructuredUrl]


# -- request body ------------------------------------------------------------

class RawBody(Frozen):
    kind: Literal["raw"] = "raw"
    text: str = ""


class FormDataBody(Frozen):
    kind: Literal["formdata"] = "formdata"
    fields: list[KeyValue] = []


class UrlEncodedBody(Frozen):
    kind: Literal["urlencoded"] = "urlencoded"
    fields: list[KeyValue] = []


class UnsupportedBody(Frozen):
    kind: Literal["unsupported"] = "unsupported"
    mode: str = ""


BodySpec = Annotated[
    Union[RawBody, FormDataBody, UrlEncodedBody, UnsupportedBody],
    Field(discriminator="kind"),
]


# -- normalized payload --------------------------------------------------------

class JsonPayload(Frozen):
    """A raw body that parsed as JSON."""

    kind: Literal["json"] = "json"
    value: Any = None


class TextPayload(Frozen):
    """A raw body that is not JSON, sent verbatim."""

    kind: Literal["text"] = "text"
    text: str


class FormPayload(Frozen):
    kind: Literal["form"] = "form"
    mode: Literal["formdata", "urlencoded"]
    fields: list[tuple[str, str]] = []


Payload = Annotated[
    Union[JsonPayload, TextPayload, FormPayload],
    Field(discriminator="kind"),
]


# -- document tree -------------------------------------------------------------

class RequestNode(Frozen):
    """A leaf of the document tree holding one raw Postman request."""

    kind: Literal["request"] = "request"
    name: str
    request: dict | str
    has_scripts: bool = False


class FolderNode(Frozen):
    kind: Literal["folder"] = "folder"
    name: str
    children: list["Node"] = []


Node = Annotated[Union[RequestNode, FolderNode], Field(discriminator="kind")]

FolderNode.model_rebuild()


class ResolvedRequest(Frozen):
    """The single request selected for conversion."""

    name: str
    path: str  # slash-joined ancestry, e.g. "Users/List users"
    method: str = "GET"
    url: UrlSpec = ""
    headers: list[KeyValue] = []
    body: BodySpec | None = None
    auth: dict | None = None
    description: str = ""


class PaginationConfig(Frozen):
    """Where the next-page token lives in a response and how it is sent back."""

    token_path: str = DEFAULT_TOKEN_PATH
    token_param: str = DEFAULT_TOKEN_PARAM
    results_field: str = DEFAULT_RESULTS_FIELD

    @field_validator("token_path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value or any(not segment for segment in value.split(".")):
            raise ValueError(f"invalid token field path: {value!r}")
        return value

    @field_validator("token_param", "results_field")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def segments(self) -> list[str]:
        return self.token_path.split(".")
