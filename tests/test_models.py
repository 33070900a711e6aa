import pytest
from pydantic import TypeAdapter, ValidationError

from postman_odc.parser.base import (
    BodySpec,
    FolderNode,
    KeyValue,
    PaginationConfig,
    RawBody,
    RequestNode,
    ResolvedRequest,
    UnsupportedBody,
)


class TestKeyValue:
    def test_defaults(self):
        kv = KeyValue(key="limit")
        assert kv.value == ""
        assert kv.enabled is True

    def test_frozen(self):
        kv = KeyValue(key="limit", value="10")
        with pytest.raises(ValidationError):
            kv.value = "20"


class TestBodySpec:
    def test_discriminates_on_kind(self):
        adapter = TypeAdapter(BodySpec)
        assert isinstance(adapter.validate_python({"kind": "raw", "text": "{}"}), RawBody)
        assert isinstance(adapter.validate_python({"kind": "unsupported", "mode": "graphql"}), UnsupportedBody)


class TestTree:
    def test_folder_holds_requests_and_folders(self):
        folder = FolderNode(
            name="Users",
            children=[
                RequestNode(name="List", request={"method": "GET", "url": "https://x"}),
                FolderNode(name="Nested", children=[]),
            ],
        )
        assert folder.children[0].kind == "request"
        assert folder.children[1].kind == "folder"


class TestResolvedRequest:
    def test_minimal_request(self):
        req = ResolvedRequest(name="Ping", path="Ping", url="https://api.example.com/ping")
        assert req.method == "GET"
        assert req.headers == []
        assert req.body is None


class TestPaginationConfig:
    def test_default_path_splits_into_segments(self):
        config = PaginationConfig()
        assert config.token_path == "paging.next.after"
        assert config.segments == ["paging", "next", "after"]
        assert config.token_param == "after"
        assert config.results_field == "results"

    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            PaginationConfig(token_path="")

    def test_empty_segment_rejected(self):
        with pytest.raises(ValidationError):
            PaginationConfig(token_path="paging..after")
