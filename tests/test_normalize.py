from postman_odc.parser.base import (
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
from postman_odc.parser.normalize import auth_headers, compose_url, normalize_body, normalize_headers


class TestComposeUrl:
    def test_structured_url(self):
        spec = StructuredUrl(
            host=["api", "example", "com"],
            path=["v1", "users"],
            query=[
                KeyValue(key="a", value="1"),
                KeyValue(key="b", value="2", enabled=False),
            ],
        )
        assert compose_url(spec, {}) == "https://api.example.com/v1/users?a=1"

    def test_string_url_substituted(self):
        assert compose_url("{{baseUrl}}/health", {"baseUrl": "https://x.io"}) == "https://x.io/health"

    def test_empty_path_has_no_trailing_slash(self):
        spec = StructuredUrl(protocol="http", host=["localhost"])
        assert compose_url(spec, {}) == "http://localhost"

    def test_no_enabled_query_has_no_question_mark(self):
        spec = StructuredUrl(host=["x", "io"], path=["a"], query=[KeyValue(key="q", value="1", enabled=False)])
        assert compose_url(spec, {}) == "https://x.io/a"

    def test_port(self):
        spec = StructuredUrl(protocol="http", host=["localhost"], port="8080", path=["api"])
        assert compose_url(spec, {}) == "http://localhost:8080/api"

    def test_substitution_spans_segments(self):
        spec = StructuredUrl(host=["{{sub", "domain}}"], path=["v1"])
        assert compose_url(spec, {"sub.domain": "api.example.com"}) == "https://api.example.com/v1"

    def test_path_variables(self):
        spec = StructuredUrl(
            host=["x", "io"],
            path=["reports", ":reportId"],
            variables=[KeyValue(key="reportId", value="42")],
        )
        assert compose_url(spec, {}) == "https://x.io/reports/42"

    def test_host_variable_with_scheme(self):
        spec = StructuredUrl(host=["{{baseUrl}}"], path=["v1"])
        assert compose_url(spec, {"baseUrl": "http://localhost:3000"}) == "http://localhost:3000/v1"

    def test_raw_fallback_without_host(self):
        spec = StructuredUrl(raw="{{baseUrl}}/ping")
        assert compose_url(spec, {"baseUrl": "https://x.io"}) == "https://x.io/ping"


class TestNormalizeHeaders:
    def test_substitutes_and_adds_content_type(self):
        headers = normalize_headers(
            [KeyValue(key="Authorization", value="Bearer {{apiKey}}")],
            {"apiKey": "X"},
        )
        assert headers == {"Authorization": "Bearer X", "Content-Type": "application/json"}

    def test_skips_disabled(self):
        headers = normalize_headers([KeyValue(key="X-Debug", value="1", enabled=False)], {})
        assert headers == {"Content-Type": "application/json"}

    def test_last_wins(self):
        headers = normalize_headers(
            [KeyValue(key="Accept", value="text/csv"), KeyValue(key="Accept", value="application/json")],
            {},
        )
        assert headers["Accept"] == "application/json"

    def test_keeps_explicit_content_type(self):
        headers = normalize_headers([KeyValue(key="Content-Type", value="text/plain")], {})
        assert headers == {"Content-Type": "text/plain"}

    def test_keys_not_substituted(self):
        headers = normalize_headers([KeyValue(key="{{name}}", value="v")], {"name": "X-Key"})
        assert "{{name}}" in headers

    def test_content_type_check_ignores_case(self):
        headers = normalize_headers([KeyValue(key="content-type", value="text/csv")], {})
        assert headers == {"content-type": "text/csv"}


class TestNormalizeBody:
    def test_raw_json(self):
        payload = normalize_body(RawBody(text='{"name": "{{user}}", "n": 1}'), {"user": "ada"})
        assert payload == JsonPayload(value={"name": "ada", "n": 1})

    def test_raw_text_fallback(self):
        payload = normalize_body(RawBody(text="<xml>{{v}}</xml>"), {"v": "1"})
        assert isinstance(payload, TextPayload)
        assert payload.text == "<xml>1</xml>"

    def test_blank_raw_is_no_body(self):
        assert normalize_body(RawBody(text="  \n"), {}) is None

    def test_urlencoded_keeps_enabled(self):
        body = UrlEncodedBody(fields=[
            KeyValue(key="format", value="csv"),
            KeyValue(key="since", value="{{since}}"),
            KeyValue(key="debug", value="1", enabled=False),
        ])
        payload = normalize_body(body, {"since": "2024"})
        assert isinstance(payload, FormPayload)
        assert payload.mode == "urlencoded"
        assert payload.fields == [("format", "csv"), ("since", "2024")]

    def test_formdata(self):
        payload = normalize_body(FormDataBody(fields=[KeyValue(key="a", value="1")]), {})
        assert payload.mode == "formdata"

    def test_unsupported_and_absent(self):
        assert normalize_body(UnsupportedBody(mode="graphql"), {}) is None
        assert normalize_body(None, {}) is None


class TestAuthHeaders:
    def test_bearer(self):
        auth = {"type": "bearer", "bearer": [{"key": "token", "value": "{{token}}", "type": "string"}]}
        assert auth_headers(auth, {"token": "abc"}) == [KeyValue(key="Authorization", value="Bearer abc")]

    def test_basic(self):
        auth = {"type": "basic", "basic": [{"key": "username", "value": "ada"}, {"key": "password", "value": "pw"}]}
        assert auth_headers(auth, {}) == [KeyValue(key="Authorization", value="Basic YWRhOnB3")]

    def test_apikey_header(self):
        auth = {"type": "apikey", "apikey": {"key": "X-Api-Key", "value": "k", "in": "header"}}
        assert auth_headers(auth, {}) == [KeyValue(key="X-Api-Key", value="k")]

    def test_unsupported_ignored(self):
        assert auth_headers({"type": "oauth2", "oauth2": []}, {}) == []
        assert auth_headers({"type": "noauth"}, {}) == []
        assert auth_headers(None, {}) == []
