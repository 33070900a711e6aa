"""End-to-end conversion tests over the fixture documents."""

from pathlib import Path

import pytest

from postman_odc import convert
from postman_odc.errors import AmbiguousRequestError, ConversionError
from postman_odc.generator.odc import extract_program
from postman_odc.parser.base import PaginationConfig
from postman_odc.parser.postman import load_document

FIXTURES = Path(__file__).parent / "fixtures"


class TestGetUsersScenario:
    def test_get_users_export(self):
        document = load_document(FIXTURES / "get_users.json")
        result = convert(document, variables={"apiKey": "secret"})

        assert result.query_name == "Get Users"
        assert result.filename == "Query - Get Users.odc"
        assert "<odc:CommandText>SELECT * FROM [Get Users]</odc:CommandText>" in result.content

        program = extract_program(result.content)
        assert program == result.program
        assert 'apiUrl = "https://api.example.com/users"' in program
        assert "{{apiKey}}" not in program
        assert 'Authorization = "Bearer secret"' in program

    def test_unresolved_variable_kept(self):
        result = convert(load_document(FIXTURES / "get_users.json"))
        assert 'Authorization = "Bearer {{apiKey}}"' in result.program


class TestCollection:
    @pytest.fixture
    def sample(self):
        return load_document(FIXTURES / "sample.postman.json")

    def test_requires_selector(self, sample):
        with pytest.raises(AmbiguousRequestError):
            convert(sample)

    def test_collection_variables_are_defaults(self, sample):
        result = convert(sample, "List users")
        assert 'apiUrl = "https://api.example.com/v1/users?limit=10"' in result.program
        assert 'Authorization = "Bearer collection-key"' in result.program
        assert "X-Debug" not in result.program

    def test_caller_variables_override(self, sample):
        result = convert(sample, "List users", variables={"apiKey": "override"})
        assert 'Authorization = "Bearer override"' in result.program

    def test_json_body_request(self, sample):
        result = convert(sample, "Users/Create user", variables={"userName": "ada"})
        assert 'apiUrl = "https://api.example.com/v1/users"' in result.program
        assert 'Json.FromValue([name = "ada", active = true, tags = {"a", "b"}])' in result.program

    def test_urlencoded_request(self, sample):
        result = convert(sample, "Export report", variables={"since": "2024-01-01"})
        assert 'apiUrl = "https://api.example.com/v1/reports/42/export"' in result.program
        assert 'Uri.BuildQueryString([format = "csv", since = "2024-01-01"])' in result.program
        assert '#"Content-Type" = "application/x-www-form-urlencoded"' in result.program

    def test_default_description(self, sample):
        result = convert(sample, "Health")
        assert "<o:Description>GET Health</o:Description>" in result.content

    def test_query_name_and_description(self, sample):
        result = convert(sample, "Health", query_name="Service: health", description="Ping")
        assert result.query_name == "Service_ health"
        assert result.filename == "Query - Service_ health.odc"
        assert "<o:Description>Ping</o:Description>" in result.content


class TestPaginatedConversion:
    def test_bare_request_paginated(self):
        document = load_document(FIXTURES / "bare_request.json")
        result = convert(document, variables={"token": "t0k"}, pagination=PaginationConfig())

        program = result.program
        assert 'apiUrl = "https://api.hubapi.com/crm/v3/objects/contacts?limit=100"' in program
        assert "try jsonResponse[paging][next][after] otherwise null" in program
        assert "@GetAllPages" in program
        assert result.query_name == "Request"
        assert extract_program(result.content) == program


class TestFailures:
    def test_all_errors_are_conversion_errors(self):
        with pytest.raises(ConversionError):
            convert({"openapi": "3.0.0", "paths": {}})
        with pytest.raises(ConversionError):
            convert({"item": []})
        with pytest.raises(ConversionError):
            convert(load_document(FIXTURES / "get_users.json"), "Missing")
