"""Power Query (M) generator: turns a normalized request into a query program."""

import logging

from postman_odc.parser.base import FormPayload, JsonPayload, PaginationConfig, TextPayload

from .literals import render_field_name, render_text, render_value

logger = logging.getLogger(__name__)

INDENT = "    "

METHOD_OVERRIDE_HEADER = "X-HTTP-Method-Override"


class PowerQueryGenerator:
    """Generates a ``let ... in`` program calling ``Web.Contents``.

    Without pagination the program returns the parsed JSON response as is.
    With pagination it follows the next-page token until it is null and
    returns every page's results as one table.
    """

    def generate(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        payload=None,
        pagination: PaginationConfig | None = None,
    ) -> str:
        method = method.upper()
        headers = dict(headers)
        content = self._render_content(payload)

        # Web.Contents sends GET, or POST when Content is set.
        if method != "GET" and content is None:
            content = 'Text.ToBinary("")'
        if method not in ("GET", "POST"):
            headers[METHOD_OVERRIDE_HEADER] = method
        if method == "GET" and content is not None:
            logger.warning("GET request has a body; Power Query will send it as POST.")

        steps = [
            ("apiUrl", render_text(url)),
            ("headers", self._render_record_block(headers, 1)),
        ]
        if content is not None:
            steps.append(("content", content))

        options = {"Headers": "headers"}
        if content is not None:
            options["Content"] = "content"

        if pagination is None:
            steps += [
                ("options", self._render_options(options, 1)),
                ("response", "Web.Contents(apiUrl, options)"),
                ("jsonResponse", "Json.Document(response)"),
            ]
            return self._render_let(steps, "jsonResponse", 0)

        steps += self._render_pagination(options, pagination)
        return self._render_let(steps, "output", 0)

    # -- body ----------------------------------------------------------------

    def _render_content(self, payload) -> str | None:
        if isinstance(payload, JsonPayload):
            return f"Json.FromValue({render_value(payload.value)})"
        if isinstance(payload, FormPayload):
            fields = dict(payload.fields)
            return f"Text.ToBinary(Uri.BuildQueryString({render_value(fields)}))"
        if isinstance(payload, TextPayload):
            return f"Text.ToBinary({render_text(payload.text)})"
        return None

    # -- pagination ----------------------------------------------------------

    def _render_pagination(self, options: dict[str, str], pagination: PaginationConfig) -> list[tuple[str, str]]:
        token_access = "".join(f"[{render_field_name(s)}]" for s in pagination.segments)
        results_access = f"[{render_field_name(pagination.results_field)}]"
        token_param = render_field_name(pagination.token_param)

        page_steps = [
            ("baseOptions", self._render_options(options, 3)),
            (
                "options",
                "if pageToken = null then baseOptions "
                f"else baseOptions & [Query = [{token_param} = pageToken]]",
            ),
            ("response", "Web.Contents(apiUrl, options)"),
            ("jsonResponse", "Json.Document(response)"),
            ("pageResults", f"try jsonResponse{results_access} otherwise {{}}"),
            ("nextToken", f"try jsonResponse{token_access} otherwise null"),
        ]
        get_page = (
            "(pageToken as nullable text) as record =>\n"
            + INDENT * 2
            + self._render_let(
                page_steps,
                "[Results = pageResults, Next = if nextToken = null then null else Text.From(nextToken)]",
                2,
            )
        )

        get_all_pages = "\n".join([
            "(accumulated as list, pageToken as nullable text) as list =>",
            INDENT * 2 + "if pageToken = null then",
            INDENT * 3 + "accumulated",
            INDENT * 2 + "else",
            INDENT * 3 + self._render_let(
                [("page", "GetPage(pageToken)")],
                "@GetAllPages(accumulated & page[Results], page[Next])",
                3,
            ),
        ])

        return [
            ("GetPage", get_page),
            ("GetAllPages", get_all_pages),
            ("firstPage", "GetPage(null)"),
            ("allResults", "GetAllPages(firstPage[Results], firstPage[Next])"),
            ("resultTable", 'Table.FromList(allResults, Splitter.SplitByNothing(), {"Column1"})'),
            (
                "output",
                "if List.IsEmpty(allResults) or not (allResults{0} is record) then resultTable "
                'else Table.ExpandRecordColumn(resultTable, "Column1", Record.FieldNames(allResults{0}))',
            ),
        ]

    # -- layout helpers ------------------------------------------------------

    def _render_let(self, steps: list[tuple[str, str]], result: str, level: int) -> str:
        """Render a let expression whose first line is placed by the caller."""
        inner = INDENT * (level + 1)
        lines = ["let"]
        for i, (name, expression) in enumerate(steps):
            separator = "," if i < len(steps) - 1 else ""
            lines.append(f"{inner}{name} = {expression}{separator}")
        lines.append(INDENT * level + "in")
        lines.append(f"{inner}{result}")
        return "\n".join(lines)

    def _render_record_block(self, mapping: dict[str, str], level: int) -> str:
        if not mapping:
            return "[]"
        inner = INDENT * (level + 1)
        fields = [f"{inner}{render_field_name(k)} = {render_text(v)}" for k, v in mapping.items()]
        return "[\n" + ",\n".join(fields) + "\n" + INDENT * level + "]"

    def _render_options(self, options: dict[str, str], level: int) -> str:
        inner = INDENT * (level + 1)
        fields = [f"{inner}{name} = {expression}" for name, expression in options.items()]
        return "[\n" + ",\n".join(fields) + "\n" + INDENT * level + "]"


def generate(url, method, headers, payload=None, pagination=None) -> str:
    """Generate the query program for one request."""
    return PowerQueryGenerator().generate(url, method, headers, payload, pagination)
