"""CLI entry point for postman-odc."""

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from postman_odc.config import DEFAULT_EXTENSION, DEFAULT_RESULTS_FIELD, DEFAULT_TOKEN_PARAM, DEFAULT_TOKEN_PATH
from postman_odc.converter import convert
from postman_odc.errors import ConversionError
from postman_odc.generator.odc import extract_program
from postman_odc.parser.base import PaginationConfig
from postman_odc.parser.postman import list_requests, load_document
from postman_odc.parser.variables import find_placeholders, load_variables_file, parse_assignments

OPTION_NAMES = {
    "token_path": "--token-path",
    "token_param": "--token-param",
    "results_field": "--results-field",
}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_variables(vars_file: Path | None, assignments: tuple[str, ...]) -> dict[str, str]:
    """Variables from the file, overridden by --var options."""
    variables = {}
    if vars_file:
        try:
            variables.update(load_variables_file(vars_file))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--vars-file")
    try:
        variables.update(parse_assignments(assignments))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--var")
    return variables


@click.group()
def main():
    """Postman to ODC: turn Postman requests into Excel Power Query connections."""
    pass


@main.command("convert")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory for the connection file.")
@click.option("-r", "--request", "request_name", default=None, help="Name or full path of the request to convert.")
@click.option("--var", "assignments", multiple=True, metavar="KEY=VALUE", help="Variable value, repeatable.")
@click.option("--vars-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), envvar="POSTMAN_ODC_VARS_FILE", help="YAML/JSON variables or a Postman environment export.")
@click.option("--paginate", is_flag=True, help="Follow the next-page token and combine all pages.")
@click.option("--token-path", default=DEFAULT_TOKEN_PATH, show_default=True, help="Dot-separated path of the next-page token in the response.")
@click.option("--token-param", default=DEFAULT_TOKEN_PARAM, show_default=True, help="Query parameter that sends the token back.")
@click.option("--results-field", default=DEFAULT_RESULTS_FIELD, show_default=True, help="Response field holding each page's results.")
@click.option("--query-name", default=None, help="Query name (defaults to the request name).")
@click.option("--description", default=None, help="Connection description.")
@click.option("--extension", default=DEFAULT_EXTENSION, show_default=True, help="Output file extension.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def convert_command(
    input_path: Path,
    output: Path,
    request_name: str | None,
    assignments: tuple[str, ...],
    vars_file: Path | None,
    paginate: bool,
    token_path: str,
    token_param: str,
    results_field: str,
    query_name: str | None,
    description: str | None,
    extension: str,
    verbose: bool,
):
    """Convert a Postman request into an .odc connection file."""
    _setup_logging(verbose)
    variables = _load_variables(vars_file, assignments)

    pagination = None
    if paginate:
        try:
            pagination = PaginationConfig(token_path=token_path, token_param=token_param, results_field=results_field)
        except ValidationError as e:
            error = e.errors()[0]
            field = error["loc"][0] if error["loc"] else "token_path"
            raise click.BadParameter(error["msg"], param_hint=OPTION_NAMES.get(field, "--token-path"))

    click.echo(f"Parsing {input_path}...")
    try:
        document = load_document(input_path)
        result = convert(
            document,
            request_name=request_name,
            variables=variables,
            pagination=pagination,
            query_name=query_name,
            description=description,
            extension=extension,
        )
    except ConversionError as e:
        raise click.ClickException(str(e))

    click.echo(f"Converting {result.request.method} {result.request.path}" + (" (paginated)" if pagination else ""))
    for name in find_placeholders(result.program):
        click.echo(f"  Warning: unresolved variable {{{{{name}}}}}", err=True)

    output.mkdir(parents=True, exist_ok=True)
    file_path = output / result.filename
    file_path.write_text(result.content, encoding="utf-8")
    click.echo(f"Connection file saved to {file_path}")
    click.echo("")
    click.echo(result.program)


@main.command("list")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def list_command(input_path: Path):
    """List the requests of a Postman document."""
    try:
        paths = list_requests(load_document(input_path))
    except ConversionError as e:
        raise click.ClickException(str(e))
    for path in paths:
        click.echo(path)
    click.echo(f"Found {len(paths)} requests.")


@main.command("show")
@click.argument("odc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show_command(odc_path: Path):
    """Print the query program embedded in a connection file."""
    try:
        program = extract_program(odc_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(program)
