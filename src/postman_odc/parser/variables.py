"""Postman ``{{variable}}`` substitution and variable sources."""

import json
import re
from pathlib import Path

import yaml

PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+)\}\}")


def substitute(text: str, variables: dict[str, str]) -> str:
    """Replace every ``{{key}}`` of a known variable with its value.

    Keys match exactly and literally. Unknown placeholders are left as they
    are and values are inserted without escaping. This is a single pass: a
    value that itself contains ``{{...}}`` is not expanded.
    """
    if not variables or not text:
        return text
    keys = sorted(variables, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape("{{" + key + "}}") for key in keys))
    return pattern.sub(lambda m: variables[m.group(0)[2:-2]], text)


def find_placeholders(text: str) -> list[str]:
    """Names of the ``{{...}}`` placeholders left in a text, in order, without repeats."""
    names: list[str] = []
    for match in PLACEHOLDER_RE.finditer(text or ""):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def parse_assignments(assignments) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings."""
    variables = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"expected KEY=VALUE, got {item!r}")
        variables[key] = value
    return variables


def load_variables_file(file_path: Path) -> dict[str, str]:
    """Load variables from a YAML/JSON mapping or a Postman environment export.

    Environment exports keep only enabled entries of their ``values`` list.
    """
    text = file_path.read_text(encoding="utf-8-sig")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        # Postman exports indent with tabs, which YAML rejects
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            raise ValueError(f"{file_path} is not valid YAML/JSON: {e}") from e
    if data is None:
        return {}
    if isinstance(data, dict) and isinstance(data.get("values"), list):
        return {
            str(v["key"]): _as_text(v.get("value"))
            for v in data["values"]
            if isinstance(v, dict) and v.get("key") and v.get("enabled", True)
        }
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} must contain a mapping of variable names to values")
    return {str(k): _as_text(v) for k, v in data.items()}


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)
