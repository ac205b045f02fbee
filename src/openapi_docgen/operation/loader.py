"""Loader for documented-operation files.

Reads a YAML or JSON file (JSON is a YAML subset) listing the documented
operations and converts it into DocumentedOperation models.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from openapi_docgen.errors import InputValidationError

from openapi_docgen.operation.base import ContentSpec, DocumentedOperation, ParameterSpec, RequestBodySpec, ResponseSpec, TypeReference


def load_yaml_file(file_path: Path) -> Any:
    """Load and parse a YAML or JSON file."""
    if not file_path.exists():
        raise InputValidationError("File not found", str(file_path))

    try:
        with file_path.open(encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InputValidationError(f"Invalid YAML syntax: {e}", str(file_path)) from e


def format_pydantic_error(error: ValidationError, context: str = "") -> str:
    """Format Pydantic validation error for human readability."""
    messages = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"])
        msg = err["msg"]
        if context:
            messages.append(f"{context}.{loc}: {msg}")
        else:
            messages.append(f"{loc}: {msg}")
    return "\n".join(messages)


def load_operations(file_path: Path) -> list[DocumentedOperation]:
    """Load every documented operation from a file.

    The file holds either a list of operations or a mapping with an
    ``operations`` key. An empty file yields no operations.
    """
    data = load_yaml_file(file_path)
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("operations") or []
    if not isinstance(data, list):
        raise InputValidationError("Expected a list of operations", str(file_path))

    operations = []
    for index, raw in enumerate(data):
        context = f"operations[{index}]"
        try:
            operations.append(parse_operation(raw))
        except ValidationError as e:
            raise InputValidationError(format_pydantic_error(e, context), str(file_path)) from e
        except (TypeError, ValueError, AttributeError) as e:
            raise InputValidationError(f"{context}: {e}", str(file_path)) from e
    return operations


def parse_operation(raw: dict) -> DocumentedOperation:
    """Convert one raw operation mapping into a DocumentedOperation."""
    return DocumentedOperation(
        method=str(raw.get("method", "")),
        url=str(raw.get("url", "")),
        summary=raw.get("summary", ""),
        description=raw.get("description", ""),
        operation_id=raw.get("operation_id") or raw.get("operationId"),
        tags=raw.get("tags", []),
        parameters=_parse_parameters(raw.get("parameters", [])),
        request_bodies=_parse_request_bodies(raw.get("request_bodies", [])),
        responses=_parse_responses(raw.get("responses", {})),
        variant_tags=raw.get("variant_tags", []),
    )


def _parse_type(value: Any) -> tuple[TypeReference | None, bool]:
    """Parse a type expression; a trailing ``[]`` marks an array of that type."""
    if value is None or value == "":
        return None, False
    if isinstance(value, TypeReference):
        return value, False
    text = str(value).strip()
    is_array = text.endswith("[]")
    if is_array:
        text = text[:-2]
    return TypeReference.parse(text), is_array


def _parse_parameters(params: list[dict]) -> list[ParameterSpec]:
    result = []
    for p in params:
        type_, is_array = _parse_type(p.get("type"))
        result.append(
            ParameterSpec(
                name=p.get("name"),
                location=p.get("in"),
                type=type_,
                required=p.get("required", False),
                description=p.get("description", ""),
                is_array=p.get("is_array", is_array),
            )
        )
    return result


def _parse_request_bodies(bodies: list[dict]) -> list[RequestBodySpec]:
    result = []
    for b in bodies:
        type_, is_array = _parse_type(b.get("type"))
        result.append(
            RequestBodySpec(
                name=b.get("name", ""),
                content_type=b.get("content_type", "application/json"),
                type=type_,
                description=b.get("description", ""),
                is_array=b.get("is_array", is_array),
            )
        )
    return result


def _parse_content(content: dict) -> ContentSpec:
    type_, is_array = _parse_type(content.get("type"))
    return ContentSpec(
        content_type=content.get("content_type", "application/json"),
        type=type_,
        is_array=content.get("is_array", is_array),
    )


def _parse_responses(responses: dict) -> dict[str, ResponseSpec]:
    result = {}
    for status_code, resp in responses.items():
        resp = resp or {}
        result[str(status_code)] = ResponseSpec(
            description=resp.get("description") or "",
            content=[_parse_content(c) for c in resp.get("content", [])],
        )
    return result
