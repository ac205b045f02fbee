"""Rendering of assembled documents as OpenAPI 3.0 or Swagger 2.0 text.

Documents are assembled in the OpenAPI 3 shape. ``convert_document``
produces the shape of the requested spec version, ``serialize_document``
renders it as JSON or YAML, and ``read_document`` parses such text back.
"""

import copy
import json
import logging
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

import yaml

from openapi_docgen.errors import InputValidationError

logger = logging.getLogger(__name__)

COMPONENT_REF_PREFIX = "#/components/schemas/"
DEFINITION_REF_PREFIX = "#/definitions/"
SWAGGER_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")


class OpenApiSpecVersion(str, Enum):
    V2 = "2.0"
    V3 = "3.0"


class OpenApiFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"

    @property
    def extension(self) -> str:
        return self.value


def convert_document(document: dict[str, Any], version: OpenApiSpecVersion) -> dict[str, Any]:
    """Return a copy of the document in the shape of ``version``."""
    if OpenApiSpecVersion(version) == OpenApiSpecVersion.V3:
        return copy.deepcopy(document)
    return _to_swagger(document)


def serialize_document(
    document: dict[str, Any],
    version: OpenApiSpecVersion = OpenApiSpecVersion.V3,
    fmt: OpenApiFormat = OpenApiFormat.JSON,
) -> str:
    """Render the document as text."""
    data = convert_document(document, version)
    if OpenApiFormat(fmt) == OpenApiFormat.YAML:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def read_document(text: str) -> dict[str, Any]:
    """Parse a JSON or YAML rendering back into a document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InputValidationError(f"Invalid document text: {e}") from e
    if not isinstance(data, dict):
        raise InputValidationError("A document must be a mapping")
    return data


def detect_spec_version(document: dict[str, Any]) -> OpenApiSpecVersion:
    """Tell Swagger 2.0 documents from OpenAPI 3 ones."""
    if "swagger" in document:
        return OpenApiSpecVersion.V2
    if "openapi" in document:
        return OpenApiSpecVersion.V3
    raise InputValidationError("Not an OpenAPI or Swagger document")


# -- Swagger 2.0 ----------------------------------------------------------------


def _to_swagger(document: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {"swagger": "2.0", "info": copy.deepcopy(document.get("info", {}))}

    servers = [s["url"] for s in document.get("servers", []) if s.get("url")]
    if servers:
        first = urlsplit(servers[0])
        result["host"] = first.netloc
        if first.path and first.path != "/":
            result["basePath"] = first.path
        schemes = []
        for url in servers:
            scheme = urlsplit(url).scheme
            if scheme and scheme not in schemes:
                schemes.append(scheme)
        result["schemes"] = schemes

    paths = {}
    for path, operations in document.get("paths", {}).items():
        item = {}
        for method, op in operations.items():
            if method not in SWAGGER_METHODS:
                logger.warning("Dropping %s %s: not expressible in Swagger 2.0", method.upper(), path)
                continue
            item[method] = _swagger_operation(op)
        if item:
            paths[path] = item
    result["paths"] = paths

    schemas = document.get("components", {}).get("schemas", {})
    if schemas:
        result["definitions"] = {name: _swagger_schema(s) for name, s in schemas.items()}

    return _rewrite_refs(result)


def _swagger_operation(operation: dict[str, Any]) -> dict[str, Any]:
    result = {k: copy.deepcopy(operation[k]) for k in ("tags", "summary", "description", "operationId") if k in operation}

    parameters = [_swagger_parameter(p) for p in operation.get("parameters", [])]
    body = operation.get("requestBody")
    if body:
        content = body.get("content", {})
        result["consumes"] = list(content)
        body_param: dict[str, Any] = {"name": "body", "in": "body", "required": body.get("required", False)}
        if body.get("description"):
            body_param["description"] = body["description"]
        body_param["schema"] = _swagger_schema(next(iter(content.values()), {}).get("schema", {}))
        parameters.append(body_param)
    if parameters:
        result["parameters"] = parameters

    produces: list[str] = []
    responses = {}
    for code, response in operation.get("responses", {}).items():
        converted = {"description": response.get("description", "")}
        content = response.get("content", {})
        for content_type in content:
            if content_type not in produces:
                produces.append(content_type)
        if content:
            converted["schema"] = _swagger_schema(next(iter(content.values())).get("schema", {}))
        responses[code] = converted
    if produces:
        result["produces"] = produces
    result["responses"] = responses
    return result


def _swagger_parameter(parameter: dict[str, Any]) -> dict[str, Any]:
    result = {k: parameter[k] for k in ("name", "in", "description", "required") if k in parameter}
    schema = parameter.get("schema", {})
    if "$ref" in schema or schema.get("type") == "object":
        result["type"] = "string"  # non-body parameters cannot reference schemas
    else:
        for key in ("type", "format", "items", "enum"):
            if key in schema:
                result[key] = _swagger_schema(schema[key]) if key == "items" else copy.deepcopy(schema[key])
    return result


def _swagger_schema(schema: Any) -> Any:
    """Swagger 2.0 has no oneOf; the first alternative is kept."""
    if isinstance(schema, dict):
        if "oneOf" in schema and schema["oneOf"]:
            return _swagger_schema(schema["oneOf"][0])
        return {k: _swagger_schema(v) for k, v in schema.items()}
    if isinstance(schema, list):
        return [_swagger_schema(v) for v in schema]
    return schema


def _rewrite_refs(value: Any) -> Any:
    if isinstance(value, dict):
        rewritten = {}
        for k, v in value.items():
            if k == "$ref" and isinstance(v, str) and v.startswith(COMPONENT_REF_PREFIX):
                rewritten[k] = DEFINITION_REF_PREFIX + v[len(COMPONENT_REF_PREFIX):]
            else:
                rewritten[k] = _rewrite_refs(v)
        return rewritten
    if isinstance(value, list):
        return [_rewrite_refs(v) for v in value]
    return value
