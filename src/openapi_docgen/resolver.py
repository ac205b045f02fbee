"""Type schema resolution.

The generator only depends on the ``TypeSchemaResolver`` protocol. The
registry implementation below resolves types from a YAML/JSON description
of the contract types, standing in for reflection over compiled contracts.
"""

import logging
from pathlib import Path
from typing import Any, Protocol

from openapi_docgen.errors import InputValidationError, TypeNotFoundError
from openapi_docgen.operation.base import ResolvedSchema, TypeReference
from openapi_docgen.operation.loader import load_yaml_file

logger = logging.getLogger(__name__)

COMPONENT_REF_PREFIX = "#/components/schemas/"

PRIMITIVE_SCHEMAS: dict[str, dict[str, Any]] = {
    "string": {"type": "string"},
    "str": {"type": "string"},
    "System.String": {"type": "string"},
    "char": {"type": "string"},
    "int": {"type": "integer", "format": "int32"},
    "integer": {"type": "integer", "format": "int32"},
    "System.Int32": {"type": "integer", "format": "int32"},
    "long": {"type": "integer", "format": "int64"},
    "System.Int64": {"type": "integer", "format": "int64"},
    "bool": {"type": "boolean"},
    "boolean": {"type": "boolean"},
    "System.Boolean": {"type": "boolean"},
    "float": {"type": "number", "format": "float"},
    "double": {"type": "number", "format": "double"},
    "System.Double": {"type": "number", "format": "double"},
    "decimal": {"type": "number", "format": "double"},
    "number": {"type": "number"},
    "datetime": {"type": "string", "format": "date-time"},
    "System.DateTime": {"type": "string", "format": "date-time"},
    "date": {"type": "string", "format": "date"},
    "uuid": {"type": "string", "format": "uuid"},
    "guid": {"type": "string", "format": "uuid"},
    "System.Guid": {"type": "string", "format": "uuid"},
    "object": {"type": "object"},
}


class TypeSchemaResolver(Protocol):
    """What the generator needs to know about types.

    ``generic_parameters`` returns the declared type parameter names in
    declaration order (empty for non-generic types) or None when the type is
    unknown. ``resolve`` returns None, or raises TypeNotFoundError, when the
    type or one of the types it depends on is unknown.
    """

    @property
    def sources(self) -> list[str]: ...

    def generic_parameters(self, name: str) -> list[str] | None: ...

    def resolve(self, reference: TypeReference) -> ResolvedSchema | None: ...


class RegistryTypeResolver:
    """Resolves types from an in-memory registry of type definitions.

    Each definition may declare ``type_parameters``, ``properties`` (a
    mapping of property name to a type expression or to a mapping with
    ``type`` and ``description``), ``required``, ``description`` or ``enum``.
    A type expression is a type reference, optionally suffixed with ``[]``
    for arrays, and may use the enclosing type's parameters.
    """

    def __init__(self, types: dict[str, dict[str, Any]], sources: list[str] | None = None):
        self.types = types
        self._sources = list(sources) if sources else ["<registry>"]

    @property
    def sources(self) -> list[str]:
        return self._sources

    def generic_parameters(self, name: str) -> list[str] | None:
        if name in PRIMITIVE_SCHEMAS:
            return []
        definition = self.types.get(name)
        if definition is None:
            return None
        return list(definition.get("type_parameters", []))

    def resolve(self, reference: TypeReference) -> ResolvedSchema | None:
        if reference.name not in PRIMITIVE_SCHEMAS and reference.name not in self.types:
            return None
        components: dict[str, dict[str, Any]] = {}
        schema = self._schema_for(reference, components)
        return ResolvedSchema(schema=schema, components=components)

    # -- internals --------------------------------------------------------------

    def _schema_for(self, reference: TypeReference, components: dict) -> dict[str, Any]:
        if reference.name in PRIMITIVE_SCHEMAS:
            return dict(PRIMITIVE_SCHEMAS[reference.name])

        definition = self.types.get(reference.name)
        if definition is None:
            raise TypeNotFoundError(reference.name, self.sources)

        key = component_name(reference)
        if key not in components:
            components[key] = {}  # placeholder, stops recursion on cyclic types
            components[key] = self._definition_schema(reference, definition, components)
        return {"$ref": COMPONENT_REF_PREFIX + key}

    def _definition_schema(self, reference: TypeReference, definition: dict, components: dict) -> dict[str, Any]:
        if "enum" in definition:
            schema: dict[str, Any] = {"type": "string", "enum": list(definition["enum"])}
            if definition.get("description"):
                schema["description"] = definition["description"]
            return schema

        parameters = definition.get("type_parameters", [])
        bindings = dict(zip(parameters, reference.arguments))

        properties = {}
        for prop_name, prop in (definition.get("properties") or {}).items():
            if isinstance(prop, dict):
                expression = prop.get("type", "string")
                description = prop.get("description", "")
            else:
                expression = prop
                description = ""
            prop_schema = self._expression_schema(str(expression), bindings, components)
            if description:
                prop_schema["description"] = description
            properties[prop_name] = prop_schema

        schema = {"type": "object", "properties": properties}
        if definition.get("required"):
            schema["required"] = list(definition["required"])
        if definition.get("description"):
            schema["description"] = definition["description"]
        return schema

    def _expression_schema(self, expression: str, bindings: dict, components: dict) -> dict[str, Any]:
        expression = expression.strip()
        if expression.endswith("[]"):
            return {"type": "array", "items": self._expression_schema(expression[:-2], bindings, components)}
        reference = _substitute(TypeReference.parse(expression), bindings)
        return self._schema_for(reference, components)


def _substitute(reference: TypeReference, bindings: dict[str, TypeReference]) -> TypeReference:
    if not reference.arguments and reference.name in bindings:
        return bindings[reference.name].model_copy(update={"parameter": reference.parameter})
    if not reference.arguments:
        return reference
    arguments = tuple(_substitute(a, bindings) for a in reference.arguments)
    return reference.model_copy(update={"arguments": arguments})


def component_name(reference: TypeReference) -> str:
    """Component key for a (possibly generic) type reference."""
    if not reference.arguments:
        return reference.name
    return "_".join([reference.name] + [component_name(a) for a in reference.arguments])


def load_registry(file_path: Path) -> RegistryTypeResolver:
    """Build a RegistryTypeResolver from a YAML/JSON type registry file."""
    data = load_yaml_file(file_path) or {}
    if not isinstance(data, dict):
        raise InputValidationError("Expected a mapping with a 'types' key", str(file_path))
    types = data.get("types") or {}
    if not isinstance(types, dict):
        raise InputValidationError("'types' must be a mapping of type name to definition", str(file_path))
    sources = data.get("sources") or [str(file_path)]
    logger.debug("Loaded %d type definitions from %s", len(types), file_path)
    return RegistryTypeResolver(types, sources=sources)
