"""Data models for documented operations and generation results.

The extraction stage converts its input into these models; the generator
consumes them and never mutates them.
"""

import re
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

ParameterLocation = Literal["path", "query", "header"]

_TOKEN_RE = re.compile(r"\s*([<>,=]|[^<>,=\s]+)")


class TypeReference(BaseModel):
    """A type name with its (possibly empty) ordered type arguments."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: tuple["TypeReference", ...] = ()
    parameter: str | None = None  # type parameter bound when used as an argument

    @property
    def is_generic(self) -> bool:
        return bool(self.arguments)

    def __str__(self) -> str:
        text = self.name
        if self.arguments:
            text += "<" + ", ".join(str(a) for a in self.arguments) + ">"
        if self.parameter:
            return f"{self.parameter}={text}"
        return text

    @classmethod
    def parse(cls, text: str) -> "TypeReference":
        """Parse ``Ns.Generic<T1=Ns.A, T2=Ns.B>`` into a TypeReference."""
        tokens = _TOKEN_RE.findall(text)
        if not tokens:
            raise ValueError("empty type reference")
        reference, pos = _parse_reference(tokens, 0)
        if pos != len(tokens):
            raise ValueError(f"unexpected '{tokens[pos]}' in type reference '{text}'")
        return reference


def _parse_reference(tokens: list[str], pos: int) -> tuple[TypeReference, int]:
    parameter = None
    if pos + 1 < len(tokens) and tokens[pos + 1] == "=":
        parameter = tokens[pos]
        pos += 2
    if pos >= len(tokens) or tokens[pos] in "<>,=":
        raise ValueError("expected a type name")
    name = tokens[pos]
    pos += 1

    arguments = []
    if pos < len(tokens) and tokens[pos] == "<":
        pos += 1
        while True:
            argument, pos = _parse_reference(tokens, pos)
            arguments.append(argument)
            if pos >= len(tokens):
                raise ValueError("unterminated type argument list")
            if tokens[pos] == ",":
                pos += 1
                continue
            if tokens[pos] == ">":
                pos += 1
                break
            raise ValueError(f"unexpected '{tokens[pos]}' in type argument list")

    return TypeReference(name=name, arguments=tuple(arguments), parameter=parameter), pos


class ParameterSpec(BaseModel):
    """A single documented parameter."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation | None = None  # None = infer from the URL
    type: TypeReference | None = None  # None = string
    required: bool = False
    description: str = ""
    is_array: bool = False


class RequestBodySpec(BaseModel):
    """One (content type, body type) pair of a request."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    content_type: str = "application/json"
    type: TypeReference | None = None  # the cross-reference to the payload type
    description: str = ""
    is_array: bool = False


class ContentSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_type: str = "application/json"
    type: TypeReference
    is_array: bool = False


class ResponseSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str = ""
    content: list[ContentSpec] = []


class DocumentedOperation(BaseModel):
    """One documented endpoint occurrence."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    summary: str = ""
    description: str = ""
    operation_id: str | None = None
    tags: list[str] = []
    parameters: list[ParameterSpec] = []
    request_bodies: list[RequestBodySpec] = []
    responses: dict[str, ResponseSpec] = {}
    variant_tags: frozenset[str] = frozenset()


class ResolvedSchema(BaseModel):
    """Resolver output: the schema to embed plus the components it needs."""

    schema_: dict[str, Any] = Field(alias="schema")
    components: dict[str, dict[str, Any]] = {}

    model_config = ConfigDict(populate_by_name=True)


class VariantKey(BaseModel):
    """Ordered, hashable discriminator identifying one output document."""

    model_config = ConfigDict(frozen=True)

    DEFAULT: ClassVar["VariantKey"]

    tags: tuple[str, ...] = ()

    @classmethod
    def from_tags(cls, tags) -> "VariantKey":
        return cls(tags=tuple(sorted(set(tags))))

    @property
    def is_default(self) -> bool:
        return not self.tags

    def __str__(self) -> str:
        return ", ".join(self.tags) if self.tags else "default"


VariantKey.DEFAULT = VariantKey()


class OperationRecord(BaseModel):
    """A successfully built operation, ready to be placed into a document."""

    method: str  # lower case, as used for OpenAPI path item keys
    path: str
    summary: str = ""
    description: str = ""
    operation_id: str | None = None
    tags: list[str] = []
    parameters: list[ParameterSpec] = []
    parameter_schemas: dict[str, dict[str, Any]] = {}
    request_body: dict[str, dict[str, Any]] = {}  # content type -> schema
    request_body_description: str = ""
    responses: dict[str, dict[str, Any]] = {}  # status code -> response object
    schemas: dict[str, dict[str, Any]] = {}  # component schemas used
    server: str | None = None
    variant_key: VariantKey = VariantKey.DEFAULT

    def to_openapi(self) -> dict[str, Any]:
        """Render as an OpenAPI 3 operation object."""
        operation: dict[str, Any] = {}
        if self.tags:
            operation["tags"] = list(self.tags)
        if self.summary:
            operation["summary"] = self.summary
        if self.description:
            operation["description"] = self.description
        if self.operation_id:
            operation["operationId"] = self.operation_id
        if self.parameters:
            operation["parameters"] = [self._parameter_object(p) for p in self.parameters]
        if self.request_body:
            body: dict[str, Any] = {
                "content": {ct: {"schema": schema} for ct, schema in self.request_body.items()},
                "required": True,
            }
            if self.request_body_description:
                body["description"] = self.request_body_description
            operation["requestBody"] = body
        operation["responses"] = {code: dict(resp) for code, resp in self.responses.items()}
        return operation

    def _parameter_object(self, param: ParameterSpec) -> dict[str, Any]:
        result: dict[str, Any] = {"name": param.name, "in": param.location}
        if param.description:
            result["description"] = param.description
        if param.required:
            result["required"] = True
        result["schema"] = self.parameter_schemas.get(param.name, {"type": "string"})
        return result


class GenerationError(BaseModel):
    """A recorded error, document- or operation-scoped."""

    kind: str
    message: str
    method: str | None = None
    path: str | None = None

    @classmethod
    def from_exception(
        cls, exc: Exception, method: str | None = None, path: str | None = None
    ) -> "GenerationError":
        return cls(kind=type(exc).__name__, message=str(exc), method=method, path=path)


class OperationDiagnostic(BaseModel):
    """Outcome of one attempted operation. No errors means success."""

    method: str
    path: str
    errors: list[GenerationError] = []

    @property
    def succeeded(self) -> bool:
        return not self.errors


class GenerationDiagnostic(BaseModel):
    """Everything a run reports besides the documents themselves."""

    document_errors: list[GenerationError] = []
    operation_diagnostics: list[OperationDiagnostic] = []

    @property
    def failed_operations(self) -> list[OperationDiagnostic]:
        return [d for d in self.operation_diagnostics if not d.succeeded]

    @property
    def succeeded_count(self) -> int:
        return sum(1 for d in self.operation_diagnostics if d.succeeded)
