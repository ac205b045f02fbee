"""Operation builder — turns one documented operation into operation records."""

import logging
from typing import Any

from openapi_docgen.errors import (
    InvalidRequestBodyError,
    InvalidUrlError,
    InvalidVerbError,
    MissingResponseDescriptionError,
    OperationGenerationError,
    TypeNotFoundError,
)
from openapi_docgen.generator.diagnostics import DiagnosticsCollector
from openapi_docgen.generator.generics import validate_type_reference
from openapi_docgen.generator.parameters import UrlTemplate, parse_url_template, reconcile_parameters
from openapi_docgen.operation.base import (
    DocumentedOperation,
    OperationRecord,
    ParameterSpec,
    TypeReference,
    VariantKey,
)
from openapi_docgen.resolver import TypeSchemaResolver

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "PUT", "POST", "DELETE", "OPTIONS", "HEAD", "PATCH", "TRACE")

STRING_SCHEMA = {"type": "string"}


class OperationBuilder:
    """Builds OperationRecords, one per URL branch of an operation."""

    def __init__(self, resolver: TypeSchemaResolver):
        self.resolver = resolver

    def identity(self, operation: DocumentedOperation) -> tuple[str, str]:
        """(method, path) used to report on an operation, even a broken one."""
        verb = operation.method.strip()
        method = verb.upper()
        if method not in ALLOWED_METHODS:
            method = verb
        try:
            path = parse_url_template(operation.url).path
        except InvalidUrlError:
            path = operation.url
        return method, path

    def build_or_record(
        self, operation: DocumentedOperation, diagnostics: DiagnosticsCollector
    ) -> list[OperationRecord]:
        """Build the operation, recording the outcome instead of raising.

        Only operation errors are converted; anything else propagates.
        """
        method, path = self.identity(operation)
        try:
            records = self.build(operation)
        except OperationGenerationError as e:
            logger.warning("Skipping %s %s: %s", method, path, e)
            diagnostics.record_failure(method, path, e)
            return []
        diagnostics.record_success(method, path)
        return records

    def build(self, operation: DocumentedOperation) -> list[OperationRecord]:
        """Build the records for one operation or raise an operation error."""
        method = self._validate_method(operation.method)
        template = parse_url_template(operation.url)
        parameters = reconcile_parameters(operation, template)

        for body in operation.request_bodies:
            if body.type is None:
                raise InvalidRequestBodyError(body.name or "<unnamed>")

        schemas: dict[str, dict[str, Any]] = {}
        parameter_schemas = {p.name: self._parameter_schema(p, schemas) for p in parameters}
        request_body = self._content_map(
            [(b.content_type, b.type, b.is_array) for b in operation.request_bodies], schemas
        )
        response_content = {
            code: self._content_map([(c.content_type, c.type, c.is_array) for c in resp.content], schemas)
            for code, resp in operation.responses.items()
        }

        responses = {}
        for code, resp in operation.responses.items():
            if not resp.description.strip():
                raise MissingResponseDescriptionError(code)
            response: dict[str, Any] = {"description": resp.description}
            if response_content[code]:
                response["content"] = {ct: {"schema": s} for ct, s in response_content[code].items()}
            responses[code] = response

        body_description = next((b.description for b in operation.request_bodies if b.description), "")

        record = OperationRecord(
            method=method.lower(),
            path=template.path,
            summary=operation.summary,
            description=operation.description,
            operation_id=operation.operation_id,
            tags=list(operation.tags),
            parameters=parameters,
            parameter_schemas=parameter_schemas,
            request_body=request_body,
            request_body_description=body_description,
            responses=responses,
            schemas=schemas,
            server=template.server,
            variant_key=VariantKey.from_tags(operation.variant_tags),
        )
        return self._branch(record, template)

    # -- steps --------------------------------------------------------------------

    def _validate_method(self, verb: str) -> str:
        method = verb.strip().upper()
        if method not in ALLOWED_METHODS:
            raise InvalidVerbError(verb)
        return method

    def _resolve(self, reference: TypeReference, schemas: dict) -> dict[str, Any]:
        validate_type_reference(reference, self.resolver)
        resolved = self.resolver.resolve(reference)
        if resolved is None:
            raise TypeNotFoundError(reference.name, self.resolver.sources)
        schemas.update(resolved.components)
        return dict(resolved.schema_)

    def _parameter_schema(self, param: ParameterSpec, schemas: dict) -> dict[str, Any]:
        if param.type is None:
            schema = dict(STRING_SCHEMA)
        else:
            schema = self._resolve(param.type, schemas)
        if param.is_array:
            return {"type": "array", "items": schema}
        return schema

    def _content_map(self, entries: list[tuple[str, TypeReference, bool]], schemas: dict) -> dict[str, Any]:
        """Group schemas by content type; several types for one content type become oneOf."""
        grouped: dict[str, list[dict[str, Any]]] = {}
        for content_type, reference, is_array in entries:
            schema = self._resolve(reference, schemas)
            if is_array:
                schema = {"type": "array", "items": schema}
            bucket = grouped.setdefault(content_type, [])
            if schema not in bucket:
                bucket.append(schema)
        return {ct: s[0] if len(s) == 1 else {"oneOf": s} for ct, s in grouped.items()}

    def _branch(self, record: OperationRecord, template: UrlTemplate) -> list[OperationRecord]:
        """Split on optional trailing path parameters.

        ``/items/{id}/{rev}`` with ``rev`` optional yields ``/items/{id}/{rev}``
        and ``/items/{id}``. Optional path parameters elsewhere in the path are
        treated as required.
        """
        optional = {p.name for p in record.parameters if p.location == "path" and not p.required}
        segments = template.path.rstrip("/").split("/")
        trailing = 0
        for segment in reversed(segments):
            if segment.startswith("{") and segment.endswith("}") and segment[1:-1] in optional:
                trailing += 1
            else:
                break

        records = []
        for dropped in range(trailing + 1):
            kept_segments = segments[: len(segments) - dropped]
            path = "/".join(kept_segments) or "/"
            removed = {s[1:-1] for s in segments[len(segments) - dropped:]}
            parameters = [
                p.model_copy(update={"required": True}) if p.location == "path" else p
                for p in record.parameters
                if p.name not in removed or p.location != "path"
            ]
            update: dict[str, Any] = {"path": path if dropped else template.path, "parameters": parameters}
            if dropped:
                update["operation_id"] = None
            records.append(record.model_copy(update=update))
        return records
