"""Document assembler — the top-level entry point of the generator.

Builds every documented operation, groups the results by variant and wraps
each variant's path tree into a complete OpenAPI document.
"""

import copy
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from openapi_docgen.config import GeneratorConfig
from openapi_docgen.errors import NoOperationElementFoundError, UnableToGenerateAllOperationsError
from openapi_docgen.generator.diagnostics import DiagnosticsCollector
from openapi_docgen.generator.operation import OperationBuilder
from openapi_docgen.generator.variants import VariantAggregator
from openapi_docgen.operation.base import DocumentedOperation, GenerationDiagnostic, VariantKey
from openapi_docgen.resolver import TypeSchemaResolver
from openapi_docgen.serialization import serialize_document

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.1"

DocumentFilter = Callable[[dict[str, Any]], dict[str, Any]]


@dataclass
class GenerationResult:
    """Documents keyed by variant, plus the diagnostics of the run."""

    documents: dict[VariantKey, dict[str, Any]] = field(default_factory=dict)
    diagnostic: GenerationDiagnostic = field(default_factory=GenerationDiagnostic)

    @property
    def default_document(self) -> dict[str, Any] | None:
        return self.documents.get(VariantKey.DEFAULT)


class OpenApiDocumentGenerator:
    """Generates OpenAPI documents from documented operations.

    Filters run against every assembled document in registration order;
    each receives a document and returns the document to keep. A filter
    that raises aborts the run.
    """

    def __init__(
        self,
        resolver: TypeSchemaResolver,
        config: GeneratorConfig | None = None,
        filters: Iterable[DocumentFilter] = (),
    ):
        self.resolver = resolver
        self.config = config or GeneratorConfig()
        self.filters: list[DocumentFilter] = list(filters)

    def add_filter(self, document_filter: DocumentFilter) -> None:
        self.filters.append(document_filter)

    def generate_documents(self, operations: Iterable[DocumentedOperation]) -> GenerationResult:
        """Generate one document per variant.

        Per-operation failures end up in the diagnostic, never as exceptions.
        """
        operations = list(operations)
        diagnostics = DiagnosticsCollector()

        if not operations:
            logger.warning("No operations to generate a document from")
            diagnostics.record_document_error(NoOperationElementFoundError())
            return GenerationResult(diagnostic=diagnostics.result())

        builder = OperationBuilder(self.resolver)
        aggregator = VariantAggregator()
        for operation in operations:
            aggregator.add_all(builder.build_or_record(operation, diagnostics))

        succeeded = diagnostics.succeeded_count
        total = len(operations)
        if succeeded < total:
            diagnostics.record_document_error(UnableToGenerateAllOperationsError(succeeded, total))
        logger.info("Generated %d of %d operations into %d document(s)", succeeded, total, len(aggregator.keys))

        documents = {}
        for key in aggregator.keys:
            documents[key] = self._apply_filters(self._assemble(key, aggregator))
        return GenerationResult(documents=documents, diagnostic=diagnostics.result())

    def generate_document(
        self, operations: Iterable[DocumentedOperation]
    ) -> tuple[dict[str, Any] | None, GenerationDiagnostic]:
        """Generate only the default document."""
        result = self.generate_documents(operations)
        return result.default_document, result.diagnostic

    def generate_serialized_documents(
        self, operations: Iterable[DocumentedOperation]
    ) -> tuple[dict[VariantKey, str], GenerationDiagnostic]:
        """Generate every document rendered with the configured version and format."""
        result = self.generate_documents(operations)
        rendered = {
            key: serialize_document(document, self.config.spec_version, self.config.output_format)
            for key, document in result.documents.items()
        }
        return rendered, result.diagnostic

    def _assemble(self, key: VariantKey, aggregator: VariantAggregator) -> dict[str, Any]:
        document: dict[str, Any] = {
            "openapi": OPENAPI_VERSION,
            "info": self.config.info_object(),
        }

        servers = self.config.servers or aggregator.servers(key)
        if servers:
            document["servers"] = [{"url": url} for url in servers]

        paths: dict[str, Any] = {}
        for path, operations in aggregator.tree(key).items():
            paths[path] = {method: copy.deepcopy(record.to_openapi()) for method, record in operations.items()}
        document["paths"] = paths

        schemas = aggregator.schemas(key)
        if schemas:
            document["components"] = {"schemas": copy.deepcopy(schemas)}
        return document

    def _apply_filters(self, document: dict[str, Any]) -> dict[str, Any]:
        for document_filter in self.filters:
            document = document_filter(document)
        return document
