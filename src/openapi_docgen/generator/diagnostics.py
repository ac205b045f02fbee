"""Run-scoped accumulator for generation errors."""

import threading

from openapi_docgen.operation.base import GenerationDiagnostic, GenerationError, OperationDiagnostic


class DiagnosticsCollector:
    """Append-only record of document- and operation-level outcomes.

    Operation entries keep the order in which they were recorded. Mutations
    are serialized so operations may be built from several threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._document_errors: list[GenerationError] = []
        self._operations: list[OperationDiagnostic] = []

    def record_success(self, method: str, path: str) -> None:
        with self._lock:
            self._operations.append(OperationDiagnostic(method=method, path=path))

    def record_failure(self, method: str, path: str, exc: Exception) -> None:
        error = GenerationError.from_exception(exc, method=method, path=path)
        with self._lock:
            self._operations.append(OperationDiagnostic(method=method, path=path, errors=[error]))

    def record_document_error(self, exc: Exception) -> None:
        with self._lock:
            self._document_errors.append(GenerationError.from_exception(exc))

    @property
    def operation_count(self) -> int:
        return len(self._operations)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for d in self._operations if d.succeeded)

    def result(self) -> GenerationDiagnostic:
        with self._lock:
            return GenerationDiagnostic(
                document_errors=list(self._document_errors),
                operation_diagnostics=list(self._operations),
            )
