"""Exception taxonomy for document generation.

Operation-scoped errors drop a single operation and are recorded as
diagnostics. Document-scoped errors summarize a whole run.
"""


class DocGenError(Exception):
    """Base class for every error raised by openapi-docgen."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class InputValidationError(DocGenError):
    """Raised when an input file cannot be loaded or validated."""

    def __init__(self, message: str, file_path: str | None = None) -> None:
        self.file_path = file_path
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.file_path:
            return f"{self.file_path}: {self.message}"
        return self.message


# -- operation scope ----------------------------------------------------------


class OperationGenerationError(DocGenError):
    """An error that invalidates one operation but not the run."""


class InvalidVerbError(OperationGenerationError):
    def __init__(self, verb: str) -> None:
        super().__init__(f"The HTTP method '{verb}' is not supported.")


class InvalidUrlError(OperationGenerationError):
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"The URL '{url}' is invalid: {reason}")


class MissingInAttributeError(OperationGenerationError):
    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(
            f"Parameter(s) {', '.join(names)} are missing an 'in' attribute "
            "and do not appear in the URL."
        )


class ConflictingParameterError(OperationGenerationError):
    def __init__(self, name: str, url: str) -> None:
        self.name = name
        super().__init__(
            f"The parameter '{name}' is declared with conflicting roles in '{url}'."
        )


class UndocumentedPathParameterError(OperationGenerationError):
    def __init__(self, name: str, url: str) -> None:
        self.name = name
        super().__init__(f"The path parameter '{name}' in '{url}' is not documented.")


class UndocumentedGenericTypeError(OperationGenerationError):
    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(
            f"The generic type '{type_name}' must document every one of its type arguments."
        )


class UnorderedGenericTypeError(OperationGenerationError):
    def __init__(self, type_name: str, expected: list[str]) -> None:
        self.type_name = type_name
        super().__init__(
            f"The type arguments of '{type_name}' must be documented in declaration "
            f"order: {', '.join(expected)}."
        )


class InvalidRequestBodyError(OperationGenerationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"The request body '{name}' has no type cross-reference.")


class TypeNotFoundError(OperationGenerationError):
    def __init__(self, type_name: str, sources: list[str]) -> None:
        self.type_name = type_name
        self.sources = sources
        searched = ", ".join(sources) if sources else "<none>"
        super().__init__(f"The type '{type_name}' could not be found in: {searched}")


class MissingResponseDescriptionError(OperationGenerationError):
    def __init__(self, status_code: str) -> None:
        self.status_code = status_code
        super().__init__(f"The response for status code '{status_code}' has no description.")


# -- document scope -----------------------------------------------------------


class DocumentGenerationError(DocGenError):
    """An error that describes the outcome of the whole run."""


class UnableToGenerateAllOperationsError(DocumentGenerationError):
    def __init__(self, succeeded: int, total: int) -> None:
        self.succeeded = succeeded
        self.total = total
        super().__init__(f"Generation succeeded {succeeded} of {total} operations.")


class NoOperationElementFoundError(DocumentGenerationError):
    def __init__(self) -> None:
        super().__init__("No operation was found to generate a document from.")
