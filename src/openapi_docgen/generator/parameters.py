"""Parameter reconciliation against the URL template.

Assigns every documented parameter a definite location (path, query or
header) and rejects declarations that disagree with the template.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlsplit

from openapi_docgen.errors import (
    ConflictingParameterError,
    InvalidUrlError,
    MissingInAttributeError,
    UndocumentedPathParameterError,
)
from openapi_docgen.operation.base import DocumentedOperation, ParameterSpec

PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][\w\-]*)\}")

SUPPORTED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class UrlTemplate:
    """The parsed pieces of an operation URL template."""

    url: str
    path: str
    scheme: str = ""
    netloc: str = ""
    placeholders: list[str] = field(default_factory=list)
    query_keys: list[str] = field(default_factory=list)

    @property
    def server(self) -> str | None:
        if not self.scheme:
            return None
        return f"{self.scheme}://{self.netloc}"


def parse_url_template(url: str) -> UrlTemplate:
    """Split a URL template into scheme, host, path and query parts.

    Raises InvalidUrlError when the template is not a well-formed absolute
    http(s) URL or server-relative path.
    """
    if not url or not url.strip():
        raise InvalidUrlError(url, "the URL is empty")
    try:
        parts = urlsplit(url.strip())
        if parts.scheme:
            if parts.scheme.lower() not in SUPPORTED_SCHEMES:
                raise InvalidUrlError(url, f"unsupported scheme '{parts.scheme}'")
            if not parts.hostname:
                raise InvalidUrlError(url, "the host is missing")
            if "{" in parts.netloc or "}" in parts.netloc:
                raise InvalidUrlError(url, "the host must not contain placeholders")
            _ = parts.port  # raises ValueError for a malformed port
        elif parts.netloc or not parts.path.startswith("/"):
            raise InvalidUrlError(url, "a relative URL must start with '/'")
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e

    path = parts.path or "/"
    if "{" in PLACEHOLDER_RE.sub("", path) or "}" in PLACEHOLDER_RE.sub("", path):
        raise InvalidUrlError(url, "the path contains a malformed placeholder")

    placeholders = []
    for name in PLACEHOLDER_RE.findall(path):
        if name not in placeholders:
            placeholders.append(name)

    query_keys = []
    for key, _ in parse_qsl(parts.query, keep_blank_values=True):
        if key not in query_keys:
            query_keys.append(key)

    return UrlTemplate(
        url=url,
        path=path,
        scheme=parts.scheme.lower(),
        netloc=parts.netloc,
        placeholders=placeholders,
        query_keys=query_keys,
    )


def reconcile_parameters(
    operation: DocumentedOperation, template: UrlTemplate | None = None
) -> list[ParameterSpec]:
    """Return the operation's parameters, each with a resolved location.

    Declaration order is kept. Path parameters are always marked required
    unless explicitly declared optional, which only the branching logic in
    the operation builder accepts.
    """
    if template is None:
        template = parse_url_template(operation.url)

    resolved: list[ParameterSpec] = []
    inferred_path: list[str] = []
    unresolved: list[str] = []

    for param in operation.parameters:
        if param.location is not None:
            if param.location == "path" and param.name not in template.placeholders:
                raise UndocumentedPathParameterError(param.name, operation.url)
            resolved.append(param)
        elif param.name in template.placeholders:
            inferred_path.append(param.name)
            resolved.append(param.model_copy(update={"location": "path", "required": True}))
        elif param.name in template.query_keys:
            resolved.append(param.model_copy(update={"location": "query"}))
        else:
            unresolved.append(param.name)

    if unresolved:
        raise MissingInAttributeError(unresolved)

    for name in inferred_path:
        if name in template.query_keys:
            raise ConflictingParameterError(name, operation.url)

    seen: set[str] = set()
    for param in resolved:
        if param.name in seen:
            raise ConflictingParameterError(param.name, operation.url)
        seen.add(param.name)

    declared_path = {p.name for p in resolved if p.location == "path"}
    for name in template.placeholders:
        if name not in declared_path:
            raise UndocumentedPathParameterError(name, operation.url)

    return resolved
