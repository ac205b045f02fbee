"""Built-in document filters.

A filter is a callable taking an assembled document and returning the
document to keep. Register them with ``OpenApiDocumentGenerator``.
"""

from typing import Any

from openapi_docgen.serialization import COMPONENT_REF_PREFIX


def sort_paths(document: dict[str, Any]) -> dict[str, Any]:
    """Order paths alphabetically."""
    document["paths"] = dict(sorted(document.get("paths", {}).items()))
    return document


def remove_unused_schemas(document: dict[str, Any]) -> dict[str, Any]:
    """Drop component schemas that nothing in the paths refers to."""
    schemas = document.get("components", {}).get("schemas")
    if not schemas:
        return document

    used: set[str] = set()
    pending = _component_refs(document.get("paths", {}))
    while pending:
        name = pending.pop()
        if name in used or name not in schemas:
            continue
        used.add(name)
        pending.update(_component_refs(schemas[name]))

    document["components"]["schemas"] = {k: v for k, v in schemas.items() if k in used}
    if not document["components"]["schemas"]:
        del document["components"]["schemas"]
        if not document["components"]:
            del document["components"]
    return document


def make_server_filter(urls: list[str]):
    """Build a filter that replaces the server list with ``urls``."""

    def replace_servers(document: dict[str, Any]) -> dict[str, Any]:
        if urls:
            document["servers"] = [{"url": url} for url in urls]
        else:
            document.pop("servers", None)
        return document

    return replace_servers


def _component_refs(value: Any) -> set[str]:
    """Names of the component schemas ``value`` refers to, at any depth."""
    if isinstance(value, dict):
        names = set()
        for k, v in value.items():
            if k == "$ref" and isinstance(v, str) and v.startswith(COMPONENT_REF_PREFIX):
                names.add(v[len(COMPONENT_REF_PREFIX):])
            else:
                names |= _component_refs(v)
        return names
    if isinstance(value, list):
        return set().union(*(_component_refs(v) for v in value))
    return set()
