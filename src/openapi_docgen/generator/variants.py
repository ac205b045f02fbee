"""Variant aggregator — groups operation records into per-document path trees."""

import threading
from typing import Any

from openapi_docgen.operation.base import OperationRecord, VariantKey

PathTree = dict[str, dict[str, OperationRecord]]  # path -> method -> record


class VariantAggregator:
    """Collects records by VariantKey.

    The default variant receives every record, so at least one complete
    document exists even when no operation declares variant tags. Within a
    variant, a (method, path) pair holds exactly one record: a later record
    replaces the earlier one, other methods on the same path are kept.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._trees: dict[VariantKey, PathTree] = {VariantKey.DEFAULT: {}}
        self._schemas: dict[VariantKey, dict[str, dict[str, Any]]] = {VariantKey.DEFAULT: {}}
        self._servers: dict[VariantKey, list[str]] = {VariantKey.DEFAULT: []}

    def add(self, record: OperationRecord) -> None:
        keys = [VariantKey.DEFAULT]
        if not record.variant_key.is_default:
            keys.append(record.variant_key)

        with self._lock:
            for key in keys:
                tree = self._trees.setdefault(key, {})
                tree.setdefault(record.path, {})[record.method] = record
                self._schemas.setdefault(key, {}).update(record.schemas)
                servers = self._servers.setdefault(key, [])
                if record.server and record.server not in servers:
                    servers.append(record.server)

    def add_all(self, records: list[OperationRecord]) -> None:
        for record in records:
            self.add(record)

    @property
    def keys(self) -> list[VariantKey]:
        return list(self._trees)

    def tree(self, key: VariantKey) -> PathTree:
        return self._trees.get(key, {})

    def schemas(self, key: VariantKey) -> dict[str, dict[str, Any]]:
        return self._schemas.get(key, {})

    def servers(self, key: VariantKey) -> list[str]:
        return self._servers.get(key, [])

    def trees(self) -> dict[VariantKey, PathTree]:
        with self._lock:
            return {key: {path: dict(ops) for path, ops in tree.items()} for key, tree in self._trees.items()}
