from openapi_docgen.generator.variants import VariantAggregator
from openapi_docgen.operation.base import OperationRecord, VariantKey


def _record(method: str, path: str, tags=(), summary: str = "", schemas=None, server=None) -> OperationRecord:
    return OperationRecord(
        method=method,
        path=path,
        summary=summary,
        schemas=schemas or {},
        server=server,
        variant_key=VariantKey.from_tags(tags),
    )


class TestVariantAggregator:
    def test_default_variant_always_exists(self):
        aggregator = VariantAggregator()
        assert aggregator.keys == [VariantKey.DEFAULT]
        assert aggregator.tree(VariantKey.DEFAULT) == {}

    def test_default_receives_every_record(self):
        aggregator = VariantAggregator()
        aggregator.add_all([_record("get", "/a"), _record("get", "/b", tags=["v2"])])
        assert set(aggregator.tree(VariantKey.DEFAULT)) == {"/a", "/b"}
        assert set(aggregator.tree(VariantKey(tags=("v2",)))) == {"/b"}
        assert aggregator.keys == [VariantKey.DEFAULT, VariantKey(tags=("v2",))]

    def test_methods_on_same_path_are_merged(self):
        aggregator = VariantAggregator()
        aggregator.add(_record("get", "/a"))
        aggregator.add(_record("post", "/a"))
        assert list(aggregator.tree(VariantKey.DEFAULT)["/a"]) == ["get", "post"]

    def test_later_record_replaces_same_method_and_path(self):
        aggregator = VariantAggregator()
        aggregator.add(_record("get", "/a", summary="first"))
        aggregator.add(_record("get", "/a", summary="second"))
        aggregator.add(_record("delete", "/a"))
        tree = aggregator.tree(VariantKey.DEFAULT)
        assert tree["/a"]["get"].summary == "second"
        assert "delete" in tree["/a"]

    def test_schemas_and_servers_per_variant(self):
        aggregator = VariantAggregator()
        aggregator.add(_record("get", "/a", schemas={"A": {"type": "object"}}, server="http://one"))
        aggregator.add(_record("get", "/b", tags=["v2"], schemas={"B": {"type": "object"}}, server="http://two"))
        aggregator.add(_record("get", "/c", server="http://one"))
        assert set(aggregator.schemas(VariantKey.DEFAULT)) == {"A", "B"}
        assert set(aggregator.schemas(VariantKey(tags=("v2",)))) == {"B"}
        assert aggregator.servers(VariantKey.DEFAULT) == ["http://one", "http://two"]
        assert aggregator.servers(VariantKey(tags=("v2",))) == ["http://two"]

    def test_trees_returns_a_snapshot(self):
        aggregator = VariantAggregator()
        aggregator.add(_record("get", "/a"))
        snapshot = aggregator.trees()
        aggregator.add(_record("post", "/a"))
        assert list(snapshot[VariantKey.DEFAULT]["/a"]) == ["get"]
