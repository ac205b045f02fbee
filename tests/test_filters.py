from openapi_docgen.filters import make_server_filter, remove_unused_schemas, sort_paths


def _document(**extra):
    document = {
        "openapi": "3.0.1",
        "info": {"title": "A", "version": "1"},
        "paths": {
            "/b": {"get": {"responses": {"200": {"description": "OK"}}}},
            "/a": {
                "get": {
                    "responses": {
                        "200": {
                            "description": "OK",
                            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Page"}}},
                        }
                    }
                }
            },
        },
        "components": {
            "schemas": {
                "Page": {"type": "object", "properties": {"items": {"type": "array", "items": {"$ref": "#/components/schemas/Item"}}}},
                "Item": {"type": "object", "properties": {}},
                "Orphan": {"type": "object", "properties": {}},
            }
        },
    }
    document.update(extra)
    return document


class TestSortPaths:
    def test_orders_paths(self):
        assert list(sort_paths(_document())["paths"]) == ["/a", "/b"]


class TestRemoveUnusedSchemas:
    def test_keeps_transitively_referenced_schemas(self):
        schemas = remove_unused_schemas(_document())["components"]["schemas"]
        assert set(schemas) == {"Page", "Item"}

    def test_drops_empty_components(self):
        document = _document()
        document["paths"] = {}
        assert "components" not in remove_unused_schemas(document)

    def test_document_without_components(self):
        document = {"openapi": "3.0.1", "paths": {}}
        assert remove_unused_schemas(document) == {"openapi": "3.0.1", "paths": {}}


class TestServerFilter:
    def test_replaces_servers(self):
        document = make_server_filter(["https://api.example.com"])(_document(servers=[{"url": "http://localhost"}]))
        assert document["servers"] == [{"url": "https://api.example.com"}]

    def test_empty_list_removes_servers(self):
        document = make_server_filter([])(_document(servers=[{"url": "http://localhost"}]))
        assert "servers" not in document

    def test_keeps_non_ascii_schema_names(self):
        document = _document()
        ref = {"$ref": "#/components/schemas/Ns.Café"}
        document["paths"]["/b"]["get"]["responses"]["200"]["content"] = {"application/json": {"schema": ref}}
        document["components"]["schemas"]["Ns.Café"] = {"type": "object", "properties": {}}
        schemas = remove_unused_schemas(document)["components"]["schemas"]
        assert set(schemas) == {"Page", "Item", "Ns.Café"}
