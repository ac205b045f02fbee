from pathlib import Path
from unittest.mock import MagicMock

import pytest

from openapi_docgen.errors import (
    InvalidRequestBodyError,
    InvalidUrlError,
    InvalidVerbError,
    MissingResponseDescriptionError,
    TypeNotFoundError,
    UnorderedGenericTypeError,
)
from openapi_docgen.generator.diagnostics import DiagnosticsCollector
from openapi_docgen.generator.operation import OperationBuilder
from openapi_docgen.operation.base import (
    ContentSpec,
    DocumentedOperation,
    ParameterSpec,
    RequestBodySpec,
    ResponseSpec,
    TypeReference,
    VariantKey,
)
from openapi_docgen.operation.loader import load_operations
from openapi_docgen.resolver import load_registry

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def builder():
    return OperationBuilder(load_registry(FIXTURES / "types.yaml"))


@pytest.fixture
def operations():
    return load_operations(FIXTURES / "annotation.yaml")


def _ok_response(*types: str) -> dict[str, ResponseSpec]:
    content = [ContentSpec(type=TypeReference.parse(t)) for t in types]
    return {"200": ResponseSpec(description="OK", content=content)}


class TestBuild:
    def test_get_with_inferred_parameters(self, builder, operations):
        [record] = builder.build(operations[0])
        assert record.method == "get"
        assert record.path == "/V1/samples/{id}"
        assert record.server == "http://localhost:9000"
        assert [(p.name, p.location) for p in record.parameters] == [
            ("id", "path"),
            ("queryBool", "query"),
            ("sampleHeaderParam1", "header"),
        ]
        assert record.parameter_schemas["queryBool"] == {"type": "boolean"}
        assert record.responses["200"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/Contracts.SampleObject1"
        }
        assert record.responses["400"] == {"description": "Bad request"}
        assert "Contracts.SampleEnum" in record.schemas

    def test_parameter_without_type_defaults_to_string(self, builder, operations):
        [record] = builder.build(operations[4])
        assert record.parameter_schemas["id"] == {"type": "string"}

    def test_array_parameter(self, builder):
        op = DocumentedOperation(
            method="get",
            url="/samples?ids=1",
            parameters=[ParameterSpec(name="ids", type=TypeReference(name="int"), is_array=True)],
            responses=_ok_response("string"),
        )
        [record] = builder.build(op)
        assert record.method == "get"
        assert record.parameter_schemas["ids"] == {
            "type": "array",
            "items": {"type": "integer", "format": "int32"},
        }

    def test_multiple_request_types_become_one_of(self, builder, operations):
        [record] = builder.build(operations[8])
        assert record.request_body["application/json"] == {
            "oneOf": [
                {"$ref": "#/components/schemas/Contracts.SampleObject1"},
                {"$ref": "#/components/schemas/Contracts.SampleObject2"},
            ]
        }
        assert record.request_body["text/plain"] == {"type": "string"}

    def test_multiple_response_media_types(self, builder, operations):
        [record] = builder.build(operations[5])
        assert set(record.responses["200"]["content"]) == {"application/json", "application/xml"}
        assert record.variant_key == VariantKey(tags=("v2",))

    def test_array_payloads(self, builder):
        op = DocumentedOperation(
            method="POST",
            url="/samples/batch",
            request_bodies=[RequestBodySpec(name="items", type=TypeReference(name="Contracts.SampleObject1"), is_array=True)],
            responses={
                "200": ResponseSpec(
                    description="OK",
                    content=[ContentSpec(type=TypeReference(name="Contracts.SampleObject1"), is_array=True)],
                )
            },
        )
        [record] = builder.build(op)
        expected = {"type": "array", "items": {"$ref": "#/components/schemas/Contracts.SampleObject1"}}
        assert record.request_body["application/json"] == expected
        assert record.responses["200"]["content"]["application/json"]["schema"] == expected
        assert "Contracts.SampleObject1" in record.schemas

    def test_request_body_description(self, builder, operations):
        [record] = builder.build(operations[2])
        assert record.request_body_description == "The object to create"
        assert record.to_openapi()["requestBody"]["description"] == "The object to create"

    def test_optional_trailing_path_parameters_branch(self, builder):
        op = DocumentedOperation(
            method="GET",
            url="/items/{id}/{revision}",
            operation_id="getItem",
            parameters=[
                ParameterSpec(name="id", location="path", required=True),
                ParameterSpec(name="revision", location="path", required=False),
                ParameterSpec(name="verbose", location="query"),
            ],
            responses=_ok_response("string"),
        )
        records = builder.build(op)
        assert [r.path for r in records] == ["/items/{id}/{revision}", "/items/{id}"]
        assert [p.name for p in records[1].parameters] == ["id", "verbose"]
        assert all(p.required for p in records[0].parameters if p.location == "path")
        assert records[0].operation_id == "getItem"
        assert records[1].operation_id is None

    def test_optional_inner_path_parameter_is_required(self, builder):
        op = DocumentedOperation(
            method="GET",
            url="/items/{id}/history",
            parameters=[ParameterSpec(name="id", location="path")],
            responses=_ok_response("string"),
        )
        [record] = builder.build(op)
        assert record.parameters[0].required is True


class TestBuildFailures:
    def test_invalid_verb(self, builder, operations):
        op = operations[0].model_copy(update={"method": "Invalid"})
        with pytest.raises(InvalidVerbError, match="'Invalid'"):
            builder.build(op)

    def test_invalid_url(self, builder, operations):
        url = "http://{host}:9000/V1/samples/{id}?queryBool={queryBool}"
        op = operations[0].model_copy(update={"url": url})
        with pytest.raises(InvalidUrlError) as excinfo:
            builder.build(op)
        assert url in str(excinfo.value)

    def test_request_body_without_reference(self, builder, operations):
        op = operations[2].model_copy(update={"request_bodies": [RequestBodySpec(name="sampleObject")]})
        with pytest.raises(InvalidRequestBodyError, match="sampleObject"):
            builder.build(op)

    def test_type_not_found(self, builder, operations):
        body = RequestBodySpec(name="sampleObject", type=TypeReference(name="Contracts.TestNotFound"))
        op = operations[2].model_copy(update={"request_bodies": [body]})
        with pytest.raises(TypeNotFoundError) as excinfo:
            builder.build(op)
        assert excinfo.value.type_name == "Contracts.TestNotFound"
        assert excinfo.value.sources == ["Contracts.yaml"]

    def test_missing_response_description(self, builder, operations):
        responses = dict(operations[0].responses)
        responses["400"] = ResponseSpec(description="  ")
        op = operations[0].model_copy(update={"responses": responses})
        with pytest.raises(MissingResponseDescriptionError, match="'400'"):
            builder.build(op)

    def test_unordered_generic_never_reaches_resolver(self):
        resolver = MagicMock()
        resolver.generic_parameters.side_effect = lambda name: ["T1", "T2"] if name == "G" else []
        op = DocumentedOperation(
            method="GET",
            url="/a",
            responses=_ok_response("G<T2=B, T1=A>"),
        )
        with pytest.raises(UnorderedGenericTypeError):
            OperationBuilder(resolver).build(op)
        resolver.resolve.assert_not_called()


class TestBuildOrRecord:
    def test_success_is_recorded(self, builder, operations):
        diagnostics = DiagnosticsCollector()
        records = builder.build_or_record(operations[0], diagnostics)
        assert len(records) == 1
        [entry] = diagnostics.result().operation_diagnostics
        assert (entry.method, entry.path, entry.errors) == ("GET", "/V1/samples/{id}", [])

    def test_failure_is_recorded_not_raised(self, builder, operations):
        diagnostics = DiagnosticsCollector()
        op = operations[0].model_copy(update={"method": "Invalid"})
        assert builder.build_or_record(op, diagnostics) == []
        [entry] = diagnostics.result().operation_diagnostics
        assert entry.method == "Invalid"
        assert entry.path == "/V1/samples/{id}"
        assert entry.errors[0].kind == "InvalidVerbError"

    def test_padded_verb_is_reported_trimmed(self, builder, operations):
        diagnostics = DiagnosticsCollector()
        assert builder.build_or_record(operations[0].model_copy(update={"method": " get "}), diagnostics)
        [entry] = diagnostics.result().operation_diagnostics
        assert entry.method == "GET"

    def test_invalid_url_identity_uses_full_url(self, builder, operations):
        url = "http://{host}:9000/V1/samples/{id}?queryBool={queryBool}"
        diagnostics = DiagnosticsCollector()
        builder.build_or_record(operations[0].model_copy(update={"url": url}), diagnostics)
        [entry] = diagnostics.result().operation_diagnostics
        assert entry.path == url
        assert entry.errors[0].kind == "InvalidUrlError"

    def test_resolver_failure_propagates(self, operations):
        resolver = MagicMock()
        resolver.generic_parameters.side_effect = RuntimeError("metadata unavailable")
        with pytest.raises(RuntimeError):
            OperationBuilder(resolver).build_or_record(operations[0], DiagnosticsCollector())
