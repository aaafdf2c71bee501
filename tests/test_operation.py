"""Tests for operation descriptors and the schema wrapper."""

import dataclasses
from typing import List

import pytest
from pydantic import BaseModel

from triport.core.errors import ConfigurationError
from triport.core.operation import Operation, RuntimeContext, make_operation
from triport.core.schema import Schema


class Item(BaseModel):
    name: str
    qty: int


class TestSchema:
    def test_validate_model(self):
        item = Schema(Item).validate({"name": "bolt", "qty": 3})
        assert item == Item(name="bolt", qty=3)

    def test_safe_validate_success(self):
        result = Schema(Item).safe_validate({"name": "bolt", "qty": 3})
        assert result.success
        assert result.data.qty == 3
        assert result.issues == []

    def test_safe_validate_reports_field_issues(self):
        result = Schema(Item).safe_validate({"name": "bolt", "qty": "many"})
        assert not result.success
        assert result.data is None
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue["path"] == ["qty"]
        assert issue["code"] == "int_parsing"
        assert issue["message"]

    def test_safe_validate_missing_field(self):
        result = Schema(Item).safe_validate({})
        assert {tuple(i["path"]) for i in result.issues} == {("name",), ("qty",)}
        assert all(i["code"] == "missing" for i in result.issues)

    def test_strict_rejects_coercion(self):
        schema = Schema(Item)
        assert schema.safe_validate({"name": "a", "qty": "2"}).success
        assert not schema.safe_validate({"name": "a", "qty": "2"}, strict=True).success
        assert schema.safe_validate(Item(name="a", qty=2), strict=True).data == Item(name="a", qty=2)
        assert schema.safe_validate({"name": "a", "qty": 2}, strict=True).success

    def test_non_model_types(self):
        schema = Schema(List[int])
        assert schema.validate([1, 2]) == [1, 2]
        assert not schema.safe_validate("nope").success

    def test_dump_model_to_plain_data(self):
        schema = Schema(Item)
        assert schema.dump(Item(name="nut", qty=1)) == {"name": "nut", "qty": 1}

    def test_json_schema(self):
        js = Schema(Item).json_schema()
        assert js["type"] == "object"
        assert set(js["properties"]) == {"name", "qty"}

    def test_of_reuses_existing_schema(self):
        schema = Schema(Item)
        assert Schema.of(schema) is schema
        assert isinstance(Schema.of(Item), Schema)


class TestMakeOperation:
    def test_builds_frozen_operation(self, echo_operation):
        assert isinstance(echo_operation, Operation)
        assert echo_operation.name == "echo"
        assert isinstance(echo_operation.input, Schema)
        with pytest.raises(dataclasses.FrozenInstanceError):
            echo_operation.name = "other"

    def test_title_prefers_description(self):
        op = make_operation(name="a", summary="Sum", input=Item, output=Item, handler=lambda c: c.input)
        assert op.title == "Sum"
        op = dataclasses.replace(op, description="Longer")
        assert op.title == "Longer"

    @pytest.mark.parametrize("name", ["", "   ", None, 5])
    def test_rejects_bad_name(self, name):
        with pytest.raises(ConfigurationError):
            make_operation(name=name, summary="s", input=Item, output=Item, handler=lambda c: c)

    def test_rejects_non_callable_handler(self):
        with pytest.raises(ConfigurationError):
            make_operation(name="x", summary="s", input=Item, output=Item, handler="nope")

    def test_runtime_context_defaults(self):
        ctx = RuntimeContext()
        assert ctx.request_id is None
        assert ctx.transport is None
