"""Unit tests for the schema registration DSL."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

import pytest

from fluent_model.adapters.model import Model
from fluent_model.core.enums import TypeKind
from fluent_model.core.exceptions import (
    CastDeclarationError,
    SchemaCompilationError,
    UntypedPropertyError,
)
from fluent_model.mapping.builder import declared_type, schema
from fluent_model.mapping.metadata import (
    AsDecimal,
    Cast,
    CastMarker,
    Fillable,
    Guarded,
    HasMany,
)
from fluent_model.mapping.plan import MISSING


class Invoice(Model):
    pass


class Customer(Model):
    pass


class EmptyCast(CastMarker):
    def as_type(self) -> str:
        return ""


class NumericCast(CastMarker):
    def as_type(self) -> Any:
        return 42


class TestDeclaredType:
    def test_plain_type(self) -> None:
        declared, markers = declared_type(int)
        assert declared.name == "int"
        assert declared.nullable is False
        assert declared.kind is TypeKind.PRIMITIVE
        assert declared.python_type is int
        assert markers == []

    def test_optional_is_nullable(self) -> None:
        declared, _ = declared_type(Optional[str])
        assert declared.name == "str"
        assert declared.nullable is True

    def test_pipe_none_is_nullable(self) -> None:
        declared, _ = declared_type(int | None)
        assert declared.name == "int"
        assert declared.nullable is True

    def test_structured_generic(self) -> None:
        declared, _ = declared_type(list[int])
        assert declared.kind is TypeKind.STRUCTURED
        assert declared.name == "list"

    def test_temporal(self) -> None:
        declared, _ = declared_type(datetime.datetime)
        assert declared.kind is TypeKind.TEMPORAL

    def test_union_joins_member_names(self) -> None:
        declared, _ = declared_type(int | str)
        assert declared.name == "int|str"
        assert declared.nullable is False

    def test_entity_reference(self) -> None:
        declared, _ = declared_type(Optional[Customer], Model)
        assert declared.kind is TypeKind.ENTITY
        assert declared.nullable is True

    def test_annotated_markers_collected(self) -> None:
        declared, markers = declared_type(Annotated[Decimal, AsDecimal(2), Guarded()])
        assert declared.name == "Decimal"
        assert markers == [AsDecimal(2), Guarded()]

    def test_markers_inside_optional(self) -> None:
        declared, markers = declared_type(Optional[Annotated[int, Guarded()]])
        assert declared.nullable is True
        assert markers == [Guarded()]


class TestSchemaBuilder:
    def test_fields_in_declaration_order(self) -> None:
        result = (
            schema(Invoice, Model)
            .field("id", int)
            .field("number", str)
            .field("total", Decimal, casts=[AsDecimal(2)])
            .build()
        )
        assert result.target_class is Invoice
        assert result.names == ("id", "number", "total")
        assert result.get("total").casts == (AsDecimal(2),)

    def test_default_recorded(self) -> None:
        result = schema(Invoice).field("paid", bool, default=False).field("id", int).build()
        assert result.get("paid").default is False
        assert result.get("paid").has_default
        assert result.get("id").default is MISSING
        assert not result.get("id").has_default

    def test_class_markers(self) -> None:
        result = schema(Invoice).fillable(Fillable.INCLUDE_DATES).guarded().build()
        assert result.class_fillable == Fillable(Fillable.INCLUDE_DATES)
        assert result.class_guarded == Guarded()

    def test_fillable_accepts_marker(self) -> None:
        result = schema(Invoice).fillable(Fillable()).build()
        assert result.class_fillable == Fillable()

    def test_guard_marker(self) -> None:
        result = schema(Invoice).field("secret", str, guard=Guarded()).build()
        assert result.get("secret").guard == Guarded()

    def test_guarded_wins_over_fillable(self) -> None:
        result = schema(Invoice).field("secret", Annotated[str, Fillable(), Guarded()]).build()
        assert isinstance(result.get("secret").guard, Guarded)

    def test_bare_marker_class_accepted(self) -> None:
        result = schema(Invoice).field("secret", Annotated[str, Guarded]).build()
        assert result.get("secret").guard == Guarded()

    def test_relation_flag_excludes_field(self) -> None:
        result = schema(Invoice, Model).field("lines", list, relation=True).field("id", int).build()
        assert result.names == ("id",)

    def test_relation_marker_excludes_field(self) -> None:
        result = schema(Invoice, Model).field("lines", Annotated[list, HasMany()]).build()
        assert result.names == ()

    def test_entity_typed_field_excluded(self) -> None:
        result = schema(Invoice, Model).field("customer", Customer).build()
        assert not result.has("customer")

    def test_duplicate_field_raises(self) -> None:
        builder = schema(Invoice).field("id", int).field("id", str)
        with pytest.raises(SchemaCompilationError, match="Duplicate"):
            builder.build()

    def test_private_field_raises(self) -> None:
        with pytest.raises(SchemaCompilationError, match="not public"):
            schema(Invoice).field("_secret", str).build()

    def test_untyped_field_raises(self) -> None:
        with pytest.raises(UntypedPropertyError) as exc_info:
            schema(Invoice).field("notes").build()
        assert exc_info.value.property_name == "notes"
        assert exc_info.value.entity == "Invoice"

    def test_any_counts_as_untyped(self) -> None:
        with pytest.raises(UntypedPropertyError):
            schema(Invoice).field("notes", Any).build()

    def test_empty_cast_tag_raises(self) -> None:
        with pytest.raises(CastDeclarationError):
            schema(Invoice).field("number", str, casts=[EmptyCast()]).build()

    def test_non_string_cast_tag_raises(self) -> None:
        with pytest.raises(CastDeclarationError):
            schema(Invoice).field("number", str, casts=[NumericCast()]).build()

    def test_empty_explicit_cast_raises(self) -> None:
        with pytest.raises(CastDeclarationError):
            schema(Invoice).field("number", Annotated[str, Cast("")]).build()
