"""
Tests for value normalization and value input descriptors.
"""

import pytest

from service_filters.app.filters.models import (
    FieldDescriptor, FieldOption, FieldType, FilterRule, InputKind, Operator
)
from service_filters.app.filters.normalizer import (
    coerce_value, empty_values, matches_shape, normalize_value, parse_list_input, shape_of, value_input
)

NUMBER = FieldDescriptor(id="amount", label="Amount", type=FieldType.NUMBER)
DATE = FieldDescriptor(id="created", label="Created At", type=FieldType.DATE)
TEXT = FieldDescriptor(id="name", label="Name", type=FieldType.TEXT, placeholder="Search name")
SELECT = FieldDescriptor(
    id="status", label="Status", type=FieldType.SELECT,
    options=[FieldOption(value="paid", label="Paid")]
)
MULTI = FieldDescriptor(
    id="tags", label="Tags", type=FieldType.MULTISELECT,
    options=[FieldOption(value="vip", label="VIP")]
)
BOOLEAN = FieldDescriptor(id="refunded", label="Refunded", type=FieldType.BOOLEAN)


class TestNormalizeValue:
    """Reshaping after a field or operator change."""

    def test_empty_operators(self):
        assert normalize_value(NUMBER, Operator.IS_EMPTY, "5", "9") == ("", None)
        assert normalize_value(MULTI, Operator.IS_NOT_EMPTY, ["vip"], None) == ("", None)

    def test_between_preserves_present_bounds(self):
        assert normalize_value(NUMBER, Operator.BETWEEN, "5", "9") == ("5", "9")
        assert normalize_value(NUMBER, Operator.BETWEEN, 0, None) == (0, "")

    def test_between_fills_missing_bounds(self):
        assert normalize_value(NUMBER, Operator.BETWEEN) == ("", "")
        assert normalize_value(NUMBER, Operator.BETWEEN, "", "7") == ("", "7")

    def test_between_does_not_keep_lists(self):
        assert normalize_value(SELECT, Operator.BETWEEN, ["paid"], None) == ("", "")

    def test_list_operators(self):
        assert normalize_value(SELECT, Operator.IN, "paid", None) == ([], None)
        assert normalize_value(MULTI, Operator.NOT_IN, ["vip"], None) == ([], None)

    def test_scalar_operators_discard_value(self):
        assert normalize_value(TEXT, Operator.CONTAINS, "abc", "def") == ("", None)
        assert normalize_value(BOOLEAN, Operator.EQUALS, True, None) == ("", None)

    def test_empty_values(self):
        assert empty_values(NUMBER, Operator.EQUALS) == ("", None)
        assert empty_values(MULTI, Operator.IN) == ([], None)


class TestShape:
    """Shape classification and checks."""

    @pytest.mark.parametrize("field, operator, expected", [
        (NUMBER, Operator.IS_EMPTY, "none"),
        (NUMBER, Operator.BETWEEN, "range"),
        (SELECT, Operator.IN, "list"),
        (MULTI, Operator.IN, "list"),
        (BOOLEAN, Operator.EQUALS, "boolean"),
        (TEXT, Operator.EQUALS, "scalar"),
        (None, Operator.EQUALS, "scalar"),
    ])
    def test_shape_of(self, field, operator, expected):
        assert shape_of(field, operator) == expected

    def test_matches_shape(self):
        assert matches_shape(MULTI, FilterRule(id="r", field="tags", operator=Operator.IN, value=["vip"]))
        assert not matches_shape(MULTI, FilterRule(id="r", field="tags", operator=Operator.IN, value="vip"))
        assert matches_shape(BOOLEAN, FilterRule(id="r", field="refunded", operator=Operator.EQUALS, value=False))
        assert not matches_shape(BOOLEAN, FilterRule(id="r", field="refunded", operator=Operator.EQUALS, value=1))
        assert not matches_shape(TEXT, FilterRule(id="r", field="name", operator=Operator.EQUALS,
                                                  value="a", value2="b"))
        assert matches_shape(NUMBER, FilterRule(id="r", field="amount", operator=Operator.BETWEEN,
                                                value="1", value2="2"))


class TestCoerceValue:
    """Value-only edits."""

    def test_parse_list_input(self):
        assert parse_list_input(" a, b ,,c ") == ["a", "b", "c"]
        assert parse_list_input("") == []

    def test_list_coercion(self):
        assert coerce_value(SELECT, Operator.IN, "paid, open") == ["paid", "open"]
        assert coerce_value(MULTI, Operator.IN, ("vip",)) == ["vip"]
        assert coerce_value(MULTI, Operator.IN, None) == []
        assert coerce_value(SELECT, Operator.NOT_IN, 3) == [3]

    def test_boolean_coercion(self):
        assert coerce_value(BOOLEAN, Operator.EQUALS, "True") is True
        assert coerce_value(BOOLEAN, Operator.EQUALS, "false") is False
        assert coerce_value(BOOLEAN, Operator.EQUALS, "") == ""
        assert coerce_value(BOOLEAN, Operator.EQUALS, False) is False

    def test_scalars_stored_as_given(self):
        assert coerce_value(NUMBER, Operator.EQUALS, "12") == "12"
        assert coerce_value(TEXT, Operator.CONTAINS, "a,b") == "a,b"


class TestValueInput:
    """Control descriptors for the rendering layer."""

    def test_unknown_field(self):
        assert value_input(None, Operator.EQUALS) is None

    def test_no_input_for_empty_checks(self):
        assert value_input(TEXT, Operator.IS_EMPTY).kind == InputKind.NONE

    def test_boolean(self):
        described = value_input(BOOLEAN, Operator.EQUALS)

        assert described.kind == InputKind.BOOLEAN
        assert [o.value for o in described.options] == ["true", "false"]

    def test_between_uses_date_inputs(self):
        described = value_input(DATE, Operator.BETWEEN)

        assert described.kind == InputKind.BETWEEN
        assert described.input_type == "date"
        assert (described.placeholder, described.placeholder2) == ("From", "To")

    def test_between_on_number_uses_text_inputs(self):
        assert value_input(NUMBER, Operator.BETWEEN).input_type == "text"

    def test_select_and_multiselect(self):
        assert value_input(SELECT, Operator.EQUALS).kind == InputKind.SELECT
        assert value_input(MULTI, Operator.IN).kind == InputKind.MULTISELECT

    def test_select_in_picks_several_options(self):
        described = value_input(SELECT, Operator.IN)

        assert described.kind == InputKind.MULTISELECT
        assert [o.value for o in described.options] == ["paid"]

    def test_list_without_options(self):
        field = FieldDescriptor(id="codes", label="Codes", type=FieldType.TEXT, operators=[Operator.IN])
        described = value_input(field, Operator.IN)

        assert described.kind == InputKind.LIST
        assert described.placeholder == "Comma-separated values"

    def test_scalar_placeholders(self):
        assert value_input(TEXT, Operator.EQUALS).placeholder == "Search name"
        described = value_input(NUMBER, Operator.GREATER_THAN)
        assert described.placeholder == "Enter amount"
        assert described.input_type == "number"
        assert value_input(DATE, Operator.EQUALS).placeholder == "Enter created at"
