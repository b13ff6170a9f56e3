"""
Value normalization for filter rules.

A rule's ``value``/``value2`` pair must match the shape its operator (and
for some field types, the field) expects:

- ``isEmpty``/``isNotEmpty`` carry no value (``""``/``None``)
- ``between`` carries a start and an end scalar
- ``in``/``notIn`` and every multiselect rule carry a list
- boolean fields carry ``True``/``False`` or ``""`` while unset
- everything else carries a single scalar

Whenever a rule's field or operator changes the held value is discarded,
except that ``between`` keeps bounds that were already entered.
"""

from typing import Any, List, Optional, Tuple

from .models import (
    FieldDescriptor, FieldOption, FieldType, FilterRule, InputKind, Operator,
    ValueClass, ValueInput,
)
from .operators import value_class

EMPTY = ""

_BOOLEAN_OPTIONS = [FieldOption(value="true", label="True"), FieldOption(value="false", label="False")]


def _field_type(field: Optional[FieldDescriptor]) -> Optional[FieldType]:
    return field.type if field is not None else None


def shape_of(field: Optional[FieldDescriptor], operator: Operator) -> str:
    """Shape name for a field/operator pair: none, range, list, boolean or scalar."""
    cls = value_class(operator)
    if cls in (ValueClass.NONE, ValueClass.RANGE, ValueClass.LIST):
        return cls.value
    field_type = _field_type(field)
    if field_type == FieldType.MULTISELECT:
        return ValueClass.LIST.value
    if field_type == FieldType.BOOLEAN:
        return "boolean"
    return ValueClass.SCALAR.value


def _is_present(value: Any) -> bool:
    # Lists left over from in/notIn do not count as an entered bound
    return value is not None and value != EMPTY and not isinstance(value, (list, tuple, dict))


def normalize_value(
    field: Optional[FieldDescriptor],
    operator: Operator,
    value: Any = None,
    value2: Any = None,
) -> Tuple[Any, Any]:
    """Reshape ``(value, value2)`` after the field or operator changed."""
    shape = shape_of(field, operator)
    if shape == ValueClass.RANGE.value:
        return (
            value if _is_present(value) else EMPTY,
            value2 if _is_present(value2) else EMPTY,
        )
    if shape == ValueClass.LIST.value:
        return [], None
    return EMPTY, None


def empty_values(field: Optional[FieldDescriptor], operator: Operator) -> Tuple[Any, Any]:
    """Blank ``(value, value2)`` of the right shape for a new rule."""
    return normalize_value(field, operator)


def parse_list_input(text: str) -> List[str]:
    """Split comma-separated input, trimming items and dropping blanks."""
    return [item.strip() for item in text.split(",") if item.strip()]


def coerce_value(field: Optional[FieldDescriptor], operator: Operator, value: Any) -> Any:
    """Convert a value edit into the shape the rule expects.

    List-shaped rules accept comma-separated strings and boolean fields
    accept ``"true"``/``"false"``; anything else is stored as given.
    """
    shape = shape_of(field, operator)
    if shape == ValueClass.LIST.value:
        if isinstance(value, str):
            return parse_list_input(value)
        if isinstance(value, (list, tuple, set)):
            return list(value)
        if value is None:
            return []
        return [value]
    if shape == "boolean" and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        if lowered == EMPTY:
            return EMPTY
    return value


def matches_shape(field: Optional[FieldDescriptor], rule: FilterRule) -> bool:
    """Whether ``rule.value``/``rule.value2`` have the shape its operator expects."""
    shape = shape_of(field, rule.operator)
    collection = (list, tuple, dict, set)
    if shape == ValueClass.NONE.value:
        return rule.value in (EMPTY, None) and rule.value2 is None
    if shape == ValueClass.RANGE.value:
        return not isinstance(rule.value, collection) and not isinstance(rule.value2, collection)
    if shape == ValueClass.LIST.value:
        return isinstance(rule.value, list) and rule.value2 is None
    if shape == "boolean":
        return (isinstance(rule.value, bool) or rule.value == EMPTY) and rule.value2 is None
    return not isinstance(rule.value, collection) and rule.value2 is None


def _input_type(field: FieldDescriptor, allow_number: bool = True) -> str:
    if field.type in (FieldType.DATE, FieldType.DATETIME):
        return field.type.value
    if allow_number and field.type == FieldType.NUMBER:
        return "number"
    return "text"


def value_input(field: Optional[FieldDescriptor], operator: Operator) -> Optional[ValueInput]:
    """Describe the control a rendering layer should show for a rule's value."""
    if field is None:
        return None

    if value_class(operator) == ValueClass.NONE:
        return ValueInput(kind=InputKind.NONE)

    if field.type == FieldType.BOOLEAN:
        return ValueInput(kind=InputKind.BOOLEAN, input_type="select", placeholder="Select...",
                          options=list(_BOOLEAN_OPTIONS))

    if operator == Operator.BETWEEN:
        return ValueInput(kind=InputKind.BETWEEN, input_type=_input_type(field, allow_number=False),
                          placeholder="From", placeholder2="To")

    if field.type == FieldType.SELECT and field.options and value_class(operator) == ValueClass.LIST:
        # in/notIn on a select field picks several of its options
        return ValueInput(kind=InputKind.MULTISELECT, input_type="select", options=list(field.options))

    if field.type == FieldType.SELECT and field.options:
        return ValueInput(kind=InputKind.SELECT, input_type="select", placeholder="Select...",
                          options=list(field.options))

    if field.type == FieldType.MULTISELECT and field.options:
        return ValueInput(kind=InputKind.MULTISELECT, input_type="select", options=list(field.options))

    if operator in (Operator.IN, Operator.NOT_IN):
        return ValueInput(kind=InputKind.LIST, placeholder="Comma-separated values")

    return ValueInput(
        kind=InputKind.SCALAR,
        input_type=_input_type(field),
        placeholder=field.placeholder or f"Enter {field.label.lower()}",
    )
