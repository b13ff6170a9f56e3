"""
Operator compatibility table and operator metadata.
"""

from typing import Dict, List, Optional

from .models import FieldDescriptor, FieldType, Operator, ValueClass


OPERATOR_LABELS: Dict[Operator, str] = {
    Operator.EQUALS: "Equals",
    Operator.NOT_EQUALS: "Not equals",
    Operator.CONTAINS: "Contains",
    Operator.NOT_CONTAINS: "Does not contain",
    Operator.STARTS_WITH: "Starts with",
    Operator.ENDS_WITH: "Ends with",
    Operator.GREATER_THAN: "Greater than",
    Operator.GREATER_THAN_OR_EQUAL: "Greater than or equal",
    Operator.LESS_THAN: "Less than",
    Operator.LESS_THAN_OR_EQUAL: "Less than or equal",
    Operator.BETWEEN: "Between",
    Operator.IN: "In",
    Operator.NOT_IN: "Not in",
    Operator.IS_EMPTY: "Is empty",
    Operator.IS_NOT_EMPTY: "Is not empty",
}

_COMPARABLE_OPERATORS = (
    Operator.EQUALS,
    Operator.NOT_EQUALS,
    Operator.GREATER_THAN,
    Operator.GREATER_THAN_OR_EQUAL,
    Operator.LESS_THAN,
    Operator.LESS_THAN_OR_EQUAL,
    Operator.BETWEEN,
    Operator.IS_EMPTY,
    Operator.IS_NOT_EMPTY,
)

DEFAULT_OPERATORS: Dict[FieldType, tuple] = {
    FieldType.TEXT: (
        Operator.EQUALS,
        Operator.NOT_EQUALS,
        Operator.CONTAINS,
        Operator.NOT_CONTAINS,
        Operator.STARTS_WITH,
        Operator.ENDS_WITH,
        Operator.IS_EMPTY,
        Operator.IS_NOT_EMPTY,
    ),
    FieldType.NUMBER: _COMPARABLE_OPERATORS,
    FieldType.DATE: _COMPARABLE_OPERATORS,
    FieldType.DATETIME: _COMPARABLE_OPERATORS,
    FieldType.SELECT: (
        Operator.EQUALS,
        Operator.NOT_EQUALS,
        Operator.IN,
        Operator.NOT_IN,
        Operator.IS_EMPTY,
        Operator.IS_NOT_EMPTY,
    ),
    FieldType.MULTISELECT: (
        Operator.IN,
        Operator.NOT_IN,
        Operator.IS_EMPTY,
        Operator.IS_NOT_EMPTY,
    ),
    FieldType.BOOLEAN: (Operator.EQUALS,),
    FieldType.RANGE: (Operator.BETWEEN,),
}


def operators_for(field: Optional[FieldDescriptor]) -> List[Operator]:
    """Operators applicable to ``field``.

    An explicit, non-empty ``field.operators`` wins over the type table.
    A missing field has no operators.
    """
    if field is None:
        return []
    if field.operators:
        return list(field.operators)
    return list(DEFAULT_OPERATORS.get(field.type, ()))


def operator_label(operator: Operator) -> str:
    """Human label for an operator."""
    return OPERATOR_LABELS[operator]


def value_class(operator: Operator) -> ValueClass:
    """Classify an operator by the value shape it expects."""
    if operator in (Operator.IS_EMPTY, Operator.IS_NOT_EMPTY):
        return ValueClass.NONE
    if operator == Operator.BETWEEN:
        return ValueClass.RANGE
    if operator in (Operator.IN, Operator.NOT_IN):
        return ValueClass.LIST
    return ValueClass.SCALAR


def operator_catalog() -> Dict[str, List[Dict[str, str]]]:
    """Default operator table with labels, keyed by field type value."""
    return {
        field_type.value: [
            {"value": op.value, "label": OPERATOR_LABELS[op]}
            for op in operators
        ]
        for field_type, operators in DEFAULT_OPERATORS.items()
    }
