"""
Filter data models for the Filters Service.
"""

from typing import Any, List, Optional
from dataclasses import dataclass, field
from enum import Enum


class FieldType(str, Enum):
    """Field types a filter can target."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    MULTISELECT = "multiselect"
    BOOLEAN = "boolean"
    RANGE = "range"


class Operator(str, Enum):
    """Filter condition operators."""
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    GREATER_THAN = "greaterThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN = "lessThan"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    BETWEEN = "between"
    IN = "in"
    NOT_IN = "notIn"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"


class Logic(str, Enum):
    """Connector joining a rule to the rule after it."""
    AND = "AND"
    OR = "OR"


class ValueClass(str, Enum):
    """Operator classes sharing the same value shape."""
    NONE = "none"
    RANGE = "range"
    LIST = "list"
    SCALAR = "scalar"


class InputKind(str, Enum):
    """Control a rendering layer shows for a rule's value."""
    NONE = "none"
    BOOLEAN = "boolean"
    BETWEEN = "between"
    SELECT = "select"
    MULTISELECT = "multiselect"
    LIST = "list"
    SCALAR = "scalar"


@dataclass(frozen=True)
class FieldOption:
    """Choice offered by a select or multiselect field."""
    value: str
    label: str


@dataclass(frozen=True)
class FieldDescriptor:
    """Named, typed attribute that rules can filter on."""
    id: str
    label: str
    type: FieldType
    operators: Optional[List[Operator]] = None
    options: Optional[List[FieldOption]] = None
    placeholder: Optional[str] = None
    default_value: Any = None


@dataclass
class FilterRule:
    """One filter condition in a chain.

    ``logic`` connects this rule to the next one and is only set while
    the rule is not the last in its chain.
    """
    id: str
    field: str
    operator: Operator
    value: Any = ""
    value2: Any = None
    logic: Optional[Logic] = None

    def to_dict(self) -> dict:
        """Plain representation with enum members flattened to their values."""
        return {
            "id": self.id,
            "field": self.field,
            "operator": self.operator.value,
            "value": self.value,
            "value2": self.value2,
            "logic": self.logic.value if self.logic is not None else None,
        }


@dataclass(frozen=True)
class ValueInput:
    """Description of the value control for a rule."""
    kind: InputKind
    input_type: str = "text"
    placeholder: Optional[str] = None
    placeholder2: Optional[str] = None
    options: List[FieldOption] = field(default_factory=list)
