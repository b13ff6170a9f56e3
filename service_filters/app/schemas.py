"""
Request and response models for the Filters Service.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .filters.models import (
    FieldDescriptor, FieldOption, FieldType, FilterRule, InputKind, Logic, Operator, ValueInput,
)
from .filters.operators import operator_label


class FieldOptionModel(BaseModel):
    """Choice of a select/multiselect field."""
    value: str = Field(..., description="Option value")
    label: str = Field(..., description="Option label")


class FieldModel(BaseModel):
    """Field descriptor as supplied by the caller."""
    id: str = Field(..., min_length=1, description="Field identifier")
    label: str = Field(..., description="Field label")
    type: FieldType = Field(..., description="Field type")
    operators: Optional[List[Operator]] = Field(None, description="Operators overriding the type defaults")
    options: Optional[List[FieldOptionModel]] = Field(None, description="Options for select/multiselect fields")
    placeholder: Optional[str] = Field(None, description="Placeholder text")
    default_value: Any = Field(None, description="Default value")

    def to_descriptor(self) -> FieldDescriptor:
        return FieldDescriptor(
            id=self.id,
            label=self.label,
            type=self.type,
            operators=list(self.operators) if self.operators else None,
            options=[FieldOption(value=o.value, label=o.label) for o in self.options] if self.options else None,
            placeholder=self.placeholder,
            default_value=self.default_value,
        )


class FilterRuleModel(BaseModel):
    """Rule used to seed a chain."""
    id: Optional[str] = Field(None, description="Rule identifier, generated when omitted")
    field: str = Field(..., description="Field identifier")
    operator: Optional[str] = Field(None, description="Operator; replaced when the field does not support it")
    value: Any = Field("", description="Filter value(s)")
    value2: Any = Field(None, description="Upper bound for 'between'")
    logic: Optional[Logic] = Field(None, description="Connector to the next rule")


class ChainRequest(BaseModel):
    """Fields and seed rules for a chain."""
    fields: List[FieldModel] = Field(default_factory=list, description="Available fields")
    initial_filters: List[FilterRuleModel] = Field(default_factory=list, description="Initial rules")
    max_filters: Optional[int] = Field(None, ge=0, description="Maximum number of rules")
    default_logic: Optional[Logic] = Field(None, description="Connector given when appending rules")

    def descriptors(self) -> List[FieldDescriptor]:
        return [f.to_descriptor() for f in self.fields]

    def seed(self) -> List[Dict[str, Any]]:
        return [rule.model_dump() for rule in self.initial_filters]


class RuleUpdateRequest(BaseModel):
    """Partial rule update; only fields present in the payload are applied."""
    field: Optional[str] = Field(None, description="New field")
    operator: Optional[Operator] = Field(None, description="New operator")
    value: Any = Field(None, description="New value")
    value2: Any = Field(None, description="New upper bound")
    logic: Optional[Logic] = Field(None, description="New connector")


class LogicChangeRequest(BaseModel):
    """Connector change for one rule."""
    logic: Logic = Field(..., description="AND or OR")


class OperatorOption(BaseModel):
    value: Operator
    label: str


class ValueInputResponse(BaseModel):
    """Value control for a rule."""
    kind: InputKind
    input_type: str
    placeholder: Optional[str] = None
    placeholder2: Optional[str] = None
    options: List[FieldOptionModel] = Field(default_factory=list)

    @classmethod
    def from_input(cls, value_input: ValueInput) -> "ValueInputResponse":
        return cls(
            kind=value_input.kind,
            input_type=value_input.input_type,
            placeholder=value_input.placeholder,
            placeholder2=value_input.placeholder2,
            options=[FieldOptionModel(value=o.value, label=o.label) for o in value_input.options],
        )


class RuleResponse(BaseModel):
    """Rule plus what a rendering layer needs to edit it."""
    id: str
    field: str
    operator: Operator
    value: Any = None
    value2: Any = None
    logic: Optional[Logic] = None
    operators: List[OperatorOption] = Field(default_factory=list)
    input: Optional[ValueInputResponse] = None

    @classmethod
    def from_rule(
        cls,
        rule: FilterRule,
        operators: List[Operator],
        value_input: Optional[ValueInput],
    ) -> "RuleResponse":
        return cls(
            id=rule.id,
            field=rule.field,
            operator=rule.operator,
            value=rule.value,
            value2=rule.value2,
            logic=rule.logic,
            operators=[OperatorOption(value=op, label=operator_label(op)) for op in operators],
            input=ValueInputResponse.from_input(value_input) if value_input is not None else None,
        )


class ChainResponse(BaseModel):
    """State of one chain."""
    session_id: Optional[str] = None
    rules: List[RuleResponse]
    can_add_rule: bool
    max_filters: Optional[int] = None
    default_logic: Logic


class ApplyResponse(BaseModel):
    """Snapshot handed over on apply."""
    session_id: str
    rules: List[Dict[str, Any]]
    total: int
