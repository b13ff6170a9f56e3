"""
Filter engine package.

Defines the data model and the chain engine behind the advanced search
widget: typed fields, per-type operator sets, operator-dependent value
shapes and an ordered chain of rules joined by AND/OR connectors.

Modules of interest:
- models: Enums and data classes for fields, operators and rules.
- operators: Operator compatibility table and labels.
- registry: Read-only lookup of the caller's fields.
- normalizer: Value shapes and their re-normalization.
- engine: Add/remove/update operations that keep the chain consistent.
"""

from .engine import FilterEngine, generate_rule_id
from .models import FieldDescriptor, FieldOption, FieldType, FilterRule, Logic, Operator
from .operators import operators_for
from .registry import FieldRegistry

__all__ = [
    "FieldDescriptor",
    "FieldOption",
    "FieldRegistry",
    "FieldType",
    "FilterEngine",
    "FilterRule",
    "Logic",
    "Operator",
    "generate_rule_id",
    "operators_for",
]
