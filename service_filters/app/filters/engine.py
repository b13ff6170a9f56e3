"""
Rule chain engine for the Filters Service.
"""

import copy
import time
import uuid
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from shared.errors import ValidationError
from shared.logging import get_logger

from .models import FieldDescriptor, FilterRule, Logic, Operator
from .normalizer import coerce_value, empty_values, matches_shape, normalize_value, shape_of, value_input
from .registry import FieldRegistry

RuleLike = Union[FilterRule, Mapping[str, Any]]

UPDATABLE_KEYS = frozenset({"field", "operator", "value", "value2", "logic"})


def generate_rule_id() -> str:
    """Opaque, unique rule identifier."""
    return f"filter-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def _as_operator(value: Any) -> Operator:
    try:
        return Operator(value)
    except ValueError:
        raise ValidationError("Unknown operator", details={"operator": value})


def _maybe_operator(value: Any) -> Optional[Operator]:
    try:
        return Operator(value)
    except ValueError:
        return None


def _as_logic(value: Any) -> Logic:
    try:
        return Logic(value)
    except ValueError:
        raise ValidationError("Unknown logic connector", details={"logic": value})


class FilterEngine:
    """Ordered chain of filter rules joined by AND/OR connectors.

    Each rule except the last carries the connector to the rule after it,
    each rule's operator is one its field supports, and each rule's value
    has the shape its operator expects. Every public operation keeps those
    three properties; operations that cannot apply (unknown rule, unknown
    field, full chain) change nothing.
    """

    def __init__(
        self,
        fields: Iterable[FieldDescriptor],
        initial_filters: Optional[Iterable[RuleLike]] = None,
        max_filters: Optional[int] = None,
        default_logic: Union[Logic, str] = Logic.AND,
        on_apply: Optional[Callable[[List[FilterRule]], Any]] = None,
        on_reset: Optional[Callable[[], Any]] = None,
    ):
        self.logger = get_logger("filters.engine")
        self.registry = fields if isinstance(fields, FieldRegistry) else FieldRegistry(fields)
        self.max_filters = max_filters
        self.default_logic = _as_logic(default_logic)
        self.on_apply = on_apply
        self.on_reset = on_reset
        self._chain: List[FilterRule] = self._seed(initial_filters or [])

    def _seed(self, initial_filters: Iterable[RuleLike]) -> List[FilterRule]:
        chain: List[FilterRule] = []
        seen_ids = set()
        for item in initial_filters:
            rule = self._rule_from(item)
            if rule.id in seen_ids:
                raise ValidationError("Duplicate rule id", details={"rule_id": rule.id})
            seen_ids.add(rule.id)

            field = self.registry.get(rule.field)
            if field is None:
                self.logger.warning("Dropping seeded rule for unknown field", rule_id=rule.id, field=rule.field)
                continue

            operators = self.registry.operators_for(rule.field)
            if rule.operator not in operators:
                rule.operator = operators[0]
                rule.value, rule.value2 = normalize_value(field, rule.operator, rule.value, rule.value2)
            else:
                rule.value = coerce_value(field, rule.operator, rule.value)
                if not matches_shape(field, rule):
                    rule.value, rule.value2 = normalize_value(field, rule.operator, rule.value, rule.value2)
            chain.append(rule)

        for index, rule in enumerate(chain):
            if index == len(chain) - 1:
                rule.logic = None
            elif rule.logic is None:
                rule.logic = self.default_logic

        self.logger.debug("Chain seeded", rules=len(chain))
        return chain

    def _rule_from(self, item: RuleLike) -> FilterRule:
        if isinstance(item, FilterRule):
            rule = copy.deepcopy(item)
        else:
            rule = FilterRule(
                id=item.get("id") or "",
                field=item.get("field", ""),
                operator=item.get("operator"),
                value=item.get("value", ""),
                value2=item.get("value2"),
                logic=item.get("logic"),
            )
        if not rule.id:
            rule.id = generate_rule_id()
        # Unrecognised operators are left for the compatibility check to replace
        rule.operator = _maybe_operator(rule.operator)
        rule.logic = _as_logic(rule.logic) if rule.logic else None
        return rule

    def _index_of(self, rule_id: str) -> int:
        for index, rule in enumerate(self._chain):
            if rule.id == rule_id:
                return index
        return -1

    def __len__(self) -> int:
        return len(self._chain)

    @property
    def rules(self) -> List[FilterRule]:
        """Copy of the current chain."""
        return copy.deepcopy(self._chain)

    @property
    def is_full(self) -> bool:
        return bool(self.max_filters) and len(self._chain) >= self.max_filters

    @property
    def can_add_rule(self) -> bool:
        return len(self.registry) > 0 and not self.is_full

    def get_rule(self, rule_id: str) -> Optional[FilterRule]:
        """Copy of the rule with ``rule_id``, or None."""
        index = self._index_of(rule_id)
        return copy.deepcopy(self._chain[index]) if index != -1 else None

    def operators_for_rule(self, rule_id: str) -> List[Operator]:
        """Operators the rule's field supports; empty for unknown rules."""
        index = self._index_of(rule_id)
        if index == -1:
            return []
        return self.registry.operators_for(self._chain[index].field)

    def value_input(self, rule_id: str):
        """Value control description for a rule, or None."""
        index = self._index_of(rule_id)
        if index == -1:
            return None
        rule = self._chain[index]
        return value_input(self.registry.get(rule.field), rule.operator)

    def add_rule(self) -> Optional[FilterRule]:
        """Append a blank rule for the first registered field.

        Returns a copy of the new rule, or None when the chain is full or
        no fields are registered.
        """
        if self.is_full:
            self.logger.debug("Chain full, rule not added", max_filters=self.max_filters)
            return None

        first_field = self.registry.first
        if first_field is None:
            self.logger.debug("No fields registered, rule not added")
            return None

        operators = self.registry.operators_for(first_field.id)
        if not operators:
            self.logger.debug("First field has no operators, rule not added", field=first_field.id)
            return None

        value, value2 = empty_values(first_field, operators[0])
        rule = FilterRule(
            id=generate_rule_id(),
            field=first_field.id,
            operator=operators[0],
            value=value,
            value2=value2,
        )

        # The current last rule now needs a connector to the new one
        if self._chain:
            previous = self._chain[-1]
            previous.logic = previous.logic or self.default_logic

        self._chain.append(rule)
        self.logger.debug("Rule added", rule_id=rule.id, field=rule.field, operator=rule.operator.value)
        return copy.deepcopy(rule)

    def remove_rule(self, rule_id: str) -> bool:
        """Remove a rule; returns False when no rule has ``rule_id``."""
        index = self._index_of(rule_id)
        if index == -1:
            self.logger.debug("Unknown rule, nothing removed", rule_id=rule_id)
            return False

        del self._chain[index]

        if self._chain:
            if index == len(self._chain):
                # Removed the last rule: the new last one must not point onwards
                self._chain[-1].logic = None
            elif index == 0 and len(self._chain) == 1:
                self._chain[0].logic = None
            # A removed middle rule leaves its predecessor's connector as-is

        self.logger.debug("Rule removed", rule_id=rule_id, position=index)
        return True

    def update_rule(self, rule_id: str, **changes: Any) -> Optional[FilterRule]:
        """Merge ``changes`` into a rule.

        A field or operator change resets the operator to the field's
        first operator when it no longer fits and re-normalizes the value
        for the resulting operator. A value-only edit is coerced and refused
        when it still does not fit the operator. Returns a copy of the
        updated rule, or None when the rule or the requested field is
        unknown or the edit was refused.
        """
        unknown = set(changes) - UPDATABLE_KEYS
        if unknown:
            raise ValidationError("Unknown rule attributes", details={"attributes": sorted(unknown)})

        index = self._index_of(rule_id)
        if index == -1:
            self.logger.debug("Unknown rule, nothing updated", rule_id=rule_id)
            return None

        current = self._chain[index]
        field_id = changes.get("field", current.field)
        field = self.registry.get(field_id)
        if field is None:
            self.logger.debug("Unknown field, rule not updated", rule_id=rule_id, field=field_id)
            return None

        updated = copy.deepcopy(current)
        updated.field = field_id
        if "operator" in changes:
            updated.operator = _as_operator(changes["operator"])
        if "value" in changes:
            updated.value = changes["value"]
        if "value2" in changes:
            updated.value2 = changes["value2"]

        if "field" in changes or "operator" in changes:
            operators = self.registry.operators_for(field_id)
            if not operators:
                self.logger.debug("Field has no operators, rule not updated", rule_id=rule_id, field=field_id)
                return None
            if updated.operator not in operators:
                updated.operator = operators[0]
            updated.value, updated.value2 = normalize_value(field, updated.operator, updated.value, updated.value2)
        else:
            if "value" in changes:
                updated.value = coerce_value(field, updated.operator, updated.value)
            if "value2" in changes and shape_of(field, updated.operator) != "range":
                self.logger.debug("value2 ignored for single-valued rule", rule_id=rule_id)
                updated.value2 = current.value2
            if not matches_shape(field, updated):
                self.logger.debug(
                    "Value does not fit operator, rule not updated",
                    rule_id=rule_id, operator=updated.operator.value
                )
                return None

        if "logic" in changes:
            is_last = index == len(self._chain) - 1
            if is_last:
                self.logger.debug("Connector ignored on last rule", rule_id=rule_id)
            elif changes["logic"] is not None:
                updated.logic = _as_logic(changes["logic"])

        self._chain[index] = updated
        self.logger.debug("Rule updated", rule_id=rule_id, changes=sorted(changes))
        return copy.deepcopy(updated)

    def handle_logic_change(self, rule_id: str, logic: Union[Logic, str]) -> bool:
        """Set the connector after a rule.

        Only rules followed by another rule carry a connector, so the call
        is refused for the last rule as well as for unknown ids.
        """
        new_logic = _as_logic(logic)
        index = self._index_of(rule_id)
        if index == -1 or index == len(self._chain) - 1:
            self.logger.debug("Connector change refused", rule_id=rule_id, logic=new_logic.value)
            return False

        self._chain[index].logic = new_logic
        return True

    def apply(self) -> List[FilterRule]:
        """Snapshot the chain and hand it to ``on_apply``."""
        snapshot = self.rules
        self.logger.info("Filters applied", rules=len(snapshot))
        if self.on_apply is not None:
            self.on_apply(copy.deepcopy(snapshot))
        return snapshot

    def reset(self) -> List[FilterRule]:
        """Clear the chain and notify ``on_reset``."""
        self._chain = []
        self.logger.info("Filters reset")
        if self.on_reset is not None:
            self.on_reset()
        return []

    def check_invariants(self) -> List[str]:
        """Describe every connector, operator or value-shape violation in the chain."""
        violations = []
        last = len(self._chain) - 1
        for index, rule in enumerate(self._chain):
            if index == last and rule.logic is not None:
                violations.append(f"{rule.id}: last rule carries logic {rule.logic.value}")
            if index != last and rule.logic not in (Logic.AND, Logic.OR):
                violations.append(f"{rule.id}: missing logic before next rule")

            field = self.registry.get(rule.field)
            if rule.operator not in self.registry.operators_for(rule.field):
                violations.append(f"{rule.id}: operator {rule.operator} not allowed for field {rule.field}")
            elif not matches_shape(field, rule):
                violations.append(f"{rule.id}: value shape does not fit {rule.operator.value}")
        return violations
