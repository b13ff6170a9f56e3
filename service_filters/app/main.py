"""
Filters service: drives filter engine sessions for the advanced search widget.
"""

from typing import Dict, List, Optional

from shared.base_service import BaseService
from shared.errors import ConflictError, NotFoundError, ValidationError
from shared.logging import set_session_context

from .filters.engine import FilterEngine
from .filters.models import FilterRule
from .filters.operators import OPERATOR_LABELS, operator_catalog
from .schemas import (
    ApplyResponse, ChainRequest, ChainResponse, LogicChangeRequest, RuleResponse, RuleUpdateRequest,
)
from .sessions import SessionStore


class FiltersService(BaseService):
    """Filters service implementation."""

    def __init__(self, **config_overrides):
        super().__init__("filters", 8014, **config_overrides)

        self.sessions = SessionStore(max_sessions=self.config.max_sessions)

        self._setup_filters_routes()

    def _build_engine(self, request: ChainRequest) -> FilterEngine:
        """Create an engine from a request, falling back to configured defaults."""
        return FilterEngine(
            fields=request.descriptors(),
            initial_filters=request.seed(),
            max_filters=request.max_filters if request.max_filters is not None else self.config.max_filters,
            default_logic=request.default_logic or self.config.default_logic,
            on_apply=self._on_apply,
            on_reset=self._on_reset,
        )

    def _on_apply(self, rules: List[FilterRule]):
        self.metrics.observe_histogram("filter_chain_length", len(rules))
        self.metrics.record_filter_operation("apply", "ok")

    def _on_reset(self):
        self.metrics.record_filter_operation("reset", "ok")

    def _get_engine(self, session_id: str) -> FilterEngine:
        engine = self.sessions.get(session_id)
        if engine is None:
            raise NotFoundError("Session", session_id)
        set_session_context(session_id)
        return engine

    def _rule_response(self, engine: FilterEngine, rule: FilterRule) -> RuleResponse:
        return RuleResponse.from_rule(
            rule,
            engine.operators_for_rule(rule.id),
            engine.value_input(rule.id),
        )

    def _chain_response(self, engine: FilterEngine, session_id: Optional[str] = None) -> ChainResponse:
        violations = engine.check_invariants()
        if violations:
            self.logger.warning("Chain invariants violated", session_id=session_id, violations=violations)

        return ChainResponse(
            session_id=session_id,
            rules=[self._rule_response(engine, rule) for rule in engine.rules],
            can_add_rule=engine.can_add_rule,
            max_filters=engine.max_filters,
            default_logic=engine.default_logic,
        )

    def _track_sessions(self):
        self.metrics.set_gauge("filter_sessions_active", len(self.sessions))

    async def _check_dependencies(self) -> Dict[str, str]:
        stats = self.sessions.stats()
        return {"session_store": f"{stats['active_sessions']}/{stats['max_sessions']}"}

    def _setup_filters_routes(self):
        """Set up filter-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "filters",
                "message": "Filter Builder - Filters Service",
                "version": "1.0.0",
                "capabilities": ["operator_table", "rule_chains", "value_normalization"]
            }

        @self.app.get("/filters/operators")
        async def get_operators():
            """Default operators per field type, with labels."""
            return {
                "field_types": operator_catalog(),
                "labels": {op.value: label for op, label in OPERATOR_LABELS.items()},
            }

        @self.app.post("/filters/normalize", response_model=ChainResponse)
        async def normalize_chain(request: ChainRequest):
            """Seed a throwaway engine and return the resulting chain."""
            engine = self._build_engine(request)
            self.metrics.record_filter_operation("normalize", "ok")
            return self._chain_response(engine)

        @self.app.post("/filters/sessions", response_model=ChainResponse, status_code=201)
        async def create_session(request: ChainRequest):
            """Create an engine session."""
            engine = self._build_engine(request)
            session_id = self.sessions.create(engine)
            self._track_sessions()
            return self._chain_response(engine, session_id)

        @self.app.get("/filters/sessions/{session_id}", response_model=ChainResponse)
        async def get_session(session_id: str):
            """Current chain of a session."""
            engine = self._get_engine(session_id)
            return self._chain_response(engine, session_id)

        @self.app.delete("/filters/sessions/{session_id}")
        async def delete_session(session_id: str):
            """Drop a session."""
            if not self.sessions.delete(session_id):
                raise NotFoundError("Session", session_id)
            self._track_sessions()
            return {"session_id": session_id, "deleted": True}

        @self.app.post("/filters/sessions/{session_id}/rules", response_model=RuleResponse, status_code=201)
        async def add_rule(session_id: str):
            """Append a blank rule."""
            engine = self._get_engine(session_id)
            rule = engine.add_rule()
            if rule is None:
                self.metrics.record_filter_operation("add", "noop")
                raise ConflictError(
                    "Cannot add another filter",
                    details={"rules": len(engine), "max_filters": engine.max_filters}
                )
            self.metrics.record_filter_operation("add", "ok")
            return self._rule_response(engine, rule)

        @self.app.patch("/filters/sessions/{session_id}/rules/{rule_id}", response_model=RuleResponse)
        async def update_rule(session_id: str, rule_id: str, request: RuleUpdateRequest):
            """Apply a partial update to a rule."""
            engine = self._get_engine(session_id)
            if engine.get_rule(rule_id) is None:
                raise NotFoundError("Rule", rule_id)

            changes = request.model_dump(exclude_unset=True)
            rule = engine.update_rule(rule_id, **changes)
            if rule is None:
                self.metrics.record_filter_operation("update", "noop")
                if "field" in changes and changes["field"] not in engine.registry:
                    raise ValidationError("Unknown field", details={"field": changes["field"]})
                raise ValidationError(
                    "Value does not fit the rule's operator",
                    details={"value": changes.get("value"), "value2": changes.get("value2")}
                )
            self.metrics.record_filter_operation("update", "ok")
            return self._rule_response(engine, rule)

        @self.app.delete("/filters/sessions/{session_id}/rules/{rule_id}", response_model=ChainResponse)
        async def remove_rule(session_id: str, rule_id: str):
            """Remove a rule."""
            engine = self._get_engine(session_id)
            if not engine.remove_rule(rule_id):
                self.metrics.record_filter_operation("remove", "noop")
                raise NotFoundError("Rule", rule_id)
            self.metrics.record_filter_operation("remove", "ok")
            return self._chain_response(engine, session_id)

        @self.app.put("/filters/sessions/{session_id}/rules/{rule_id}/logic", response_model=ChainResponse)
        async def change_logic(session_id: str, rule_id: str, request: LogicChangeRequest):
            """Change the connector after a rule."""
            engine = self._get_engine(session_id)
            if engine.get_rule(rule_id) is None:
                raise NotFoundError("Rule", rule_id)
            if not engine.handle_logic_change(rule_id, request.logic):
                self.metrics.record_filter_operation("logic", "noop")
                raise ConflictError("The last filter has no following filter to connect to",
                                    details={"rule_id": rule_id})
            self.metrics.record_filter_operation("logic", "ok")
            return self._chain_response(engine, session_id)

        @self.app.post("/filters/sessions/{session_id}/apply", response_model=ApplyResponse)
        async def apply_filters(session_id: str):
            """Hand over the current chain."""
            engine = self._get_engine(session_id)
            snapshot = engine.apply()
            return ApplyResponse(
                session_id=session_id,
                rules=[rule.to_dict() for rule in snapshot],
                total=len(snapshot),
            )

        @self.app.post("/filters/sessions/{session_id}/reset", response_model=ChainResponse)
        async def reset_filters(session_id: str):
            """Clear the chain."""
            engine = self._get_engine(session_id)
            engine.reset()
            return self._chain_response(engine, session_id)


def create_app():
    """Create filters service application."""
    service = FiltersService()
    return service.app


if __name__ == "__main__":
    service = FiltersService()
    service.run()
