"""
Filters Service package for the Filter Builder.

This package maintains the rule chains behind the advanced search/filter
widget. It provides:

- app.main: API surface for chain sessions, operator metadata and health.
- app.filters: Field registry, operator table, value normalizer and the
  rule chain engine.
- app.sessions: In-memory ownership of engine sessions.

Guidelines:
- The engine only builds rule chains; turning a chain into a backend
  query is the consumer's job.
- Engine operations never raise for unknown rules, unknown fields or a
  full chain; the API layer maps those no-ops to status codes.
"""
