"""
Read-only registry of the fields a chain can filter on.
"""

from typing import Dict, Iterable, Iterator, List, Optional

from shared.errors import ValidationError
from shared.logging import get_logger

from .models import FieldDescriptor, FieldType, Operator
from .operators import operators_for


class FieldRegistry:
    """Ordered field lookup supplied by the caller at construction."""

    def __init__(self, fields: Iterable[FieldDescriptor]):
        self.logger = get_logger("filters.registry")
        self._fields: List[FieldDescriptor] = list(fields)
        self._by_id: Dict[str, FieldDescriptor] = {}

        for descriptor in self._fields:
            if descriptor.id in self._by_id:
                raise ValidationError(
                    "Duplicate field id",
                    details={"field": descriptor.id}
                )
            self._by_id[descriptor.id] = descriptor

            if descriptor.type in (FieldType.SELECT, FieldType.MULTISELECT) and not descriptor.options:
                self.logger.warning(
                    "Choice field registered without options",
                    field=descriptor.id,
                    type=descriptor.type.value
                )

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._by_id

    @property
    def first(self) -> Optional[FieldDescriptor]:
        return self._fields[0] if self._fields else None

    @property
    def ids(self) -> List[str]:
        return [descriptor.id for descriptor in self._fields]

    def get(self, field_id: str) -> Optional[FieldDescriptor]:
        """Field with ``field_id``, or None when it is not registered."""
        return self._by_id.get(field_id)

    def operators_for(self, field_id: str) -> List[Operator]:
        """Operators for a field id; unknown ids yield an empty list."""
        return operators_for(self.get(field_id))
