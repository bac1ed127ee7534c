"""Domain errors raised by the pattern admin services.

Routers translate these into HTTP responses: not-found -> 404,
validation failures -> 400, duplicates and reference conflicts -> 409.
"""
from typing import List, Optional


class PatternAdminError(Exception):
    """Base class for every domain error."""


class NotFoundError(PatternAdminError):
    def __init__(self, kind: str, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class UnknownCategoryError(PatternAdminError):
    pass


class UnknownMeasurementItemError(PatternAdminError):
    def __init__(self, item_ids: List[str]):
        self.item_ids = list(item_ids)
        super().__init__(f"Unknown measurement items: {', '.join(self.item_ids)}")


class DuplicateMeasurementRuleError(PatternAdminError):
    def __init__(self, category_id: int, sleeve_type: Optional[str]):
        self.category_id = category_id
        self.sleeve_type = sleeve_type
        super().__init__(
            f"A measurement rule already exists for category {category_id}"
            f" and sleeve type {sleeve_type or '(none)'}"
        )


class MissingMeasurementRuleError(PatternAdminError):
    pass


class ReferenceConflictError(PatternAdminError):
    """Delete refused because other records still point at the target."""

    def __init__(self, message: str, conflicts: List[str]):
        self.conflicts = list(conflicts)
        super().__init__(message)


class InvalidGeometryError(PatternAdminError):
    pass


class UnknownSizeRangeError(PatternAdminError):
    def __init__(self, size_range):
        self.size_range = size_range
        super().__init__(f"Unknown size range '{size_range}'")


class InvalidSizeValueError(PatternAdminError):
    def __init__(self, size_range: str, item_id: str, value: str):
        self.size_range = size_range
        self.item_id = item_id
        self.value = value
        super().__init__(f"'{value}' is not a number ({item_id} @ {size_range})")


class UnknownChartTypeError(PatternAdminError):
    def __init__(self, chart_type_ids: List[str]):
        self.chart_type_ids = list(chart_type_ids)
        super().__init__(f"Unknown chart types: {', '.join(self.chart_type_ids)}")
