"""
Column declarations.

A ViewColumn renders one cell per record and may carry a filter; an
ActionColumn renders selection checkboxes.
"""

from .base import ViewColumn
from .action import ActionColumn
from .filters import (
    ColumnFilter,
    StringFilter,
    IntegerRangeFilter,
    DateRangeFilter,
    BooleanFilter,
    CustomFilter,
    build_filter,
    detect_filter_type,
)

__all__ = [
    'ViewColumn',
    'ActionColumn',
    'ColumnFilter',
    'StringFilter',
    'IntegerRangeFilter',
    'DateRangeFilter',
    'BooleanFilter',
    'CustomFilter',
    'build_filter',
    'detect_filter_type',
]
