"""
Models package for datagrid.

The grid itself renders any mapped model; the only table it owns holds
saved queries.
"""
from .base import db

from .saved_query import SavedQuery
