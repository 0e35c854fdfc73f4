"""
Spreadsheet export of grids.

A grid exported to XLSX gets a one-sheet openpyxl workbook with the
column titles in a bold first row and one row per record, built from the
same column blocks as the HTML table.
"""

from .spreadsheet import Spreadsheet, cell_value, save_workbook
from .formatter import ExportFormatter

__all__ = ['Spreadsheet', 'ExportFormatter', 'cell_value', 'save_workbook']
