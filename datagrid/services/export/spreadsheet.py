import io
from datetime import date, datetime, time
from decimal import Decimal

import openpyxl
from markupsafe import Markup

from .formatter import ExportFormatter

# Excel limits sheet titles to 31 characters and forbids some of them
MAX_SHEET_TITLE = 31
FORBIDDEN_TITLE_CHARS = '[]:*?/\\'


def cell_value(value):
    """Converts a cell block result into something openpyxl can store."""
    if value is None or isinstance(value, (bool, int, float, Decimal, date, datetime, time)):
        return value
    if isinstance(value, Markup):
        return value.striptags()
    return str(value)


class Spreadsheet:
    """A one-sheet workbook holding the rows of a grid."""
    def __init__(self, name):
        self.package = openpyxl.Workbook()
        self.sheet = self.package.active
        title = ''.join(ch for ch in name if ch not in FORBIDDEN_TITLE_CHARS)
        self.sheet.title = title[:MAX_SHEET_TITLE] or 'Sheet'
        self._header_written = False

    def append(self, row):
        self.sheet.append([cell_value(value) for value in row])
        if not self._header_written:
            ExportFormatter.apply_header_style(self.sheet, self.sheet.max_row)
            self._header_written = True
        return self

    __lshift__ = append

    def finish(self):
        ExportFormatter.auto_fit_columns(self.sheet)
        return self.package


def save_workbook(workbook):
    output = io.BytesIO()
    workbook.save(output)
    output.seek(0)
    return output
