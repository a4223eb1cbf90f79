"""
Pytest configuration and fixtures for data file parser tests.
"""

import io
import os
import tempfile

import pytest
import openpyxl
from dotenv import load_dotenv

# Load environment
load_dotenv()

# Keep the API log out of the working tree
os.environ.setdefault('LOG_FILE', os.path.join(tempfile.gettempdir(), 'data_file_parser_test.log'))

from services.workbook_reader import CellKind, RawCell, make_grid


def to_raw_cell(value):
    """Convert a plain Python value into a grid cell."""
    if value is None:
        return None
    if isinstance(value, bool):
        return RawCell(CellKind.UNSUPPORTED, None)
    if isinstance(value, (int, float)):
        return RawCell(CellKind.NUMERIC, float(value))
    return RawCell(CellKind.TEXT, value)


@pytest.fixture
def make_sheet():
    """Build a grid from rows of plain values (None = absent cell)."""
    def _make(rows):
        return make_grid([to_raw_cell(v) for v in row] for row in rows)
    return _make


@pytest.fixture
def make_xlsx():
    """Build .xlsx bytes whose first sheet holds the given rows."""
    def _make(rows, extra_sheets=0):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = 'Data'
        for row in rows:
            ws.append(list(row))
        for idx in range(extra_sheets):
            wb.create_sheet(f'Extra{idx + 1}')
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
    return _make


@pytest.fixture
def people_rows():
    """Valid people table: text, integer and decimal columns."""
    return [
        ['Name', 'Age', 'Score'],
        ['Alice', 30, 95.5],
        ['Bob', 25, 88.0],
        ['Carol', 41, 70.25],
    ]
