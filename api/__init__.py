"""
FastAPI application for the data file parser.

This package contains the REST API that accepts spreadsheet uploads and
returns their parsed columns.
"""

__version__ = "1.0.0"
