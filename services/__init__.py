"""
Service layer for the data file parser.

This package contains framework-agnostic business logic that can be used
by the API or any other interface.
"""

__version__ = "1.0.0"
