"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for the parser service and
upload checks.
"""

import logging

from fastapi import HTTPException, status

from api.config import settings
from services.excel_parser_service import ExcelParserService

logger = logging.getLogger(__name__)


def get_parser_service() -> ExcelParserService:
    """
    Get parser service dependency.

    A new service is created per request; it carries configuration only.

    Usage:
        @app.post("/endpoint")
        def endpoint(parser: ExcelParserService = Depends(get_parser_service)):
            result = parser.parse_file(content, filename)
    """
    return ExcelParserService(
        sheet_index=settings.SHEET_INDEX,
        header_row_index=settings.HEADER_ROW_INDEX
    )


def verify_file_size(file_size: int) -> bool:
    """
    Verify uploaded file size is within limit.

    Args:
        file_size: File size in bytes

    Returns:
        True if size is acceptable

    Raises:
        HTTPException: If file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size > max_size_bytes:
        logger.warning(f"Rejected upload of {file_size} bytes (limit {max_size_bytes})")
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True
