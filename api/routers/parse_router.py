"""
Parse router - Handle spreadsheet uploads.

This module provides the endpoint that parses an uploaded workbook and
returns its typed columns or the errors that prevented parsing.
"""

import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from api.dependencies import get_parser_service, verify_file_size
from api.schemas.parse_schema import ParseResultResponse
from services.excel_parser_service import ExcelParserService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/files', tags=['files'])


@router.post(
    '/parse',
    response_model=ParseResultResponse,
    responses={status.HTTP_422_UNPROCESSABLE_ENTITY: {'model': ParseResultResponse}}
)
def parse_data_file(
    response: Response,
    file: UploadFile = File(..., description="Spreadsheet to parse (.xls, .xlsx or .xlsm)"),
    parser: ExcelParserService = Depends(get_parser_service)
):
    """
    Parse an uploaded spreadsheet into typed columns.

    The first row of the first sheet holds the column names and the second
    row defines each column's type. Every following cell must match it.

    **Returns:**
    - 200 with the parsed columns
    - 422 with every error found (empty cells, type mismatches,
      unsupported or unreadable file)
    - 413 if the file exceeds the size limit

    **Example:**
    ```bash
    curl -F "file=@data.xlsx" http://localhost:8000/api/files/parse
    ```
    """
    content = file.file.read()
    verify_file_size(len(content))

    logger.info(f"Parse request: {file.filename} ({len(content)} bytes)")
    result = parser.parse_file(content, file.filename)

    if not result.success:
        response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        logger.info(f"Parse of {file.filename} failed with {len(result.errors)} errors")

    return ParseResultResponse.from_result(result)
