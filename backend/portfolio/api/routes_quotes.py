from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from portfolio.models.records import ErrorResponse
from portfolio.services.enrich import build_response, enrich_holdings
from portfolio.services.io_utils import is_spreadsheet_name, parse_file
from portfolio.services.quotes import PriceSource, get_price_source

router = APIRouter()  # no prefix

MSG_NO_FILE = "No file uploaded"
MSG_BAD_TYPE = "Invalid file type"
MSG_NO_ROWS = "No valid stock rows found"
MSG_FAILED = "Failed to process file. Check format & content."

def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorResponse(error=message).model_dump(by_alias=True))

@router.post("/")
async def analyze_portfolio(
    file: Optional[UploadFile] = File(None),
    source: PriceSource = Depends(get_price_source),
):
    if file is None:
        return _error(400, MSG_NO_FILE)
    if not is_spreadsheet_name(file.filename):
        logger.info(f"Rejected upload {file.filename!r}: not a spreadsheet")
        return _error(400, MSG_BAD_TYPE)

    try:
        content = await file.read()
        holdings = parse_file(content, file.filename)
        if not holdings:
            return _error(400, MSG_NO_ROWS)

        enriched = await enrich_holdings(holdings, source)
        resp = build_response(holdings, enriched)
    except Exception as e:
        logger.exception(f"Error processing {file.filename}: {e}")
        return _error(500, MSG_FAILED)

    logger.info(f"Processed {file.filename}: {resp.valid_stocks}/{resp.total_stocks} priced")
    return JSONResponse(content=resp.model_dump(by_alias=True))
