# backend/portfolio/services/io_utils.py
from __future__ import annotations

import io
import math
import re
from typing import Any, List, Optional, Sequence

import pandas as pd
from loguru import logger

from portfolio.models.records import Holding
from portfolio.services.normalize import parse_number, to_int, text_cell
from portfolio.services.sectors import detect_sector

RawCell = Optional[Any]  # None | int | float | str
Grid = List[List[RawCell]]

HEADER_MARKER = "Particulars"
MIN_ROW_CELLS = 7
SPREADSHEET_EXTS = (".xlsx", ".xls")

# Column layout of the broker "Particulars" sheet (0-based).
COL_NAME = 1
COL_PURCHASE_PRICE = 2
COL_QUANTITY = 3
COL_INVESTMENT = 4
COL_PORTFOLIO_PCT = 5
COL_CODE = 6
COL_CMP = 7
COL_PRESENT_VALUE = 8
COL_GAIN_LOSS = 9
COL_GAIN_LOSS_PCT = 10
COL_MARKET_CAP = 11
COL_PE_RATIO = 12

_CODE_RE = re.compile(r"\b\d{4,6}\b|[A-Z.]{3,}", re.ASCII)


class ParseError(ValueError):
    """The sheet does not have the expected structure."""


def is_spreadsheet_name(filename: Optional[str]) -> bool:
    return bool(filename) and filename.lower().endswith(SPREADSHEET_EXTS)

def _cell(v: Any) -> RawCell:
    if v is None or (isinstance(v, str) and v == ""):
        return None
    if isinstance(v, float):
        if math.isnan(v):
            return None
        if v.is_integer():
            return int(v)
        return v
    try:
        if pd.isna(v):
            return None
    except (TypeError, ValueError):
        pass
    return v

def _trim_row(values: Sequence[Any]) -> List[RawCell]:
    row = [_cell(v) for v in values]
    while row and row[-1] is None:
        row.pop()
    return row

def load_grid(content: bytes, filename: str) -> Grid:
    """Read the first worksheet as a plain grid of cells (no header inference)."""
    # na_filter off: cell text like "N/A" or "NA" is data here, only empty cells are blank
    df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object, na_filter=False)
    grid = [_trim_row(r) for r in df.itertuples(index=False, name=None)]
    logger.debug(f"Loaded grid {len(grid)}x{df.shape[1]} from {filename}")
    return grid

def _at(row: Sequence[RawCell], idx: int) -> RawCell:
    return row[idx] if idx < len(row) else None

def _text(row: Sequence[RawCell], idx: int) -> str:
    return text_cell(_at(row, idx))

def find_header_row(grid: Grid) -> int:
    for i, row in enumerate(grid):
        if row and _text(row, COL_NAME).strip() == HEADER_MARKER:
            return i
    raise ParseError(f'Header row with "{HEADER_MARKER}" not found')

def extract_code(raw: RawCell) -> str:
    m = _CODE_RE.search(text_cell(raw))
    return m.group(0) if m else ""

def _row_to_holding(row: Sequence[RawCell]) -> Optional[Holding]:
    if not row or len(row) < MIN_ROW_CELLS:
        return None

    name = _text(row, COL_NAME).strip()
    code = extract_code(_at(row, COL_CODE))
    if not name or not code:
        return None

    purchase_price = parse_number(_at(row, COL_PURCHASE_PRICE))
    quantity = to_int(_at(row, COL_QUANTITY))
    if not purchase_price or not quantity:
        return None

    return Holding(
        name=name,
        code=code,
        purchase_price=purchase_price,
        quantity=quantity,
        investment=parse_number(_at(row, COL_INVESTMENT)),
        portfolio_percent=_text(row, COL_PORTFOLIO_PCT),
        cmp=parse_number(_at(row, COL_CMP)),
        present_value=parse_number(_at(row, COL_PRESENT_VALUE)),
        gain_loss=parse_number(_at(row, COL_GAIN_LOSS)),
        gain_loss_percent=_text(row, COL_GAIN_LOSS_PCT),
        market_cap=_text(row, COL_MARKET_CAP),
        pe_ratio=_text(row, COL_PE_RATIO),
        sector=detect_sector(code, name),
    )

def parse_holdings(grid: Grid) -> List[Holding]:
    """
    Convert the rows under the "Particulars" header into holdings, in sheet order.
    Rows that are short, blank, unnamed, uncoded or without price/quantity are skipped.
    Raises ParseError only when the header row is missing.
    """
    header = find_header_row(grid)
    out: List[Holding] = []
    skipped = 0
    for row in grid[header + 1:]:
        h = _row_to_holding(row)
        if h is None:
            skipped += 1
            continue
        out.append(h)
    if skipped:
        logger.debug(f"Skipped {skipped} non-holding rows below header at row {header}")
    return out

def parse_file(content: bytes, filename: str) -> List[Holding]:
    grid = load_grid(content, filename)
    holdings = parse_holdings(grid)
    logger.info(f"Parsed {len(holdings)} holdings from {filename} ({len(grid)} rows)")
    return holdings
