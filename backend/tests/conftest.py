"""Pytest configuration and fixtures."""

import io
from typing import Dict, Iterable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from portfolio.main import app
from portfolio.services.quotes import get_price_source

HEADER = [
    "S.No", "Particulars", "Purchase Price", "Qty", "Investment", "Portfolio %",
    "NSE/BSE", "CMP", "Present Value", "Gain/Loss", "Gain/Loss %", "Market Cap", "P/E",
]


class StubPriceSource:
    """Deterministic PriceSource: fixed prices per symbol, optional failures."""

    def __init__(self, prices: Optional[Dict[str, float]] = None, failing: Iterable[str] = ()):
        self.prices = dict(prices or {})
        self.failing = set(failing)
        self.calls: List[str] = []

    async def get_price(self, symbol: str) -> Optional[float]:
        self.calls.append(symbol)
        if symbol in self.failing:
            raise httpx.ConnectError(f"simulated failure for {symbol}")
        return self.prices.get(symbol)


def build_workbook(rows: List[list], preamble: Optional[List[list]] = None, header: bool = True) -> bytes:
    wb = Workbook()
    ws = wb.active
    for r in preamble or [["Client Holdings Statement"], []]:
        ws.append(r)
    if header:
        ws.append(HEADER)
    for r in rows:
        ws.append(r)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def stub_source():
    return StubPriceSource


@pytest.fixture
def workbook():
    return build_workbook


@pytest.fixture
def reliance_row():
    return [1, "Reliance Industries", 2000, 5, 10000, "10%", "RELIANCE", 2400, 12000, 2000, "20%", "Large", "28.1"]


@pytest.fixture(name="client")
def client_fixture():
    """Test client whose quote source answers nothing (every holding unavailable)."""
    app.dependency_overrides[get_price_source] = lambda: StubPriceSource()
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
