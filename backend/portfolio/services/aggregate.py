"""
Dashboard rollups over an enriched portfolio: sector filter, summary totals,
chart series, sector choices and display rows. Pure functions; recompute on every filter change.
"""
from __future__ import annotations

import math
from typing import Any, List, Sequence

from portfolio.models.records import ChartPoint, EnrichedHolding, PortfolioTotals, TableRow

ALL_SECTORS = "All"

# Display plausibility, deliberately looser than normalize.MAX_VALID_PRICE:
# that one gates which quotes the server trusts, this one only decides whether
# a value already on screen looks like a price at all.
PLAUSIBLE_PRICE_CEILING = 1_000_000

SORT_KEYS = {
    "name", "code", "sector", "quantity", "purchase_price", "investment",
    "current_price", "updated_present_value", "updated_gain_loss",
}

def filter_by_sector(holdings: Sequence[EnrichedHolding], sector: str = ALL_SECTORS) -> List[EnrichedHolding]:
    if sector == ALL_SECTORS:
        return list(holdings)
    return [h for h in holdings if h.sector == sector]

def portfolio_totals(holdings: Sequence[EnrichedHolding]) -> PortfolioTotals:
    invested = sum(h.investment for h in holdings)
    current = sum(h.updated_present_value for h in holdings)
    gain_loss = sum(h.updated_gain_loss for h in holdings)
    percent = f"{gain_loss / invested * 100:.2f}%" if invested else "0%"
    return PortfolioTotals(invested=invested, current=current, gain_loss=gain_loss, percent=percent)

def sector_options(holdings: Sequence[EnrichedHolding]) -> List[str]:
    """Distinct sectors in first-seen order; pass the unfiltered data."""
    return list(dict.fromkeys(h.sector for h in holdings))

def chart_series(holdings: Sequence[EnrichedHolding]) -> List[ChartPoint]:
    return [
        ChartPoint(
            name=h.name,
            investment=h.investment,
            current_value=h.updated_present_value,
            gain_loss=h.updated_gain_loss,
        )
        for h in holdings
    ]

def sort_holdings(holdings: Sequence[EnrichedHolding], key: str, descending: bool = False) -> List[EnrichedHolding]:
    if key not in SORT_KEYS:
        raise ValueError(f"cannot sort by {key!r}")
    return sorted(holdings, key=lambda h: getattr(h, key), reverse=descending)

def is_plausible_price(p: Any) -> bool:
    return (
        isinstance(p, (int, float))
        and not isinstance(p, bool)
        and 0 < p < PLAUSIBLE_PRICE_CEILING
    )

def format_percent(v: float) -> str:
    return f"{v:.2f}%" if math.isfinite(v) else "—"

def format_price(p: Any) -> str:
    return f"₹{p:,.2f}" if is_plausible_price(p) else "—"

def table_row(h: EnrichedHolding) -> TableRow:
    pct = h.updated_gain_loss / h.investment * 100 if h.investment else math.nan
    return TableRow(
        name=h.name,
        code=h.code,
        sector=h.sector,
        purchase_price=h.purchase_price,
        quantity=h.quantity,
        investment=h.investment,
        current_price=format_price(h.current_price),
        updated_present_value=h.updated_present_value,
        updated_gain_loss=h.updated_gain_loss,
        return_percent=format_percent(pct),
        status="Live" if h.price_status == "updated" else "Cached",
    )
