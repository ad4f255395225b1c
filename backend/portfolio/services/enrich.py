from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from portfolio.models.records import EnrichedHolding, Holding, PriceStatus, UploadResponse
from portfolio.services.normalize import is_valid_price
from portfolio.services.quotes import PriceSource, fetch_price
from portfolio.services.sectors import detect_sector

PERCENT_PLACEHOLDER = "—"


def resolve_price(live: Optional[float], cmp: float) -> Tuple[float, PriceStatus]:
    """Live quote if usable, else the sheet's CMP if usable, else 0."""
    if is_valid_price(live):
        return float(live), "updated"
    if is_valid_price(cmp):
        return float(cmp), "unavailable"
    return 0.0, "unavailable"

def gain_loss_percent(gain_loss: float, investment: float) -> str:
    if not investment:
        return PERCENT_PLACEHOLDER
    return f"{gain_loss / investment * 100:.2f}%"

def apply_price(holding: Holding, live: Optional[float]) -> EnrichedHolding:
    price, status = resolve_price(live, holding.cmp)
    present_value = price * holding.quantity
    gain_loss = present_value - holding.investment
    fields = holding.model_dump()
    fields["sector"] = holding.sector or detect_sector(holding.code, holding.name)
    return EnrichedHolding(
        **fields,
        current_price=price,
        price_status=status,
        updated_present_value=present_value,
        updated_gain_loss=gain_loss,
        updated_gain_loss_percent=gain_loss_percent(gain_loss, holding.investment),
    )

async def enrich_holding(holding: Holding, source: PriceSource) -> EnrichedHolding:
    live = await fetch_price(holding.code, source)
    return apply_price(holding, live)

async def enrich_holdings(holdings: Sequence[Holding], source: PriceSource) -> List[EnrichedHolding]:
    """Enrich every holding concurrently; output order follows input order."""
    results = await asyncio.gather(
        *(enrich_holding(h, source) for h in holdings),
        return_exceptions=True,
    )
    out: List[EnrichedHolding] = []
    for h, res in zip(holdings, results):
        if isinstance(res, EnrichedHolding):
            out.append(res)
            continue
        # one bad holding must not sink the batch
        logger.warning(f"enrichment failed for {h.code}: {res!r}")
        out.append(apply_price(h, None))
    return out

def count_valid(enriched: Sequence[EnrichedHolding]) -> int:
    return sum(1 for e in enriched if is_valid_price(e.current_price))

def build_response(holdings: Sequence[Holding], enriched: List[EnrichedHolding]) -> UploadResponse:
    return UploadResponse(
        total_stocks=len(holdings),
        valid_stocks=count_valid(enriched),
        data=enriched,
    )
