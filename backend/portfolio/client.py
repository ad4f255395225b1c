"""
Dashboard-side client for the quotes API.

Holds the state a dashboard renders from: the selected file, the last enriched
portfolio, upload stats, the sector filter and a user-facing error line. Uploads
are throttled by a cooldown and answered from a bounded per-file cache when the
same file (name + size) was already analyzed in this session.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

import httpx
from loguru import logger

from portfolio.core.settings import settings
from portfolio.models.records import ChartPoint, EnrichedHolding, PortfolioTotals, TableRow, UploadResponse
from portfolio.services.aggregate import (
    ALL_SECTORS,
    chart_series,
    filter_by_sector,
    portfolio_totals,
    sector_options,
    sort_holdings,
    table_row,
)
from portfolio.services.rate import ResponseCache, UploadCooldown

UPLOAD_PATH = "/api/quotes/"

MSG_NO_FILE = "Please select an Excel file"
MSG_COOLDOWN = "Please wait before uploading again."
MSG_NETWORK = "Network error. Please try again."
MSG_FAILED = "Failed to process the file"


class PortfolioDashboard:
    def __init__(
        self,
        base_url: str = settings.api_base_url,
        timeout_s: float = settings.http_timeout_s * 3,
        cooldown: Optional[UploadCooldown] = None,
        cache: Optional[ResponseCache[UploadResponse]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client = httpx.Client(base_url=base_url, timeout=timeout_s, transport=transport)
        self.cooldown = cooldown or UploadCooldown()
        self.cache: ResponseCache[UploadResponse] = cache or ResponseCache()

        self.file: Optional[Tuple[str, bytes]] = None
        self.data: List[EnrichedHolding] = []
        self.stats: Optional[Tuple[int, int]] = None  # (total, valid)
        self.sector: str = ALL_SECTORS
        self.error: str = ""
        self.loading: bool = False

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ---------- actions ----------
    def select_file(self, name: str, content: bytes) -> None:
        self.file = (name, content)
        self.error = ""

    def select_sector(self, sector: str) -> None:
        self.sector = sector

    def _show(self, resp: UploadResponse) -> None:
        self.data = list(resp.data)
        self.stats = (resp.total_stocks, resp.valid_stocks)

    def upload(self) -> bool:
        """Analyze the selected file. Returns True when the dashboard got fresh data."""
        if self.file is None:
            self.error = MSG_NO_FILE
            return False

        if not self.cooldown.try_acquire():
            logger.debug(f"upload throttled, {self.cooldown.remaining():.2f}s left")
            self.error = MSG_COOLDOWN
            return False

        name, content = self.file
        key = ResponseCache.key_for(name, len(content))
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"serving cached analysis for {key}")
            self._show(cached)
            return True

        self.loading = True
        self.error = ""
        try:
            r = self.client.post(UPLOAD_PATH, files={"file": (name, content)})
            body = r.json()
            if body.get("success"):
                resp = UploadResponse.model_validate(body)
                self._show(resp)
                self.cache.set(key, resp)
                return True
            self.error = body.get("error") or MSG_FAILED
            return False
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"Upload error: {e!r}")
            self.error = MSG_NETWORK
            return False
        finally:
            self.loading = False

    # ---------- views ----------
    @property
    def filtered(self) -> List[EnrichedHolding]:
        return filter_by_sector(self.data, self.sector)

    @property
    def totals(self) -> PortfolioTotals:
        return portfolio_totals(self.filtered)

    @property
    def chart(self) -> List[ChartPoint]:
        return chart_series(self.filtered)

    @property
    def sectors(self) -> List[str]:
        return sector_options(self.data)

    def table(self, sort_by: str = "name", descending: bool = False) -> List[EnrichedHolding]:
        return sort_holdings(self.filtered, sort_by, descending)

    def rows(self, sort_by: str = "name", descending: bool = False) -> List[TableRow]:
        """Table rows as displayed: implausible prices blanked, returns as percent text."""
        return [table_row(h) for h in self.table(sort_by, descending)]
