from __future__ import annotations

import asyncio
import re
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol

import httpx
from loguru import logger

from portfolio.core.settings import settings
from portfolio.services.normalize import is_valid_price

NSE_SUFFIX = ".NS"
BSE_SUFFIX = ".BO"

_EXCHANGE_CODE_RE = re.compile(r"[0-9]+")


class PriceSource(Protocol):
    """Anything that can quote a fully-qualified exchange symbol, e.g. "RELIANCE.NS"."""

    async def get_price(self, symbol: str) -> Optional[float]:
        ...


def _chart_price(payload: Any) -> Optional[float]:
    # {chart: {result: [{meta: {regularMarketPrice: number}}]}}
    try:
        price = payload["chart"]["result"][0]["meta"]["regularMarketPrice"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    return float(price)


class YahooChartSource:
    """
    Async quote client for the Yahoo Finance chart endpoint.
    One shared AsyncClient; in-flight requests are capped by a semaphore so a large
    upload cannot open one socket per holding.
    """
    def __init__(
        self,
        base_url: str = settings.quote_base_url,
        user_agent: str = settings.quote_user_agent,
        timeout_s: float = settings.http_timeout_s,
        max_concurrency: int = settings.fetch_concurrency,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=timeout_s,
            headers={"User-Agent": user_agent},
            transport=transport,
        )
        self.sem = asyncio.Semaphore(max(1, max_concurrency))

    async def aclose(self):
        await self.client.aclose()

    async def _get(self, url: str) -> Optional[Dict]:
        async with self.sem:
            try:
                r = await self.client.get(url)
            except httpx.HTTPError as e:
                logger.debug(f"quote request failed url={url}: {e!r}")
                return None
            if r.status_code >= 400:
                logger.debug(f"HTTP {r.status_code} for {url}")
                return None
            try:
                return r.json()
            except ValueError:
                logger.warning(f"non-JSON quote body for {url}")
                return None

    async def get_price(self, symbol: str) -> Optional[float]:
        data = await self._get(f"{self.base_url}/{symbol}")
        if data is None:
            return None
        price = _chart_price(data)
        if price is None:
            logger.warning(f"quote payload without regularMarketPrice for {symbol}")
        return price


async def _attempt(source: PriceSource, symbol: str) -> Optional[float]:
    try:
        return await source.get_price(symbol)
    except Exception as e:
        logger.debug(f"price source raised for {symbol}: {e!r}")
        return None

async def fetch_price(code: str, source: PriceSource) -> Optional[float]:
    """
    Live price for a sheet code, or None.
      - numeric exchange code -> NSE, then BSE if NSE gave nothing usable
      - ticker                -> NSE only
    Never raises; every failure mode collapses to None.
    """
    code = (code or "").strip()
    if not code:
        return None

    suffixes = [NSE_SUFFIX, BSE_SUFFIX] if _EXCHANGE_CODE_RE.fullmatch(code) else [NSE_SUFFIX]
    for suffix in suffixes:
        price = await _attempt(source, f"{code}{suffix}")
        if is_valid_price(price):
            return price
    return None


# Module-level factory with memoization so routers reuse one client
@lru_cache(maxsize=1)
def get_price_source() -> YahooChartSource:
    return YahooChartSource()
