"""Tests for the dashboard client: throttling, per-file cache, error display, views."""

import httpx
import pytest

from portfolio.client import (
    MSG_COOLDOWN,
    MSG_FAILED,
    MSG_NETWORK,
    MSG_NO_FILE,
    PortfolioDashboard,
)
from portfolio.services.rate import UploadCooldown


def _row(name, code, sector, investment, qty, price, status="updated"):
    value = price * qty
    return {
        "name": name, "code": code, "purchasePrice": 1.0, "quantity": qty,
        "investment": investment, "portfolioPercent": "", "cmp": 0, "presentValue": 0,
        "gainLoss": 0, "gainLossPercent": "", "marketCap": "", "peRatio": "",
        "sector": sector, "currentPrice": price, "priceStatus": status,
        "updatedPresentValue": value, "updatedGainLoss": value - investment,
        "updatedGainLossPercent": "",
    }


OK_BODY = {
    "success": True,
    "totalStocks": 3,
    "validStocks": 2,
    "data": [
        _row("Infosys", "INFY", "IT", 10000, 10, 1200),
        _row("HDFC Bank", "HDFCBANK", "Banking", 20000, 10, 1900),
        _row("Unknown Co", "UNKN", "Others", 500, 5, 0, status="unavailable"),
    ],
}


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


@pytest.fixture
def clock():
    return FakeClock()


def _dashboard(handler, clock):
    calls = []

    def counting(request):
        calls.append(request)
        return handler(request)

    dash = PortfolioDashboard(
        base_url="http://api.test",
        cooldown=UploadCooldown(clock=clock),
        transport=httpx.MockTransport(counting),
    )
    return dash, calls


class TestUpload:
    def test_requires_file(self, clock):
        dash, calls = _dashboard(lambda r: httpx.Response(200, json=OK_BODY), clock)
        assert dash.upload() is False
        assert dash.error == MSG_NO_FILE
        assert calls == []

    def test_success_populates_dashboard(self, clock):
        dash, calls = _dashboard(lambda r: httpx.Response(200, json=OK_BODY), clock)
        dash.select_file("holdings.xlsx", b"xlsx-bytes")
        assert dash.upload() is True

        assert calls[0].method == "POST"
        assert calls[0].url.path == "/api/quotes/"
        assert b'name="file"' in calls[0].read()
        assert dash.stats == (3, 2)
        assert [h.code for h in dash.data] == ["INFY", "HDFCBANK", "UNKN"]
        assert dash.error == ""
        assert dash.loading is False

    def test_cooldown_rejects_rapid_reupload(self, clock):
        dash, calls = _dashboard(lambda r: httpx.Response(200, json=OK_BODY), clock)
        dash.select_file("a.xlsx", b"a")
        assert dash.upload()
        dash.select_file("b.xlsx", b"bb")
        clock.t += 1.0
        assert dash.upload() is False
        assert dash.error == MSG_COOLDOWN
        assert len(calls) == 1

        clock.t += 3.0
        assert dash.upload() is True
        assert len(calls) == 2

    def test_same_file_is_served_from_cache(self, clock):
        dash, calls = _dashboard(lambda r: httpx.Response(200, json=OK_BODY), clock)
        dash.select_file("holdings.xlsx", b"same")
        assert dash.upload()
        dash.data = []
        clock.t += 5
        assert dash.upload() is True
        assert len(calls) == 1
        assert len(dash.data) == 3

    def test_server_error_message_shown_and_not_cached(self, clock):
        body = {"success": False, "error": "Invalid file type"}
        dash, calls = _dashboard(lambda r: httpx.Response(400, json=body), clock)
        dash.select_file("holdings.xlsx", b"x")
        assert dash.upload() is False
        assert dash.error == "Invalid file type"
        clock.t += 5
        dash.upload()
        assert len(calls) == 2

    def test_server_failure_without_message(self, clock):
        dash, _ = _dashboard(lambda r: httpx.Response(500, json={"success": False}), clock)
        dash.select_file("holdings.xlsx", b"x")
        assert dash.upload() is False
        assert dash.error == MSG_FAILED

    def test_transport_error_keeps_previous_data(self, clock):
        responses = [httpx.Response(200, json=OK_BODY)]

        def handler(request):
            if responses:
                return responses.pop()
            raise httpx.ConnectError("offline", request=request)

        dash, _ = _dashboard(handler, clock)
        dash.select_file("a.xlsx", b"a")
        dash.upload()
        dash.select_file("b.xlsx", b"b")
        clock.t += 5
        assert dash.upload() is False
        assert dash.error == MSG_NETWORK
        assert len(dash.data) == 3
        assert dash.loading is False

    def test_non_json_reply_is_network_error(self, clock):
        dash, _ = _dashboard(lambda r: httpx.Response(502, text="Bad Gateway"), clock)
        dash.select_file("a.xlsx", b"a")
        assert dash.upload() is False
        assert dash.error == MSG_NETWORK


class TestViews:
    @pytest.fixture
    def dash(self, clock):
        dash, _ = _dashboard(lambda r: httpx.Response(200, json=OK_BODY), clock)
        dash.select_file("holdings.xlsx", b"x")
        dash.upload()
        yield dash
        dash.close()

    def test_all_sectors(self, dash):
        assert dash.sectors == ["IT", "Banking", "Others"]
        t = dash.totals
        assert t.invested == 30500
        assert t.gain_loss == 2000 - 1000 - 500
        assert len(dash.chart) == 3

    def test_sector_filter(self, dash):
        dash.select_sector("IT")
        assert [h.name for h in dash.filtered] == ["Infosys"]
        assert dash.totals.percent == "20.00%"
        assert dash.chart[0].current_value == 12000
        assert dash.sectors == ["IT", "Banking", "Others"]

    def test_table_sorting(self, dash):
        assert [h.code for h in dash.table("current_price", descending=True)] == ["HDFCBANK", "INFY", "UNKN"]

    def test_rows_blank_implausible_prices(self, clock):
        body = dict(OK_BODY, data=OK_BODY["data"] + [_row("Huge Corp", "HUGE", "Others", 1000, 1, 1_500_000)])
        dash, _ = _dashboard(lambda r: httpx.Response(200, json=body), clock)
        dash.select_file("holdings.xlsx", b"x")
        dash.upload()

        rows = {r.code: r for r in dash.rows()}
        assert rows["INFY"].current_price == "₹1,200.00"
        assert rows["INFY"].return_percent == "20.00%"
        assert rows["INFY"].status == "Live"
        assert rows["UNKN"].current_price == "—"
        assert rows["UNKN"].status == "Cached"
        assert rows["HUGE"].current_price == "—"
        assert rows["HUGE"].updated_present_value == 1_500_000

    def test_rows_follow_filter_and_sort(self, dash):
        dash.select_sector("IT")
        assert [r.code for r in dash.rows()] == ["INFY"]
        dash.select_sector("All")
        assert [r.code for r in dash.rows("investment", descending=True)] == ["HDFCBANK", "INFY", "UNKN"]
