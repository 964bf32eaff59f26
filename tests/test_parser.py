"""
Tests for the tushare wire components.

Tests:
1. TushareParser envelope handling
2. Table decoding into polars
3. TushareFetcher response decoding
"""

import httpx
import polars as pl
import pytest

from tushare_query.client.errors import ParseError, ServiceError, TransportError
from tushare_query.client.pro import TushareFetcher, TushareParser
from tushare_query.client.traits import BaseParser, Fetcher, Parser


@pytest.fixture
def parser():
    return TushareParser("daily")


@pytest.fixture
def daily_table():
    """Sample daily bar table."""
    return {
        "fields": ["ts_code", "trade_date", "open", "close", "vol"],
        "items": [
            ["000001.SZ", "20240104", 9.19, 9.11, 1158366.45],
            ["000001.SZ", "20240103", 9.20, 9.20, 1030732.09],
            ["000001.SZ", "20240102", 9.39, 9.21, None],
        ],
        "has_more": False,
    }


# =============================================================================
# Test 1: Protocols
# =============================================================================


def test_parser_protocol(parser):
    """TushareParser satisfies the Parser protocol."""
    p: Parser = parser
    assert callable(p.parse)
    assert callable(p.clean)


def test_fetcher_protocol():
    """TushareFetcher satisfies the Fetcher protocol."""
    with TushareFetcher() as fetcher:
        f: Fetcher = fetcher
        assert callable(f.post)
        assert callable(f.apost)
        assert callable(f.close)


# =============================================================================
# Test 2: Envelope
# =============================================================================


class TestEnvelope:
    def test_parse_returns_table(self, parser, daily_table):
        assert parser.parse({"code": 0, "msg": "", "data": daily_table}) is daily_table

    def test_parse_service_error(self, parser):
        with pytest.raises(ServiceError) as exc_info:
            parser.parse({"code": 40203, "msg": "抱歉，您每分钟最多访问该接口500次", "data": None})

        assert exc_info.value.code == 40203
        assert exc_info.value.msg == "抱歉，您每分钟最多访问该接口500次"

    def test_parse_service_error_without_msg(self, parser):
        with pytest.raises(ServiceError) as exc_info:
            parser.parse({"code": -1})

        assert exc_info.value.msg == ""

    def test_parse_missing_code(self, parser, daily_table):
        with pytest.raises(ParseError, match="code"):
            parser.parse({"data": daily_table})

    @pytest.mark.parametrize("data", [None, [], "table"])
    def test_parse_bad_data(self, parser, data):
        with pytest.raises(ParseError):
            parser.parse({"code": 0, "msg": "", "data": data})

    def test_errors_share_base(self):
        from tushare_query.client.errors import TushareError

        for cls in (TransportError, ServiceError, ParseError):
            assert issubclass(cls, TushareError)


# =============================================================================
# Test 3: Table decoding
# =============================================================================


class TestClean:
    def test_clean_builds_frame(self, parser, daily_table):
        df = parser.clean(daily_table)

        assert df.columns == daily_table["fields"]
        assert df.height == 3
        assert df["close"].dtype == pl.Float64
        assert df["trade_date"].to_list() == ["20240104", "20240103", "20240102"]

    def test_clean_late_values_decide_dtype(self, parser):
        """Leading nulls do not make the column Null-typed."""
        table = {"fields": ["a"], "items": [[None]] * 200 + [[1.5]]}

        df = parser.clean(table)

        assert df["a"].dtype == pl.Float64
        assert df["a"][-1] == 1.5

    def test_clean_empty_items(self, parser):
        df = parser.clean({"fields": ["ts_code", "name"], "items": []})

        assert df.columns == ["ts_code", "name"]
        assert df.height == 0
        assert df.schema["ts_code"] == pl.String

    def test_clean_missing_items(self, parser):
        df = parser.clean({"fields": ["ts_code"]})

        assert df.height == 0

    def test_clean_short_row(self, parser):
        with pytest.raises(ParseError, match="Row 1"):
            parser.clean({"fields": ["a", "b"], "items": [[1, 2], [3]]})

    def test_clean_row_not_list(self, parser):
        with pytest.raises(ParseError):
            parser.clean({"fields": ["a"], "items": [{"a": 1}]})

    def test_clean_items_not_list(self, parser):
        with pytest.raises(ParseError):
            parser.clean({"fields": ["a"], "items": "1,2,3"})

    @pytest.mark.parametrize("fields", [None, "a,b", ["a", 1], ["a", "a"]])
    def test_clean_bad_fields(self, parser, fields):
        with pytest.raises(ParseError):
            parser.clean({"fields": fields, "items": []})

    def test_base_parser_raises_value_error(self):
        """The generic base reports plain ValueError; the tushare parser types it."""
        with pytest.raises(ValueError):
            BaseParser().clean({"fields": ["a"], "items": [[1, 2]]})

    def test_base_parser_custom_keys(self):
        class RowsParser(BaseParser):
            DATA_PATH = ("result", "table")
            FIELDS_KEY = "columns"
            ITEMS_KEY = "rows"

        raw = {"result": {"table": {"columns": ["x"], "rows": [[1], [2]]}}}
        p = RowsParser()

        df = p.clean(p.parse(raw))

        assert df["x"].to_list() == [1, 2]


# =============================================================================
# Test 4: Fetcher
# =============================================================================


class TestFetcher:
    def _fetcher(self, respond):
        return TushareFetcher(transport=httpx.MockTransport(respond))

    def test_fetch_returns_json(self):
        body = {"code": 0, "msg": "", "data": {"fields": [], "items": []}}
        with self._fetcher(lambda r: httpx.Response(200, json=body)) as fetcher:
            assert fetcher.fetch("http://api.tushare.pro", {"api_name": "daily"}) == body

    def test_fetch_http_error_uses_reason(self):
        with self._fetcher(lambda r: httpx.Response(503)) as fetcher:
            with pytest.raises(ServiceError) as exc_info:
                fetcher.fetch("http://api.tushare.pro", {"api_name": "daily"})

        assert exc_info.value.code == 503
        assert exc_info.value.msg == "Service Unavailable"

    def test_fetch_json_array_is_parse_error(self):
        with self._fetcher(lambda r: httpx.Response(200, json=[1, 2])) as fetcher:
            with pytest.raises(ParseError, match="list"):
                fetcher.fetch("http://api.tushare.pro", {"api_name": "daily"})

    def test_fetch_transport_error(self):
        def refuse(request):
            raise httpx.ConnectError("no route to host", request=request)

        with self._fetcher(refuse) as fetcher:
            with pytest.raises(TransportError) as exc_info:
                fetcher.fetch("http://api.tushare.pro", {"api_name": "daily"})

        assert exc_info.value.api_name == "daily"
        assert "no route to host" in str(exc_info.value)

    def test_post_sends_json(self):
        seen = {}

        def capture(request):
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = request.content
            return httpx.Response(200, json={})

        with self._fetcher(capture) as fetcher:
            fetcher.post("http://api.tushare.pro", {"api_name": "daily"})

        assert seen["content_type"] == "application/json"
        assert b'"api_name"' in seen["body"]

    def test_mock_transport_serves_both_paths(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json={}))

        with TushareFetcher(transport=transport) as fetcher:
            assert fetcher._async_transport is transport

    def test_sync_only_transport_not_reused_for_async(self):
        """A sync transport must never reach httpx.AsyncClient."""
        with TushareFetcher(transport=httpx.HTTPTransport()) as fetcher:
            assert fetcher._async_transport is None

    def test_async_transport_must_be_async(self):
        with pytest.raises(TypeError, match="AsyncBaseTransport"):
            TushareFetcher(async_transport=httpx.HTTPTransport())  # type: ignore[arg-type]

    def test_transport_must_be_sync(self):
        with pytest.raises(TypeError, match="BaseTransport"):
            TushareFetcher(transport=httpx.AsyncHTTPTransport())  # type: ignore[arg-type]

    def test_http2_flag(self):
        body = {"code": 0, "msg": "", "data": {"fields": [], "items": []}}
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=body))

        with TushareFetcher(http2=True, transport=transport) as fetcher:
            assert fetcher.http2 is True
            assert fetcher.fetch("http://api.tushare.pro", {"api_name": "daily"}) == body
