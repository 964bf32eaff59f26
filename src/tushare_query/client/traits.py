"""
Generic request components for tushare-query.

Splits a remote table query into composable traits:
- Fetcher: HTTP transport protocol (sync and async POST)
- Parser: JSON envelope + table decoding protocol

Usage:
    from tushare_query.client.traits import BaseFetcher, BaseParser

    class MyParser(BaseParser):
        DATA_PATH = ("data",)

    with BaseFetcher(timeout=5.0) as fetcher:
        raw = fetcher.post(url, payload).json()

    parser = MyParser()
    df = parser.clean(parser.parse(raw))
"""

import random
from typing import Any, Protocol

import httpx
import polars as pl

from tushare_query.config.logger import log

# =============================================================================
# Protocols - Duck Typing Interfaces
# =============================================================================


class Fetcher(Protocol):
    """
    Protocol for fetching - duck typing interface.

    Implementations must provide:
    - post(url, payload) -> httpx.Response
    - apost(url, payload) -> httpx.Response (awaitable)
    - close() -> None
    """

    def post(self, url: str, payload: dict) -> httpx.Response: ...
    async def apost(self, url: str, payload: dict) -> httpx.Response: ...
    def close(self) -> None: ...


class Parser(Protocol):
    """
    Protocol for parsing.

    Implementations must provide:
    - parse(raw) -> dict
    - clean(data) -> pl.DataFrame
    """

    def parse(self, raw: dict) -> dict: ...
    def clean(self, data: dict) -> pl.DataFrame: ...


# =============================================================================
# Base Implementations
# =============================================================================


class BaseFetcher:
    """
    Base Fetcher over httpx.

    One long-lived ``httpx.Client`` serves synchronous calls; async calls open
    a short-lived ``httpx.AsyncClient`` with the same settings so the fetcher
    never binds to a particular event loop.

    ``transport`` drives the sync client and ``async_transport`` the async
    one. A transport implementing both interfaces is used for both paths.
    """

    USER_AGENTS = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36",
    ]

    def __init__(
        self,
        timeout: float = 10.0,
        http2: bool = False,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ):
        if transport is not None and not isinstance(transport, httpx.BaseTransport):
            raise TypeError(
                f"transport must be an httpx.BaseTransport, got {type(transport).__name__}"
            )
        if async_transport is not None and not isinstance(
            async_transport, httpx.AsyncBaseTransport
        ):
            raise TypeError(
                "async_transport must be an httpx.AsyncBaseTransport, "
                f"got {type(async_transport).__name__}"
            )

        self.timeout = timeout
        self.http2 = http2
        # A transport serving both paths (httpx.MockTransport) is reused for async
        if async_transport is None and isinstance(transport, httpx.AsyncBaseTransport):
            async_transport = transport
        elif async_transport is None and transport is not None:
            log.warning(
                f"{type(transport).__name__} is sync-only; "
                "async requests use the default httpx transport"
            )
        self._async_transport = async_transport

        self._client = httpx.Client(
            http2=http2,
            timeout=httpx.Timeout(timeout),
            headers=self._get_headers(),
            transport=transport,
        )

    # ----------------------------
    # Headers
    # ----------------------------

    def _get_headers(self) -> dict:
        return {
            "User-Agent": random.choice(self.USER_AGENTS),
            "Accept": "application/json, text/plain, */*",
            "Content-Type": "application/json",
        }

    # ----------------------------
    # Public API
    # ----------------------------

    def post(self, url: str, payload: dict) -> httpx.Response:
        return self._client.post(url, json=payload)

    async def apost(self, url: str, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(
            http2=self.http2,
            timeout=httpx.Timeout(self.timeout),
            headers=self._get_headers(),
            transport=self._async_transport,
        ) as client:
            return await client.post(url, json=payload)

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class BaseParser:
    """
    Base Parser - converts a columnar JSON table to a DataFrame.

    Provides:
    - Configurable data path traversal via DATA_PATH
    - Column/row keys via FIELDS_KEY and ITEMS_KEY
    - Shape validation before building the DataFrame

    Usage:
        class MyParser(BaseParser):
            DATA_PATH = ("result", "table")
            FIELDS_KEY = "columns"
            ITEMS_KEY = "rows"
    """

    # Keys to traverse to get the table object, e.g., ("data",)
    DATA_PATH: tuple[str, ...] = ("data",)

    FIELDS_KEY: str = "fields"
    ITEMS_KEY: str = "items"

    def parse(self, raw: dict) -> dict:
        """
        Navigate to the table object.

        Args:
            raw: Raw JSON response dictionary

        Returns:
            Table dictionary holding FIELDS_KEY and ITEMS_KEY

        Raises:
            ValueError: if DATA_PATH does not lead to an object
        """
        data: Any = raw
        for key in self.DATA_PATH:
            if not isinstance(data, dict) or data.get(key) is None:
                raise ValueError(f"Missing `{key}` in response")
            data = data[key]

        if not isinstance(data, dict):
            raise ValueError(f"Expected an object at {'.'.join(self.DATA_PATH)}")
        return data

    def columns(self, data: dict) -> list[str]:
        fields = data.get(self.FIELDS_KEY)
        if not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
            raise ValueError(f"`{self.FIELDS_KEY}` must be a list of strings")
        if len(set(fields)) != len(fields):
            raise ValueError(f"Duplicate column names in `{self.FIELDS_KEY}`: {fields}")
        return fields

    def rows(self, data: dict, width: int) -> list[list]:
        items = data.get(self.ITEMS_KEY)
        if items is None:
            return []
        if not isinstance(items, list):
            raise ValueError(f"`{self.ITEMS_KEY}` must be a list of rows")

        for i, row in enumerate(items):
            if not isinstance(row, list):
                raise ValueError(f"Row {i} is not a list: {row!r}")
            if len(row) != width:
                raise ValueError(f"Row {i} has {len(row)} values, expected {width}")
        return items

    def clean(self, data: dict) -> pl.DataFrame:
        """
        Build a Polars DataFrame from a validated table.

        Args:
            data: Table dictionary returned by parse()

        Returns:
            Polars DataFrame; zero rows keeps the declared columns as String
        """
        columns = self.columns(data)
        rows = self.rows(data, len(columns))

        if not rows:
            return pl.DataFrame(schema={c: pl.String for c in columns})

        log.debug(f"Building frame with {len(rows)} rows x {len(columns)} columns")
        # infer_schema_length=None scans all rows, so late non-null values
        # still decide the dtype
        return pl.DataFrame(
            rows,
            schema=columns,
            orient="row",
            infer_schema_length=None,
        )
