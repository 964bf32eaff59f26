"""tushare pro client facade.

Usage:
    with Tushare("your-token") as ts:
        df = ts.stock_basic().list_status("L").exchange("SSE").query()

        # endpoints without a typed builder
        df = ts.query_builder("top_list").params({"trade_date": "20240102"}).query()
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Self

import httpx
import polars as pl

import tushare_query.client.apis  # noqa: F401  (declares the typed endpoints)
from tushare_query.client.builder import QueryBuilder
from tushare_query.client.pro import TushareFetcher
from tushare_query.client.schema import ApiFactories
from tushare_query.config.settings import DEFAULT_TIMEOUT, TUSHARE_API, TushareSettings
from tushare_query.transform import ParamValue


class Tushare(ApiFactories):
    """Main interface for tushare pro.

    Holds the access token and the fixed service endpoint. Both are read-only
    after construction, so one client can serve many independent queries,
    sequentially or from several threads.

    Besides ``query_builder``, every declared endpoint has a factory method of
    the same name (``stock_basic()``, ``daily()``, ...) returning its typed
    builder.
    """

    def __init__(
        self,
        token: str,
        *,
        endpoint: str = TUSHARE_API,
        timeout: float = DEFAULT_TIMEOUT,
        http2: bool = False,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client. The token is not validated here.

        Args:
            token: tushare access token, sent with every request
            endpoint: Base URL queries are POSTed to
            timeout: Request timeout in seconds
            http2: Negotiate HTTP/2 with the endpoint
            transport: Optional httpx transport for query() (e.g. httpx.MockTransport)
            async_transport: Optional httpx transport for aquery(). Defaults to
                ``transport`` when that one also implements the async interface.
        """
        self._token = token
        self._endpoint = endpoint
        self._fetcher = TushareFetcher(
            timeout=timeout,
            http2=http2,
            transport=transport,
            async_transport=async_transport,
        )

    @classmethod
    def from_settings(cls, settings: TushareSettings, **kwargs) -> Self:
        """Build a client from settings. Keyword arguments override them."""
        options = {
            "endpoint": settings.endpoint,
            "timeout": settings.timeout,
            "http2": settings.http2,
        }
        return cls(settings.token, **(options | kwargs))

    @classmethod
    def from_env(cls, var: str = "TUSHARE_TOKEN", **kwargs) -> Self:
        """Build a client from the ``TUSHARE_TOKEN`` environment variable."""
        return cls.from_settings(TushareSettings.from_env(var), **kwargs)

    @classmethod
    def from_config(cls, config_path: str | Path = "config.yaml", **kwargs) -> Self:
        """Build a client from the ``tushare`` section of a YAML config."""
        return cls.from_settings(TushareSettings.from_yaml(config_path), **kwargs)

    @property
    def token(self) -> str:
        return self._token

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def fetcher(self) -> TushareFetcher:
        return self._fetcher

    def query_builder(self, api_name: str) -> QueryBuilder:
        """Generic builder for any endpoint, including undeclared ones."""
        return QueryBuilder(self, api_name)

    def query(
        self,
        api_name: str,
        fields: str | Sequence[str] | None = None,
        /,
        **params: ParamValue | None,
    ) -> pl.DataFrame:
        """One-call shorthand for ``query_builder(api_name).params(...).query()``.

        ``api_name`` and ``fields`` are positional-only, so every keyword is a
        remote parameter, including ones named ``api_name`` or ``fields``.

        Example:
            ts.query("daily", "ts_code,close", ts_code="000001.SZ")
        """
        return self.query_builder(api_name).params(params).fields(fields).query()

    def close(self) -> None:
        """Close the fetcher."""
        self._fetcher.close()

    def __enter__(self) -> "Tushare":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        masked = f"{self._token[:4]}***" if self._token else "''"
        return f"Tushare(token={masked}, endpoint={self._endpoint!r})"
