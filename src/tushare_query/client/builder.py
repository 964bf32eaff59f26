"""Generic, endpoint-agnostic query builder.

A QueryBuilder is an immutable value: every configuration call returns a new
builder and leaves the original untouched, so partially configured builders
can be shared and reused freely.

Usage:
    qb = client.query_builder("stock_basic").params({"list_status": "L"})
    df = qb.fields(["ts_code", "name"]).query()
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Protocol, Self

import polars as pl

from tushare_query.client.pro import TushareFetcher, TushareParser
from tushare_query.config.logger import log
from tushare_query.transform import ParamValue, to_param_str


class QueryTarget(Protocol):
    """What a builder needs from its client: credentials, URL and transport."""

    @property
    def token(self) -> str: ...
    @property
    def endpoint(self) -> str: ...
    @property
    def fetcher(self) -> TushareFetcher: ...


def normalize_fields(names: str | Sequence[str] | None) -> tuple[str, ...] | None:
    if names is None:
        return None
    if isinstance(names, str):
        names = names.split(",")
    cleaned = tuple(n.strip() for n in names if n.strip())
    return cleaned or None


@dataclass(frozen=True)
class QueryBuilder:
    """
    Untyped assembler of {api_name, params} that performs the request.

    Attributes:
        client: Client providing token, endpoint and fetcher
        api_name: Remote endpoint name, e.g. "stock_basic"
        param_map: Parameter name -> wire value, read-only
        field_names: Selected output columns; None means all
    """

    client: QueryTarget = field(repr=False, compare=False)
    api_name: str
    param_map: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    field_names: tuple[str, ...] | None = None

    def params(
        self,
        mapping: Mapping[str, ParamValue | None] | None = None,
        /,
        **kwargs: ParamValue | None,
    ) -> Self:
        """Merge parameters into a new builder.

        Incoming keys win over existing ones. A ``None`` value unsets the key
        so it is omitted from the request. Non-string values are rendered
        with ``to_param_str``.
        """
        merged = dict(self.param_map)
        for key, value in {**(mapping or {}), **kwargs}.items():
            if not isinstance(key, str):
                raise TypeError(f"Parameter names must be str, got {key!r}")
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = to_param_str(value)
        return replace(self, param_map=MappingProxyType(merged))

    def fields(self, names: str | Sequence[str] | None) -> Self:
        """Select output columns, as a comma string or a sequence."""
        return replace(self, field_names=normalize_fields(names))

    def payload(self) -> dict:
        """Request body in the shape the tushare service expects."""
        return {
            "api_name": self.api_name,
            "token": self.client.token,
            "params": dict(self.param_map),
            "fields": ",".join(self.field_names or ()),
        }

    def query(self) -> pl.DataFrame:
        """Run the query: one POST, no retry.

        Raises:
            TransportError: the service could not be reached
            ServiceError: the service reported a failure
            ParseError: the response table could not be decoded
        """
        log.info(f"Querying {self.api_name} with params {sorted(self.param_map)}")
        raw = self.client.fetcher.fetch(self.client.endpoint, self.payload())
        return self._build(raw)

    async def aquery(self) -> pl.DataFrame:
        """Awaitable ``query``."""
        log.info(f"Querying {self.api_name} with params {sorted(self.param_map)}")
        raw = await self.client.fetcher.afetch(self.client.endpoint, self.payload())
        return self._build(raw)

    def _build(self, raw: dict) -> pl.DataFrame:
        parser = TushareParser(self.api_name)
        df = parser.clean(parser.parse(raw))
        log.debug(f"{self.api_name} returned {df.height} rows, columns: {df.columns}")
        return df
