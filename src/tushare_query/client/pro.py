"""tushare pro wire components.

Architecture:
- TushareFetcher: POSTs a query payload and decodes the HTTP response to JSON
- TushareParser: checks the {code, msg, data} envelope and builds the table

Both translate low-level failures into the typed errors of
``tushare_query.client.errors`` so callers only ever see
TransportError / ServiceError / ParseError.

Wire format:
    request:  {"api_name": "stock_basic", "token": "...",
               "params": {"list_status": "L"}, "fields": "ts_code,name"}
    response: {"code": 0, "msg": "",
               "data": {"fields": ["ts_code", "name"],
                        "items": [["000001.SZ", "平安银行"]],
                        "has_more": false}}
"""

import httpx
import polars as pl

from tushare_query.client.errors import ParseError, ServiceError, TransportError
from tushare_query.client.traits import BaseFetcher, BaseParser
from tushare_query.config.logger import log


class TushareFetcher(BaseFetcher):
    """tushare-specific Fetcher - extends BaseFetcher with error translation."""

    def fetch(self, url: str, payload: dict) -> dict:
        """POST ``payload`` and return the decoded JSON body."""
        api_name = payload.get("api_name", "")
        try:
            response = self.post(url, payload)
        except httpx.RequestError as e:
            log.error(f"[{api_name}] request to {url} failed: {e!r}")
            raise TransportError(api_name, str(e) or type(e).__name__) from e
        return self._decode(api_name, response)

    async def afetch(self, url: str, payload: dict) -> dict:
        """Awaitable ``fetch``."""
        api_name = payload.get("api_name", "")
        try:
            response = await self.apost(url, payload)
        except httpx.RequestError as e:
            log.error(f"[{api_name}] request to {url} failed: {e!r}")
            raise TransportError(api_name, str(e) or type(e).__name__) from e
        return self._decode(api_name, response)

    @staticmethod
    def _decode(api_name: str, response: httpx.Response) -> dict:
        if response.is_error:
            msg = response.text.strip() or response.reason_phrase
            log.error(f"[{api_name}] HTTP {response.status_code}: {msg}")
            raise ServiceError(api_name, response.status_code, msg)

        try:
            raw = response.json()
        except ValueError as e:
            raise ParseError(api_name, f"response body is not JSON: {e}") from e

        if not isinstance(raw, dict):
            raise ParseError(api_name, f"expected a JSON object, got {type(raw).__name__}")
        return raw


class TushareParser(BaseParser):
    """tushare-specific Parser - extends BaseParser.

    DATA_PATH configured for the ``data`` table of the tushare envelope.
    """

    DATA_PATH = ("data",)

    def __init__(self, api_name: str):
        self.api_name = api_name

    def parse(self, raw: dict) -> dict:
        """Check the envelope and return the table object.

        Raises:
            ServiceError: ``code`` is non-zero; ``msg`` is kept verbatim
            ParseError: envelope or table object missing
        """
        if "code" not in raw:
            raise ParseError(self.api_name, "response has no `code` field")

        code = raw["code"]
        if code != 0:
            msg = raw.get("msg") or ""
            log.error(f"[{self.api_name}] service error {code}: {msg}")
            raise ServiceError(self.api_name, code, str(msg))

        try:
            data = super().parse(raw)
        except ValueError as e:
            raise ParseError(self.api_name, str(e)) from e

        if data.get("has_more"):
            log.warning(
                f"[{self.api_name}] response truncated by the service (has_more=true)"
            )
        return data

    def clean(self, data: dict) -> pl.DataFrame:
        """Build the result table; any malformation becomes a ParseError."""
        try:
            return super().clean(data)
        except (ValueError, TypeError, pl.exceptions.PolarsError) as e:
            raise ParseError(self.api_name, f"malformed table: {e}") from e
