import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Self

import yaml

from tushare_query.client.errors import TushareError
from tushare_query.config.logger import log

TUSHARE_API: Final[str] = "http://api.tushare.pro"
DEFAULT_TIMEOUT: Final[float] = 10.0

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"", "0", "false", "no", "off"})


def _parse_timeout(raw: Any, source: str) -> float:
    if raw is None or raw == "":
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except (TypeError, ValueError) as e:
        raise TushareError(f"Invalid timeout {raw!r} in {source}") from e
    if timeout <= 0:
        raise TushareError(f"Invalid timeout {raw!r} in {source}")
    return timeout


def _parse_flag(raw: Any, source: str) -> bool:
    if raw is None or isinstance(raw, bool):
        return bool(raw)
    flag = str(raw).strip().lower()
    if flag in _TRUTHY:
        return True
    if flag in _FALSY:
        return False
    raise TushareError(f"Invalid boolean {raw!r} in {source}")


@dataclass(frozen=True)
class TushareSettings:
    """Connection settings for the tushare pro API.

    Attributes:
        token: Access token, sent with every request
        endpoint: Base URL all queries are POSTed to
        timeout: Request timeout in seconds
        http2: Negotiate HTTP/2 with the endpoint
    """

    token: str
    endpoint: str = TUSHARE_API
    timeout: float = DEFAULT_TIMEOUT
    http2: bool = False

    @classmethod
    def from_env(cls, var: str = "TUSHARE_TOKEN") -> Self:
        """Build settings from environment variables.

        Reads ``var`` for the token, ``TUSHARE_ENDPOINT``, ``TUSHARE_TIMEOUT``
        and ``TUSHARE_HTTP2`` for the optional overrides.
        """
        token = os.environ.get(var, "").strip()
        if not token:
            raise TushareError(f"Missing tushare token. Set env `{var}`.")

        return cls(
            token=token,
            endpoint=os.environ.get("TUSHARE_ENDPOINT") or TUSHARE_API,
            timeout=_parse_timeout(os.environ.get("TUSHARE_TIMEOUT"), "env `TUSHARE_TIMEOUT`"),
            http2=_parse_flag(os.environ.get("TUSHARE_HTTP2"), "env `TUSHARE_HTTP2`"),
        )

    @classmethod
    def from_yaml(cls, config_path: str | Path = "config.yaml") -> Self:
        """Build settings from the ``tushare`` section of a YAML file.

        Example:
            tushare:
              token: "xxxx"
              endpoint: "http://api.tushare.pro"
              timeout: 15
              http2: true
        """
        with open(config_path) as f:
            conf = yaml.safe_load(f) or {}

        section = conf.get("tushare")
        if not isinstance(section, dict):
            raise TushareError(f"No `tushare` section in {config_path}")

        token = str(section.get("token") or "").strip()
        if not token:
            raise TushareError(f"No tushare token in {config_path}")

        log.info(f"Loading tushare settings from {config_path}")
        return cls(
            token=token,
            endpoint=section.get("endpoint") or TUSHARE_API,
            timeout=_parse_timeout(section.get("timeout"), str(config_path)),
            http2=_parse_flag(section.get("http2"), str(config_path)),
        )
