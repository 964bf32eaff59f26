from datetime import date, datetime
from typing import TypeAlias

ParamValue: TypeAlias = str | int | float | bool | date | datetime


def to_ymd_str(d: date) -> str:
    """Render a date (or the date part of a datetime) as YYYYMMDD"""
    if isinstance(d, datetime):
        d = d.date()
    return d.strftime("%Y%m%d")


def to_param_str(value: ParamValue) -> str:
    """
    Render a single query parameter the way tushare expects it on the wire.

    Strings pass through untouched (an empty string stays empty), dates
    become YYYYMMDD, booleans become "1"/"0".

    Examples:
        "000001.SZ"          -> "000001.SZ"
        date(2024, 1, 2)     -> "20240102"
        True                 -> "1"
        5000                 -> "5000"
    """
    match value:
        case str():
            return value
        case bool():
            return "1" if value else "0"
        case date():
            return to_ymd_str(value)
        case int() | float():
            return str(value)
        case _:
            raise TypeError(f"Unsupported parameter type: {type(value).__name__}")
