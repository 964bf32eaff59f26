"""Smoke test against the live tushare pro service.

Run:
  TUSHARE_TOKEN=xxxx python scripts/smoke_query.py

Prints explicit checkpoints so failures are easy to place (token rejected,
network down, schema changes, etc.).
"""

from __future__ import annotations

import sys
import traceback


def _run_step(name: str, fn) -> None:
    print("\n" + "=" * 80)
    print(f"STEP: {name}")
    print("=" * 80)
    try:
        fn()
        print(f"STEP OK: {name}")
    except Exception as e:  # noqa: BLE001 - intentional in a smoke script
        print(f"STEP FAIL: {name}")
        print(f"ERROR: {type(e).__name__}: {e}")
        traceback.print_exc()


def _show(df) -> None:
    print("rows=", df.height)
    print("cols=", df.columns)
    print(df.head(5))


def main() -> None:
    print("smoke_query: starting")
    print("python:", sys.version)

    from tushare_query.client.tushare import Tushare

    with Tushare.from_env() as ts:
        _run_step(
            "stock_basic (listed, SSE)",
            lambda: _show(
                ts.stock_basic()
                .list_status("L")
                .exchange("SSE")
                .fields("ts_code,name,list_date")
                .query()
            ),
        )

        _run_step(
            "daily (000001.SZ, 2024-01)",
            lambda: _show(
                ts.daily()
                .ts_code("000001.SZ")
                .start_date("20240101")
                .end_date("20240131")
                .query()
            ),
        )

        _run_step(
            "trade_cal via generic builder",
            lambda: _show(
                ts.query_builder("trade_cal")
                .params({"exchange": "SSE", "start_date": "20240101", "end_date": "20240110"})
                .query()
            ),
        )

    print("\nsmoke_query: done")


if __name__ == "__main__":
    main()
