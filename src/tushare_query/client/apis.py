"""Declared tushare endpoints.

One ``define_api`` entry per endpoint: name, documentation page, accepted
parameters. Adding an endpoint means adding one entry here.
"""

from typing import Final

from tushare_query.client.schema import define_api

DOC_BASE: Final[str] = "https://tushare.pro/document/2?doc_id="

# =============================================================================
# Basic data
# =============================================================================

StockBasicQueryBuilder = define_api(
    "stock_basic",
    f"{DOC_BASE}25",
    "ts_code",
    "name",
    "market",
    "list_status",
    "exchange",
    "is_hs",
)

TradeCalQueryBuilder = define_api(
    "trade_cal",
    f"{DOC_BASE}26",
    "exchange",
    "start_date",
    "end_date",
    "is_open",
)

NamechangeQueryBuilder = define_api(
    "namechange",
    f"{DOC_BASE}100",
    "ts_code",
    "start_date",
    "end_date",
)

HsConstQueryBuilder = define_api(
    "hs_const",
    f"{DOC_BASE}104",
    "hs_type",
    "is_new",
)

StockCompanyQueryBuilder = define_api(
    "stock_company",
    f"{DOC_BASE}112",
    "ts_code",
    "exchange",
)

NewShareQueryBuilder = define_api(
    "new_share",
    f"{DOC_BASE}123",
    "start_date",
    "end_date",
)

# =============================================================================
# Market data
# =============================================================================

# daily / weekly / monthly bars share one vocabulary
_BAR_PARAMS = ("ts_code", "trade_date", "start_date", "end_date")

DailyQueryBuilder = define_api("daily", f"{DOC_BASE}27", *_BAR_PARAMS)
WeeklyQueryBuilder = define_api("weekly", f"{DOC_BASE}144", *_BAR_PARAMS)
MonthlyQueryBuilder = define_api("monthly", f"{DOC_BASE}145", *_BAR_PARAMS)
AdjFactorQueryBuilder = define_api("adj_factor", f"{DOC_BASE}28", *_BAR_PARAMS)
DailyBasicQueryBuilder = define_api("daily_basic", f"{DOC_BASE}32", *_BAR_PARAMS)
MoneyflowQueryBuilder = define_api("moneyflow", f"{DOC_BASE}170", *_BAR_PARAMS)
StkLimitQueryBuilder = define_api("stk_limit", f"{DOC_BASE}183", *_BAR_PARAMS)

SuspendDQueryBuilder = define_api(
    "suspend_d",
    f"{DOC_BASE}214",
    *_BAR_PARAMS,
    "suspend_type",
)

# =============================================================================
# Index
# =============================================================================

IndexBasicQueryBuilder = define_api(
    "index_basic",
    f"{DOC_BASE}94",
    "ts_code",
    "name",
    "market",
    "publisher",
    "category",
)

IndexDailyQueryBuilder = define_api("index_daily", f"{DOC_BASE}95", *_BAR_PARAMS)

# =============================================================================
# Financial statements
# =============================================================================

IncomeQueryBuilder = define_api(
    "income",
    f"{DOC_BASE}33",
    "ts_code",
    "ann_date",
    "f_ann_date",
    "start_date",
    "end_date",
    "period",
    "report_type",
    "comp_type",
)

BalancesheetQueryBuilder = define_api(
    "balancesheet",
    f"{DOC_BASE}36",
    "ts_code",
    "ann_date",
    "start_date",
    "end_date",
    "period",
    "report_type",
    "comp_type",
)

CashflowQueryBuilder = define_api(
    "cashflow",
    f"{DOC_BASE}44",
    "ts_code",
    "ann_date",
    "f_ann_date",
    "start_date",
    "end_date",
    "period",
    "report_type",
    "comp_type",
    "is_calc",
)

FinaIndicatorQueryBuilder = define_api(
    "fina_indicator",
    f"{DOC_BASE}79",
    "ts_code",
    "ann_date",
    "start_date",
    "end_date",
    "period",
)

# =============================================================================
# Macro
# =============================================================================

ShiborQueryBuilder = define_api(
    "shibor",
    f"{DOC_BASE}149",
    "date",
    "start_date",
    "end_date",
)

MoneyflowHsgtQueryBuilder = define_api(
    "moneyflow_hsgt",
    f"{DOC_BASE}47",
    "trade_date",
    "start_date",
    "end_date",
)
