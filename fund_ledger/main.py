"""
Fund Ledger: FastAPI application.

This is the entry point for the HTTP API.
All routers are registered here.
"""

from fastapi import FastAPI

from fund_ledger.config import get_settings
from fund_ledger.logging_config import configure_logging
from fund_ledger.api.health import router as health_router
from fund_ledger.api.chart import router as chart_router
from fund_ledger.api.transactions import router as transactions_router
from fund_ledger.api.payables import router as payables_router
from fund_ledger.api.assets import router as assets_router
from fund_ledger.api.recurring import router as recurring_router
from fund_ledger.api.reconciliation import router as reconciliation_router
from fund_ledger.api.reports import router as reports_router
from fund_ledger.api.budgets import router as budgets_router

settings = get_settings()
configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry fund accounting for nonprofits",
)

# Register routers
app.include_router(health_router)
app.include_router(chart_router)
app.include_router(transactions_router)
app.include_router(payables_router)
app.include_router(assets_router)
app.include_router(recurring_router)
app.include_router(reconciliation_router)
app.include_router(reports_router)
app.include_router(budgets_router)
