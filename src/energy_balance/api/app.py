"""FastAPI application factory."""

import logging
import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from energy_balance.api.payloads import (
    calorie_balance_payload,
    macros_payload,
    weekly_deficit_payload,
)
from energy_balance.api.security import require_api_key
from energy_balance.app_logging import configure_logging
from energy_balance.config import requires_api_key
from energy_balance.containers import AppContainer
from energy_balance.domain.errors import (
    CronoCommandError,
    InvalidRequestError,
    NoExportDataError,
    UnreconciledDaysError,
)
from energy_balance.services.fields import parse_number

APP_VERSION = "0.1.0"
DEFAULT_DAYS = 7
MAX_DAYS = 365
TRUE_VALUES = {"1", "true", "yes", "on"}

ENDPOINTS: dict[str, list[str]] = {
    "read": [
        "GET /api/v1/diary?date=YYYY-MM-DD|range=7d",
        "GET /api/v1/weight?date=YYYY-MM-DD|range=7d",
        "GET /api/v1/export/{nutrition|exercises|biometrics}"
        "?date=YYYY-MM-DD|range=7d&csv=true",
        "GET /api/v1/summary/today-macros?date=YYYY-MM-DD",
        "GET /api/v1/summary/calorie-balance?days=7&target_kcal=2400",
        "GET /api/v1/summary/weekly-average-deficit?days=7&scrape=true",
    ],
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "energy-balance-api started (require_api_key=%s, scrape=%s)",
            requires_api_key(container.settings),
            container.scraper is not None,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(UnreconciledDaysError)
    async def unreconciled_handler(
        request: Request, exc: UnreconciledDaysError
    ) -> JSONResponse:
        logger.warning("Unreconciled days for %s: %s", request.url.path, exc.dates)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": str(exc),
                "details": {"dates": exc.dates, "diagnostics": exc.diagnostics},
            },
        )

    @app.exception_handler(CronoCommandError)
    async def crono_handler(request: Request, exc: CronoCommandError) -> JSONResponse:
        logger.error("Export command failed for %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "details": exc.details},
        )

    @app.exception_handler(NoExportDataError)
    async def no_data_handler(request: Request, exc: NoExportDataError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)}
        )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(
        request: Request, exc: InvalidRequestError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
        )

    @app.get("/health")
    async def health(request: Request) -> dict[str, object]:
        """Simple health check endpoint."""
        state_container: AppContainer = request.app.state.container
        return {
            "status": "ok",
            "wrapperVersion": APP_VERSION,
            "cronoVersion": state_container.records_service.crono_version(),
            "requireApiKey": requires_api_key(state_container.settings),
        }

    @app.get("/api/v1/endpoints", dependencies=[Depends(require_api_key)])
    async def endpoints() -> dict[str, list[str]]:
        """List the available read endpoints."""
        return ENDPOINTS

    @app.get("/api/v1/diary", dependencies=[Depends(require_api_key)])
    async def diary(
        request: Request,
        date: str | None = None,
        range: str | None = None,  # noqa: A002
    ) -> dict[str, object]:
        """Return diary entries for a date or range."""
        state_container: AppContainer = request.app.state.container
        data = await state_container.records_service.diary(
            _clean(date), _clean(range)
        )
        return {"data": data}

    @app.get("/api/v1/weight", dependencies=[Depends(require_api_key)])
    async def weight(
        request: Request,
        date: str | None = None,
        range: str | None = None,  # noqa: A002
    ) -> dict[str, object]:
        """Return weight entries for a date or range."""
        state_container: AppContainer = request.app.state.container
        data = await state_container.records_service.weight(
            _clean(date), _clean(range)
        )
        return {"data": data}

    @app.get(
        "/api/v1/export/{export_type}",
        dependencies=[Depends(require_api_key)],
        response_model=None,
    )
    async def export(
        request: Request,
        export_type: str,
        date: str | None = None,
        range: str | None = None,  # noqa: A002
        csv: str | None = None,
    ) -> Response | dict[str, object]:
        """Return an export as JSON, or as CSV text with ``csv=true``."""
        state_container: AppContainer = request.app.state.container
        as_csv = _to_bool(csv)
        data = await state_container.records_service.export(
            export_type, date=_clean(date), range_expr=_clean(range), csv=as_csv
        )
        if as_csv:
            return PlainTextResponse(str(data), media_type="text/csv")
        return {"data": data}

    @app.get(
        "/api/v1/summary/today-macros", dependencies=[Depends(require_api_key)]
    )
    async def today_macros(request: Request, date: str | None = None) -> dict[str, object]:
        """Return calories and macros for one day."""
        state_container: AppContainer = request.app.state.container
        macros = await state_container.energy_service.today_macros(_clean(date))
        return macros_payload(macros)

    @app.get(
        "/api/v1/summary/calorie-balance", dependencies=[Depends(require_api_key)]
    )
    async def calorie_balance(
        request: Request,
        days: str | None = None,
        range: str | None = None,  # noqa: A002
        target_kcal: str | None = None,
    ) -> dict[str, object]:
        """Return intake versus target per day."""
        state_container: AppContainer = request.app.state.container
        resolved_days = _validate_days(days)
        range_expr, explicit_target, summary = (
            await state_container.energy_service.calorie_balance(
                resolved_days, _clean(range), parse_number(target_kcal)
            )
        )
        return calorie_balance_payload(range_expr, explicit_target, summary)

    @app.get(
        "/api/v1/summary/weekly-average-deficit",
        dependencies=[Depends(require_api_key)],
    )
    async def weekly_average_deficit(
        request: Request,
        days: str | None = None,
        range: str | None = None,  # noqa: A002
        scrape: bool = True,
    ) -> dict[str, object]:
        """Return the average daily net calories over completed days."""
        state_container: AppContainer = request.app.state.container
        resolved_days = _validate_days(days)
        report = await state_container.energy_service.weekly_average_deficit(
            resolved_days, _clean(range), use_scrape=scrape
        )
        return weekly_deficit_payload(report)

    return app


def _validate_days(raw: str | None) -> int:
    """Unparseable input falls back to the default window."""
    parsed = parse_number(raw)
    days = DEFAULT_DAYS if parsed is None else math.trunc(parsed)
    if days <= 0 or days > MAX_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="days must be between 1 and 365",
        )
    return days


def _clean(raw: str | None) -> str | None:
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _to_bool(raw: str | None) -> bool:
    return raw is not None and raw.strip().lower() in TRUE_VALUES
