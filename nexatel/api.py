# nexatel/api.py
import random
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from fastapi import FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse

# project imports
from nexatel.analytics import (
    clv_distribution,
    dashboard_stats,
    high_value_customers,
    search_customers,
    segment_breakdown,
    top_customers_by_total,
    trend_series,
)
from nexatel.config import settings
from nexatel.dataio import export_filename, load_roster, parse_csv_report, serialize_csv
from nexatel.errors import AppError, EmptyImportError, to_payload
from nexatel.logger import get_logger
from nexatel.schemas import (
    ChurnPrediction,
    ClvBucket,
    Customer,
    DashboardStats,
    PredictRequest,
    SegmentSummary,
    TrendPoint,
)
from nexatel.scoring import predict_churn

logger = get_logger(__name__)


class RosterStore:
    """Working roster. Imports replace it wholesale; readers get a snapshot."""

    def __init__(self, records=()):
        self._records: Tuple[Customer, ...] = tuple(records)

    def snapshot(self) -> Tuple[Customer, ...]:
        return self._records

    def replace(self, records) -> None:
        self._records = tuple(records)


def _rng() -> random.Random:
    return random.Random(settings.RANDOM_SEED)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.roster = RosterStore(load_roster(settings.ROSTER_PATH, rng=_rng()))
    logger.info("roster loaded", extra={"rows": len(app.state.roster.snapshot())})
    yield


# -----------------------------------------------------------------------------
# FastAPI app
# -----------------------------------------------------------------------------
app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)


@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=to_payload(exc))


def _roster(request: Request, q: Optional[str] = None) -> List[Customer]:
    return search_customers(request.app.state.roster.snapshot(), q)


@app.get("/healthz")
def healthz():
    return {"status": "ok"}

# -----------------------------------------------------------------------------
# Roster: browse + import
# -----------------------------------------------------------------------------
@app.get("/customers", response_model=List[Customer])
def list_customers(request: Request, q: Optional[str] = None):
    """Roster, optionally narrowed by a free-text match on id or segment."""
    return _roster(request, q)


@app.post("/customers/import")
async def import_customers(request: Request):
    """Body is raw CSV text. A successful import replaces the whole roster."""
    text = (await request.body()).decode("utf-8", errors="replace")
    report = parse_csv_report(text, rng=_rng())
    if report.is_empty:
        logger.warning("csv import rejected", extra={"bytes": len(text)})
        raise EmptyImportError()
    request.app.state.roster.replace(report.records)
    logger.info("roster replaced", extra={"rows": len(report.records)})
    return {"imported": len(report.records), "defaulted": report.defaulted, "coerced": report.coerced}

# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------
@app.get("/dashboard/stats", response_model=DashboardStats)
def stats(request: Request, q: Optional[str] = None):
    return dashboard_stats(_roster(request, q))


@app.get("/dashboard/trend", response_model=List[TrendPoint])
def trend(
    request: Request,
    months: int = Query(settings.TREND_MONTHS, ge=1, le=24),
    q: Optional[str] = None,
):
    return trend_series(_roster(request, q), months=months, rng=_rng())


@app.get("/dashboard/top", response_model=List[Customer])
def top_customers(request: Request, limit: int = Query(5, ge=1), q: Optional[str] = None):
    """Highest-billed customers by total charges."""
    return top_customers_by_total(_roster(request, q), limit=limit)


@app.get("/segments", response_model=List[SegmentSummary])
def segments(request: Request, q: Optional[str] = None):
    return segment_breakdown(_roster(request, q))


@app.get("/clv/distribution", response_model=List[ClvBucket])
def clv_buckets(request: Request, q: Optional[str] = None):
    return clv_distribution(_roster(request, q))


@app.get("/clv/top", response_model=List[Customer])
def clv_top(
    request: Request,
    threshold: float = 2500,
    limit: int = Query(6, ge=1),
    q: Optional[str] = None,
):
    return high_value_customers(_roster(request, q), threshold=threshold, limit=limit)

# -----------------------------------------------------------------------------
# Risk prediction
# -----------------------------------------------------------------------------
@app.post("/predict", response_model=ChurnPrediction)
def predict(req: PredictRequest):
    return predict_churn(req.tenure, req.monthly_charges, req.contract_type)

# -----------------------------------------------------------------------------
# Export (download)
# -----------------------------------------------------------------------------
@app.get("/export")
def export(request: Request, q: Optional[str] = None):
    rows = _roster(request, q)
    if not rows:
        return Response(status_code=204)
    filename = export_filename()
    logger.info("csv export served", extra={"rows": len(rows), "export_file": filename})
    return Response(
        content=serialize_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
