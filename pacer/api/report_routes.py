"""PACER — Report API Routes."""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from pacer.database import get_session
from pacer.analyzer.pipeline import (
    aggregate_client_period,
    build_client_report,
    build_monthly_rows,
    resolve_dates,
)
from pacer.connectors.snapshot_store import SnapshotStore
from pacer.core.errors import InvalidArgument
from pacer.core.platform_registry import Platform
from pacer.models.report_models import (
    AggregatedMetrics,
    ClientReport,
    MonthlyReport,
    PeriodSpec,
)
from pacer.core.logging import get_logger, log_timing

logger = get_logger("api.reports")

router = APIRouter(prefix="/clients/{client_id}", tags=["Reports"])


# ── Request Models ──


class AggregateRequest(BaseModel):
    """Request body for POST /clients/{client_id}/aggregate."""

    start_date: dt.date
    end_date: dt.date
    platforms: Optional[List[Platform]] = None
    """Defaults to every platform."""
    spec: PeriodSpec = PeriodSpec()

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "start_date": "2025-01-01",
                    "end_date": "2025-01-31",
                    "platforms": ["facebook_ads", "woocommerce"],
                    "spec": {
                        "sum_fields": ["total_revenue", "facebook_ads.spend"],
                        "ratios": ["roas", "ctr"],
                        "today": "2025-01-31",
                    },
                }
            ]
        }
    }


# ── Endpoints ──


@router.get("/report", response_model=ClientReport)
def get_report(
    client_id: str,
    date_range: Optional[str] = Query(None, description="7d | 30d | 90d"),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    session: Session = Depends(get_session),
):
    """Period report: commerce, Facebook Ads, analytics and email blocks."""
    start, end = resolve_dates(date_range, start_date, end_date)
    try:
        with log_timing(logger, "report", client_id):
            return build_client_report(SnapshotStore(session), client_id, start, end)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Report failed: {e}", extra={"client_id": client_id})
        raise HTTPException(status_code=500, detail=f"Report failed: {str(e)}")


@router.get("/monthly-report", response_model=MonthlyReport)
def get_monthly_report(
    client_id: str,
    month: str = Query(..., description="YYYY-MM"),
    session: Session = Depends(get_session),
):
    """One zero-filled row per calendar day of the month."""
    try:
        with log_timing(logger, "monthly-report", client_id):
            return build_monthly_rows(SnapshotStore(session), client_id, month)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Monthly report failed: {e}", extra={"client_id": client_id})
        raise HTTPException(
            status_code=500, detail=f"Monthly report failed: {str(e)}"
        )


@router.post("/aggregate", response_model=AggregatedMetrics)
def aggregate(
    client_id: str,
    request: AggregateRequest,
    session: Session = Depends(get_session),
):
    """Custom sums, averages and ratios over a date window."""
    try:
        with log_timing(logger, "aggregate", client_id):
            return aggregate_client_period(
                SnapshotStore(session),
                client_id,
                request.start_date,
                request.end_date,
                request.platforms,
                request.spec,
            )
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Aggregation failed: {e}", extra={"client_id": client_id})
        raise HTTPException(status_code=500, detail=f"Aggregation failed: {str(e)}")
