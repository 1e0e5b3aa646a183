from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from horder.api.utils import get_repository, parse_day
from horder.core.security import get_session_context
from horder.domain.accounting.reports import OrderStats, TimeWindow, build_dashboard, compute_stats
from horder.persistence.repositories import SqlRepository

router = APIRouter(tags=["reports"], dependencies=[Depends(get_session_context)])


def _window(window: str, start: str | None, end: str | None) -> TimeWindow:
    try:
        return TimeWindow(
            kind=window,
            start=parse_day(start) if start else None,
            end=parse_day(end) if end else None,
        )
    except (ValidationError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _stats_view(stats: OrderStats) -> dict:
    return {"revenue": stats.revenue, "profit": stats.profit, "order_count": stats.order_count}


@router.get("/reports/stats")
def get_stats(
    window: str = Query(default="month", description="today | week | month | all | custom"),
    start: str | None = Query(default=None, description="YYYY-MM-DD, custom window only"),
    end: str | None = Query(default=None, description="YYYY-MM-DD, custom window only"),
    repo: SqlRepository = Depends(get_repository),
):
    time_window = _window(window, start, end)
    stats = compute_stats(repo.list_orders(), time_window)
    return {"window": time_window.kind, "label": time_window.label, "stats": _stats_view(stats)}


@router.get("/reports/dashboard")
def get_dashboard(
    window: str = Query(default="month"),
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    repo: SqlRepository = Depends(get_repository),
):
    dashboard = build_dashboard(repo.list_orders(), _window(window, start, end))
    return {
        "window": dashboard.window.kind,
        "label": dashboard.window.label,
        "stats": _stats_view(dashboard.stats),
        "recent_orders": [o.model_dump(mode="json") for o in dashboard.recent_orders],
    }
