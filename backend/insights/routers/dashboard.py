# insights/routers/dashboard.py
from fastapi import APIRouter, Depends, Response

from insights.constants import DEFAULT_TIME_FILTER, TIME_FILTERS
from insights.deps import app_store, current_user
from insights.logic import aggregation
from insights.models import User
from insights.services import llm
from insights.services.app_store import AppStore
from insights.services.export import submissions_csv

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
def dashboard(days: int = DEFAULT_TIME_FILTER,
              _: User = Depends(current_user),
              store: AppStore = Depends(app_store)):
    """Per-store NPS averages and recent history for a trailing window."""
    state = store.state
    subset = aggregation.filter_by_window(state.submissions, days)
    return {
        "days": days,
        "timeFilters": TIME_FILTERS,
        "total": len(subset),
        "stats": [s.to_record() for s in aggregation.per_store_stats(subset, state.stores)],
        "history": aggregation.history(subset, state.stores),
    }


@router.get("/export")
def export_csv(days: int = DEFAULT_TIME_FILTER,
               _: User = Depends(current_user),
               store: AppStore = Depends(app_store)):
    state = store.state
    subset = aggregation.filter_by_window(state.submissions, days)
    return Response(
        content=submissions_csv(subset, state.stores, state.surveys),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="feedbacks_{days}d.csv"'},
    )


@router.post("/analyze")
async def analyze(days: int = DEFAULT_TIME_FILTER,
                  _: User = Depends(current_user),
                  store: AppStore = Depends(app_store)):
    state = store.state
    subset = aggregation.filter_by_window(state.submissions, days)
    result = await llm.analyze(subset, state.stores, state.surveys)
    return result.to_record()
