"""Dashboard API endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from api.dependencies import get_dashboard_service, get_revalidator, get_session_context
from integrations.appwrite_client import SessionContext
from schemas.dashboard import DashboardResponse
from services.dashboard_service import DashboardService
from services.link_service import ROOT_PATH
from services.revalidation import ViewRevalidator
from utils.query_params import parse_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse, responses={204: {"description": "No linked accounts"}})
def get_dashboard(
    response: Response,
    id: Optional[str] = Query(None, description="Bank record id of the account to show"),
    page: Optional[str] = Query(None, description="1-based page of recent transactions"),
    session: SessionContext = Depends(get_session_context),
    service: DashboardService = Depends(get_dashboard_service),
    revalidator: ViewRevalidator = Depends(get_revalidator),
):
    """Get the home dashboard: greeting, accounts, totals, and recent transactions."""
    dashboard = service.compose(session, account_selector=id or None, page=parse_page(page))
    if dashboard is None:
        return Response(status_code=204)

    response.headers["ETag"] = f'W/"root-{revalidator.version(ROOT_PATH)}"'
    response.headers["Cache-Control"] = "no-cache"
    return dashboard
