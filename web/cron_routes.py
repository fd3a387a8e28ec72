"""
Cron Routes - Scheduled Jobs

Called by the platform scheduler with "Authorization: Bearer $CRON_SECRET".

Routes:
- GET /cron/daily-matches - Email investors their best new listing
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.notifications import NotificationService
from web.dependencies import get_notifier, require_cron


router = APIRouter(prefix="/cron", tags=["cron"])


@router.get("/daily-matches", dependencies=[Depends(require_cron)])
def daily_matches(notifier: NotificationService = Depends(get_notifier)):
    """Score the last 24 hours of listings and send the match emails."""
    counts = notifier.send_daily_matches()
    return {"success": True, **counts}
