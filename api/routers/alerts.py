"""
Alerts router - alert history, delivery stats, test alerts and queued notifications.
"""
import logging
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from schemas import AlertResponse, AlertStatsResponse, NotificationResponse
from services import AlertCheckService, AlertHistoryService
from core.dependencies import get_alert_check_service, get_alert_history_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/users/{user_id}",
    tags=["Alerts"],
)


@router.get(
    "/alerts",
    response_model=List[AlertResponse],
    summary="Alert history",
    description="Every emergency email attempted for the user, newest first."
)
async def list_alerts(
    user_id: int,
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum number of alerts (1-1000)", examples=[20]),
    history_service: AlertHistoryService = Depends(get_alert_history_service)
):
    return [AlertResponse(**a.to_dict()) for a in history_service.get_alerts(user_id, limit=limit)]


@router.get(
    "/alerts/stats",
    response_model=AlertStatsResponse,
    summary="Alert delivery stats",
    description="Total, sent and failed alert counts, plus the delivery rate as a whole percentage."
)
async def alert_stats(
    user_id: int,
    history_service: AlertHistoryService = Depends(get_alert_history_service)
):
    return AlertStatsResponse(**history_service.get_stats(user_id))


@router.post(
    "/alerts/test",
    response_model=AlertResponse,
    status_code=201,
    summary="Send a test alert",
    description="Email a system-check message to every emergency contact and record it in the alert history. "
                "A relay failure is recorded as a failed alert, not returned as an error."
)
async def send_test_alert(
    user_id: int,
    check_service: AlertCheckService = Depends(get_alert_check_service)
):
    """
    Raises:
    - 400 Bad Request: If the user has no emergency contacts
    - 404 Not Found: If the user doesn't exist
    """
    record = await check_service.send_test_alert(user_id)
    return AlertResponse(**record.to_dict())


@router.get(
    "/notifications",
    response_model=List[NotificationResponse],
    summary="Queued local notifications"
)
async def list_notifications(
    user_id: int,
    history_service: AlertHistoryService = Depends(get_alert_history_service)
):
    return [NotificationResponse(**n) for n in history_service.get_notifications(user_id)]
