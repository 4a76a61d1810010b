"""
Readings router - vital reading endpoints.

Logging a reading is the entry point of the alert pipeline:

    POST /api/v1/users/{id}/readings
        → VitalsService.log_reading()
            → SettingsService (snapshot) → ReadingRepository.save()
            → evaluate() → AlertDispatcher.dispatch()
            → AlertRepository.record()

The response always succeeds once the reading is stored; what happened to the
alert is reported in the ``dispatch`` field, never as an HTTP error.
"""
import logging
from fastapi import APIRouter, Depends, Query
from typing import List, Literal, Optional

from schemas import ReadingCreate, ReadingResponse, ReadingLogResponse, PurgeResponse
from services import VitalsService
from core.dependencies import get_vitals_service
from core.middleware import get_metrics_collector

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["Readings"],
)


@router.post(
    "/users/{user_id}/readings",
    response_model=ReadingLogResponse,
    status_code=201,
    summary="Log a vital reading",
    description="Store a blood pressure or blood sugar reading, evaluate it against the user's "
                "thresholds and alert the emergency contacts when it is out of range."
)
async def log_reading(
    user_id: int,
    reading: ReadingCreate,
    vitals_service: VitalsService = Depends(get_vitals_service)
):
    """
    Log a reading.

    - **kind**: `bp` or `sugar`
    - **systolic** / **diastolic**: required for `bp`
    - **level** / **reading_context** (`fasting` or `after_meal`): required for `sugar`

    Raises:
    - 404 Not Found: If the user doesn't exist
    - 400 Bad Request: If the reading is invalid
    """
    measurement = reading.to_measurement(user_id)
    result = await vitals_service.log_reading(measurement)
    get_metrics_collector().record_dispatch(result.outcome)
    return ReadingLogResponse.from_result(result)


@router.get(
    "/users/{user_id}/readings",
    response_model=List[ReadingResponse],
    summary="List readings",
    description="Retrieve a user's readings, newest first, optionally filtered by kind."
)
async def list_readings(
    user_id: int,
    kind: Optional[Literal["bp", "sugar"]] = Query(None, description="Filter by vital kind", examples=["bp"]),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum number of readings (1-1000)", examples=[10]),
    vitals_service: VitalsService = Depends(get_vitals_service)
):
    readings = vitals_service.get_readings(user_id, kind=kind, limit=limit)
    return [ReadingResponse.from_measurement(r) for r in readings]


@router.delete(
    "/readings/{reading_id}",
    status_code=204,
    summary="Delete a reading",
    description="Delete a single reading. Returns 404 if it does not exist."
)
async def delete_reading(
    reading_id: str,
    vitals_service: VitalsService = Depends(get_vitals_service)
):
    vitals_service.delete_reading(reading_id)


@router.post(
    "/readings/purge",
    response_model=PurgeResponse,
    summary="Run the retention sweep",
    description="Delete every reading older than the configured retention window."
)
async def purge_readings(
    vitals_service: VitalsService = Depends(get_vitals_service)
):
    deleted = vitals_service.purge_expired_readings()
    return PurgeResponse(deleted=deleted, retention_days=vitals_service.retention_days)
