from typing import Any, Dict, Union

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import ValidationError

from api.dependencies.rate_limits import get_limiter
from api.v1.routes.war_alerts import decode_body, report_response
from infrastructure.logging import get_module_logger
from infrastructure.services.dependencies import ApiSecretDep, AppContextDep
from modules.war_alerts.status import SystemStatus

logger = get_module_logger()
router = APIRouter(tags=["Status"])
limiter = get_limiter()


@router.post("/status/publish")
@limiter.limit("10/minute")
async def publish_status(
    request: Request,  # pylint: disable=unused-argument
    context: AppContextDep,
    _auth: ApiSecretDep,
    payload: Union[Dict[Any, Any], str] = Body(...),
):
    """Publish a system status report to an alliance's status channels.

    Body: ``{"allianceId", "systemStatus", "requestedBy"?}``. Channels come
    from the alliance's status configuration, falling back to a channel
    named like status/announcements/updates.

    Raises:
        HTTPException: 400 on missing fields, 404 when no active alliance
            matches.
    """
    body = decode_body(payload)
    alliance_id = body.get("allianceId")
    raw_status = body.get("systemStatus")
    if not alliance_id or not raw_status:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        system_status = SystemStatus.model_validate(raw_status)
    except ValidationError as e:
        logger.warning("status_publish_rejected", error=str(e))
        raise HTTPException(status_code=400, detail="Invalid systemStatus") from e

    report = await context.pipeline.publish_status(
        str(alliance_id), system_status, requested_by=body.get("requestedBy")
    )
    if report is None:
        raise HTTPException(
            status_code=404, detail="No active alliance found for this id"
        )
    return report_response(report)
