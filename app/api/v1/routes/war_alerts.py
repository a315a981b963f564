import json
from typing import Any, Dict, List, Union

from fastapi import APIRouter, Body, HTTPException, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import PublishReport
from infrastructure.services.dependencies import ApiSecretDep, AppContextDep
from integrations.pnw.parsing import parse_war
from modules.war_alerts.exceptions import ParseError
from modules.war_alerts.models import ConflictEvent

logger = get_module_logger()
router = APIRouter(tags=["War Alerts"])
limiter = get_limiter()


def decode_body(payload: Union[Dict[Any, Any], str]) -> Dict[Any, Any]:
    """Accept a JSON object or a JSON-encoded string body."""
    if isinstance(payload, dict):
        return payload
    try:
        decoded = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error("payload_validation_error", error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not isinstance(decoded, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    return decoded


def report_response(report: PublishReport) -> Dict[str, Any]:
    return {
        "success": True,
        "published": report.published_count,
        "total": report.total_count,
        "results": [
            r.model_dump(mode="json", exclude={"target"}) for r in report.results
        ],
    }


@router.post("/war-alerts/publish")
@limiter.limit("30/minute")
async def publish_war_alerts(
    request: Request,  # pylint: disable=unused-argument
    context: AppContextDep,
    _auth: ApiSecretDep,
    payload: Union[Dict[Any, Any], str] = Body(...),
):
    """Publish war alerts for raw war payloads.

    Body: ``{"events": [<war>, ...]}`` with wars in the GraphQL or
    subscription shape. Wars are parsed before anything is sent, so a
    malformed war rejects the whole request with 400.

    Returns:
        dict: success flag, published and total counts, and per-target results.
    """
    body = decode_body(payload)
    raw_events = body.get("events")
    if not isinstance(raw_events, list):
        raise HTTPException(status_code=400, detail="'events' must be a list")

    events: List[ConflictEvent] = []
    for index, raw in enumerate(raw_events):
        try:
            events.append(parse_war(raw))
        except ParseError as e:
            logger.warning("war_alert_publish_rejected", index=index, error=str(e))
            raise HTTPException(
                status_code=400, detail=f"events[{index}]: {e}"
            ) from e

    report = await context.pipeline.handle_batch(events, source="api")
    logger.info(
        "war_alerts_published",
        events=len(events),
        published=report.published_count,
        total=report.total_count,
    )
    return report_response(report)
