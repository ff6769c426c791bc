"""FastAPI router for compliance checks, history and predictions."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_compliance_service, get_prediction_service
from src.api.models import ComplianceCheckRequest, PredictionRequest
from src.common.logging import get_logger, log_error
from src.compliance.compliance_service import ComplianceService
from src.compliance.models import ContentType
from src.guardrails.merger import MissingBrandGuardrailsError
from src.prediction.models import PredictionContext
from src.prediction.prediction_service import InvalidContentIdError, PredictionService

logger = get_logger(__name__)

router = APIRouter(tags=["compliance"])


@router.post(
    "/compliance/check",
    responses={404: {"description": "Brand guardrails not found"}},
)
def check_compliance(
    request: ComplianceCheckRequest,
    service: ComplianceService = Depends(get_compliance_service),
):
    """Score content against brand, campaign and asset guardrails.

    Records a history row when contentId and contentType are provided; a
    failed write is reported under "persist" and does not fail the request.
    """
    record = request.content_id is not None and request.content_type is not None
    try:
        if record:
            outcome = service.check_and_record(
                request.content,
                request.brand_id,
                content_id=request.content_id,
                content_type=request.content_type,
                campaign_id=request.campaign_id,
                asset_id=request.asset_id,
                asset_type=request.asset_type,
                checked_by=request.checked_by,
            )
            return {
                "result": outcome.check.model_dump(mode="json"),
                "historyId": outcome.history.id if outcome.history else None,
                "persist": asdict(outcome.persist),
            }
        check = service.check_enhanced_content_compliance(
            request.content,
            request.brand_id,
            campaign_id=request.campaign_id,
            asset_id=request.asset_id,
            asset_type=request.asset_type,
        )
    except MissingBrandGuardrailsError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:
        log_error(logger, "Compliance check failed", error=exc, brand_id=request.brand_id)
        raise HTTPException(status_code=500, detail="Compliance check failed") from exc

    return {
        "result": check.model_dump(mode="json"),
        "historyId": None,
        "persist": {"attempted": False, "succeeded": False, "error": None},
    }


@router.get("/compliance/history/{contentId}")
def get_compliance_history(
    contentId: str,
    contentType: ContentType = Query(...),
    service: ComplianceService = Depends(get_compliance_service),
):
    """Recorded checks for a content item, newest first."""
    try:
        rows = service.get_compliance_history(contentId, contentType)
    except Exception as exc:
        log_error(logger, "Failed to load compliance history", content_id=contentId, error=exc)
        raise HTTPException(status_code=500, detail="Failed to load compliance history") from exc
    return {"items": [row.to_dict() for row in rows], "count": len(rows)}


@router.post(
    "/predictions",
    responses={422: {"description": "Invalid content id for a persisted prediction"}},
)
def predict_performance(
    request: PredictionRequest,
    service: PredictionService = Depends(get_prediction_service),
):
    context = PredictionContext(
        content_type=request.content_type,
        content_id=request.content_id,
        audience=request.audience,
        market=request.market,
        channel=request.channel,
        asset_type=request.asset_type,
        ephemeral=request.ephemeral,
    )
    try:
        outcome = service.predict_performance(
            request.content,
            request.brand_id,
            context,
            compliance_score=request.compliance_score,
        )
    except InvalidContentIdError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except Exception as exc:
        log_error(logger, "Performance prediction failed", content_id=request.content_id, error=exc)
        raise HTTPException(status_code=500, detail="Performance prediction failed") from exc

    return {"result": outcome.result.model_dump(mode="json"), "persist": asdict(outcome.persist)}
