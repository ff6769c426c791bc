"""FastAPI router for guardrail reads and edits.

Implements /guardrails/* endpoints. Reads are open; edits require X-API-Key.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from src.api.auth import verify_api_key
from src.api.dependencies import get_compliance_service, get_guardrails_repository
from src.api.models import (
    AssetGuardrailsCreateRequest,
    CampaignGuardrailsCreateRequest,
    ExportFormat,
    GuardrailsUpdateRequest,
    ReviewRequest,
)
from src.common.logging import get_logger, log_error
from src.compliance.compliance_service import ComplianceService
from src.guardrails.firestore_repository import (
    GuardrailsConflictError,
    GuardrailsNotFoundError,
    GuardrailsRepository,
)
from src.guardrails.merger import MissingBrandGuardrailsError
from src.guardrails.yaml_export import merged_guardrails_to_yaml

logger = get_logger(__name__)

router = APIRouter(prefix="/guardrails", tags=["guardrails"])


def validation_detail(exc: ValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in exc.errors()]


def _write_error(exc: Exception, message: str, target: Optional[str]) -> HTTPException:
    if isinstance(exc, MissingBrandGuardrailsError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, GuardrailsNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, GuardrailsConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=validation_detail(exc))
    log_error(logger, message, error=exc, target=target)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get(
    "/merged",
    responses={404: {"description": "Brand guardrails not found"}},
)
def get_merged_guardrails(
    brandId: str = Query(..., min_length=1),
    campaignId: Optional[str] = Query(None),
    assetId: Optional[str] = Query(None),
    format: ExportFormat = Query(ExportFormat.JSON),
    service: ComplianceService = Depends(get_compliance_service),
):
    """Resolve brand, campaign and asset tiers into effective rules."""
    try:
        merged = service.get_merged_guardrails(brandId, campaignId, assetId)
    except MissingBrandGuardrailsError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:
        log_error(logger, "Failed to merge guardrails", error=exc, brand_id=brandId)
        raise HTTPException(status_code=500, detail="Failed to merge guardrails") from exc

    if format == ExportFormat.YAML:
        return PlainTextResponse(merged_guardrails_to_yaml(merged), media_type="application/x-yaml")
    return merged.model_dump(mode="json")


@router.get("/brands/{brandId}/status")
def get_brand_status(
    brandId: str,
    service: ComplianceService = Depends(get_compliance_service),
):
    """Review staleness of a brand's guardrails."""
    try:
        result = service.get_guardrails_status(brandId)
    except Exception as exc:
        log_error(logger, "Failed to load guardrails status", error=exc, brand_id=brandId)
        raise HTTPException(status_code=500, detail="Failed to load guardrails status") from exc
    return result.model_dump(mode="json")


@router.post(
    "/brands/{brandId}/review",
    responses={401: {"description": "Invalid or missing API key"}, 404: {"description": "Brand not found"}},
)
def mark_brand_reviewed(
    brandId: str,
    request: Optional[ReviewRequest] = None,
    api_key: str = Depends(verify_api_key),
    repository: GuardrailsRepository = Depends(get_guardrails_repository),
):
    reviewed_by = (request.reviewed_by if request else None) or "api"
    try:
        brand = repository.mark_brand_reviewed(brandId, reviewed_by=reviewed_by)
    except Exception as exc:
        raise _write_error(exc, "Failed to mark guardrails reviewed", brandId) from exc
    return brand.to_dict()


@router.post(
    "/campaigns",
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Invalid or missing API key"},
        404: {"description": "Brand guardrails not found"},
        409: {"description": "Campaign guardrails already exist"},
    },
)
def create_campaign_guardrails(
    request: CampaignGuardrailsCreateRequest,
    api_key: str = Depends(verify_api_key),
    repository: GuardrailsRepository = Depends(get_guardrails_repository),
):
    payload = {**request.guardrails, "campaign_id": request.campaign_id, "brand_id": request.brand_id}
    try:
        record = repository.create_campaign_guardrails(payload, actor=request.updated_by or "api")
    except Exception as exc:
        raise _write_error(exc, "Failed to create campaign guardrails", request.campaign_id) from exc
    return record.to_dict()


@router.patch(
    "/campaigns/{campaignId}",
    responses={401: {"description": "Invalid or missing API key"}, 404: {"description": "Not found"}},
)
def update_campaign_guardrails(
    campaignId: str,
    request: GuardrailsUpdateRequest,
    api_key: str = Depends(verify_api_key),
    repository: GuardrailsRepository = Depends(get_guardrails_repository),
):
    try:
        record = repository.update_campaign_guardrails(
            campaignId, request.guardrails, actor=request.updated_by or "api"
        )
    except Exception as exc:
        raise _write_error(exc, "Failed to update campaign guardrails", campaignId) from exc
    return record.to_dict()


@router.post(
    "/assets",
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Invalid or missing API key"},
        404: {"description": "Brand guardrails not found"},
        409: {"description": "Asset guardrails already exist"},
    },
)
def create_asset_guardrails(
    request: AssetGuardrailsCreateRequest,
    api_key: str = Depends(verify_api_key),
    repository: GuardrailsRepository = Depends(get_guardrails_repository),
):
    payload = {
        **request.guardrails,
        "asset_id": request.asset_id,
        "brand_id": request.brand_id,
        "campaign_id": request.campaign_id,
        "asset_type": request.asset_type,
    }
    try:
        record = repository.create_asset_guardrails(payload, actor=request.updated_by or "api")
    except Exception as exc:
        raise _write_error(exc, "Failed to create asset guardrails", request.asset_id) from exc
    return record.to_dict()


@router.patch(
    "/assets/{assetId}",
    responses={401: {"description": "Invalid or missing API key"}, 404: {"description": "Not found"}},
)
def update_asset_guardrails(
    assetId: str,
    request: GuardrailsUpdateRequest,
    api_key: str = Depends(verify_api_key),
    repository: GuardrailsRepository = Depends(get_guardrails_repository),
):
    try:
        record = repository.update_asset_guardrails(assetId, request.guardrails, actor=request.updated_by or "api")
    except Exception as exc:
        raise _write_error(exc, "Failed to update asset guardrails", assetId) from exc
    return record.to_dict()
