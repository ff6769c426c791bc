"""Pydantic request models for the Brandguard HTTP API.

Request bodies use camelCase aliases; snake_case names are accepted too.
Guardrail payloads are passed through as snake_case documents and validated
against the tier models by the repository.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from src.compliance.models import ContentType


class ExportFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"


class CampaignGuardrailsCreateRequest(BaseModel):
    campaign_id: str = Field(..., alias="campaignId", min_length=1)
    brand_id: str = Field(..., alias="brandId", min_length=1)
    guardrails: Dict[str, Any] = Field(default_factory=dict, description="Campaign guardrail fields")
    updated_by: Optional[str] = Field(None, alias="updatedBy")

    model_config = {"populate_by_name": True}


class AssetGuardrailsCreateRequest(BaseModel):
    asset_id: str = Field(..., alias="assetId", min_length=1)
    brand_id: str = Field(..., alias="brandId", min_length=1)
    campaign_id: Optional[str] = Field(None, alias="campaignId")
    asset_type: str = Field(..., alias="assetType", min_length=1)
    guardrails: Dict[str, Any] = Field(default_factory=dict, description="Asset guardrail fields")
    updated_by: Optional[str] = Field(None, alias="updatedBy")

    model_config = {"populate_by_name": True}


class GuardrailsUpdateRequest(BaseModel):
    guardrails: Dict[str, Any] = Field(..., description="Fields to change")
    updated_by: Optional[str] = Field(None, alias="updatedBy")

    model_config = {"populate_by_name": True}


class ReviewRequest(BaseModel):
    reviewed_by: Optional[str] = Field(None, alias="reviewedBy")

    model_config = {"populate_by_name": True}


class ComplianceCheckRequest(BaseModel):
    """Body for POST /compliance/check.

    When both contentId and contentType are given the check is also
    recorded in the compliance history.
    """

    content: str = Field(..., min_length=1)
    brand_id: str = Field(..., alias="brandId", min_length=1)
    campaign_id: Optional[str] = Field(None, alias="campaignId")
    asset_id: Optional[str] = Field(None, alias="assetId")
    asset_type: Optional[str] = Field(None, alias="assetType")
    content_id: Optional[str] = Field(None, alias="contentId")
    content_type: Optional[ContentType] = Field(None, alias="contentType")
    checked_by: Optional[str] = Field(None, alias="checkedBy")

    model_config = {"populate_by_name": True}


class PredictionRequest(BaseModel):
    content: str = Field(..., min_length=1)
    brand_id: str = Field(..., alias="brandId", min_length=1)
    content_type: ContentType = Field(..., alias="contentType")
    content_id: str = Field(..., alias="contentId")
    audience: Optional[str] = None
    market: Optional[str] = None
    channel: Optional[str] = None
    asset_type: Optional[str] = Field(None, alias="assetType")
    ephemeral: bool = False
    compliance_score: Optional[float] = Field(None, alias="complianceScore", ge=0, le=100)

    model_config = {"populate_by_name": True}
