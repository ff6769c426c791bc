"""Firestore repository for the three guardrail tiers.

Handles:
- Reading brand, campaign and asset guardrails by their business key
- Creating and updating campaign/asset overlays
- Marking brand guardrails as reviewed
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.common.config import FirestoreConfig
from src.common.firestore import (
    FirestoreError,
    asset_guardrails_collection,
    brand_guardrails_collection,
    campaign_guardrails_collection,
    get_firestore_client,
)
from src.common.logging import get_logger, log_audit
from src.guardrails.merger import MissingBrandGuardrailsError
from src.guardrails.models import AssetGuardrails, BrandGuardrails, CampaignGuardrails

logger = get_logger(__name__)

FirestoreRepositoryError = FirestoreError

# Server-managed fields a client payload may not set.
PROTECTED_FIELDS = ("id", "created_at", "updated_at")


class GuardrailsNotFoundError(FirestoreRepositoryError):
    """Raised when updating a campaign or asset overlay that does not exist."""


class GuardrailsConflictError(FirestoreRepositoryError):
    """Raised when creating an overlay for a campaign or asset that already has one."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _strip_protected(payload: Dict[str, Any], *extra: str) -> Dict[str, Any]:
    blocked = set(PROTECTED_FIELDS) | set(extra)
    return {key: value for key, value in payload.items() if key not in blocked}


class GuardrailsRepository:
    """Repository for guardrail tier Firestore operations."""

    def __init__(self, config: FirestoreConfig):
        self.config = config
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = get_firestore_client(self.config)
        return self._client

    @property
    def brand_collection_name(self) -> str:
        return brand_guardrails_collection(self.config.collection_prefix)

    @property
    def campaign_collection_name(self) -> str:
        return campaign_guardrails_collection(self.config.collection_prefix)

    @property
    def asset_collection_name(self) -> str:
        return asset_guardrails_collection(self.config.collection_prefix)

    def _read(self, collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
        client = self._get_client()
        snapshot = client.collection(collection_name).document(doc_id).get()
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        data.setdefault("id", snapshot.id)
        return data

    # --- Reads ---

    def get_brand_guardrails(self, brand_id: str) -> Optional[BrandGuardrails]:
        """Get the brand tier, or None when the brand has no guardrails."""
        data = self._read(self.brand_collection_name, brand_id)
        if data is None:
            return None
        data.setdefault("brand_id", brand_id)
        return BrandGuardrails.model_validate(data)

    def get_campaign_guardrails(self, campaign_id: str) -> Optional[CampaignGuardrails]:
        data = self._read(self.campaign_collection_name, campaign_id)
        if data is None:
            return None
        data.setdefault("campaign_id", campaign_id)
        return CampaignGuardrails.model_validate(data)

    def get_asset_guardrails(self, asset_id: str) -> Optional[AssetGuardrails]:
        data = self._read(self.asset_collection_name, asset_id)
        if data is None:
            return None
        data.setdefault("asset_id", asset_id)
        return AssetGuardrails.model_validate(data)

    # --- Writes ---

    def _require_brand(self, brand_id: Optional[str]) -> None:
        if not brand_id or self._read(self.brand_collection_name, brand_id) is None:
            raise MissingBrandGuardrailsError(brand_id)

    def create_campaign_guardrails(
        self, payload: Dict[str, Any], *, actor: Optional[str] = None
    ) -> CampaignGuardrails:
        """Create the campaign overlay described by payload.

        Args:
            payload: Campaign guardrail fields; must include campaign_id and brand_id.
            actor: Optional user id recorded as created_by/updated_by.

        Raises:
            MissingBrandGuardrailsError: If the referenced brand has no guardrails.
            GuardrailsConflictError: If the campaign already has an overlay.
            pydantic.ValidationError: If the payload does not form a valid record.
        """
        data = _strip_protected(payload)
        campaign_id = data.get("campaign_id")
        self._require_brand(data.get("brand_id"))

        client = self._get_client()
        doc_ref = client.collection(self.campaign_collection_name).document(campaign_id)
        if doc_ref.get().exists:
            raise GuardrailsConflictError(f"Campaign guardrails already exist: {campaign_id}")

        now = _now()
        data.update({"id": str(uuid.uuid4()), "created_at": now, "updated_at": now})
        if actor:
            data.setdefault("created_by", actor)
            data.setdefault("updated_by", actor)
        record = CampaignGuardrails.model_validate(data)

        doc_ref.set(record.to_dict())
        log_audit(logger, actor=actor, action="create_campaign_guardrails", target=campaign_id)
        return record

    def update_campaign_guardrails(
        self, campaign_id: str, updates: Dict[str, Any], *, actor: Optional[str] = None
    ) -> CampaignGuardrails:
        """Apply a partial update to an existing campaign overlay.

        Raises:
            GuardrailsNotFoundError: If the campaign has no overlay.
        """
        client = self._get_client()
        doc_ref = client.collection(self.campaign_collection_name).document(campaign_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            raise GuardrailsNotFoundError(f"Campaign guardrails not found: {campaign_id}")

        changes = _strip_protected(updates, "campaign_id", "brand_id")
        changes["updated_at"] = _now()
        if actor:
            changes["updated_by"] = actor

        current = snapshot.to_dict() or {}
        current.setdefault("id", snapshot.id)
        current.setdefault("campaign_id", campaign_id)
        record = CampaignGuardrails.model_validate({**current, **changes})

        doc_ref.update(record.model_dump(mode="json", include=set(changes)))
        log_audit(logger, actor=actor, action="update_campaign_guardrails", target=campaign_id)
        return record

    def create_asset_guardrails(
        self, payload: Dict[str, Any], *, actor: Optional[str] = None
    ) -> AssetGuardrails:
        """Create the asset overlay described by payload.

        Raises:
            MissingBrandGuardrailsError: If the referenced brand has no guardrails.
            GuardrailsConflictError: If the asset already has an overlay.
        """
        data = _strip_protected(payload)
        asset_id = data.get("asset_id")
        self._require_brand(data.get("brand_id"))

        client = self._get_client()
        doc_ref = client.collection(self.asset_collection_name).document(asset_id)
        if doc_ref.get().exists:
            raise GuardrailsConflictError(f"Asset guardrails already exist: {asset_id}")

        now = _now()
        data.update({"id": str(uuid.uuid4()), "created_at": now, "updated_at": now})
        if actor:
            data.setdefault("created_by", actor)
            data.setdefault("updated_by", actor)
        record = AssetGuardrails.model_validate(data)

        doc_ref.set(record.to_dict())
        log_audit(logger, actor=actor, action="create_asset_guardrails", target=asset_id)
        return record

    def update_asset_guardrails(
        self, asset_id: str, updates: Dict[str, Any], *, actor: Optional[str] = None
    ) -> AssetGuardrails:
        """Apply a partial update to an existing asset overlay.

        Raises:
            GuardrailsNotFoundError: If the asset has no overlay.
        """
        client = self._get_client()
        doc_ref = client.collection(self.asset_collection_name).document(asset_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            raise GuardrailsNotFoundError(f"Asset guardrails not found: {asset_id}")

        changes = _strip_protected(updates, "asset_id", "brand_id")
        changes["updated_at"] = _now()
        if actor:
            changes["updated_by"] = actor

        current = snapshot.to_dict() or {}
        current.setdefault("id", snapshot.id)
        current.setdefault("asset_id", asset_id)
        record = AssetGuardrails.model_validate({**current, **changes})

        doc_ref.update(record.model_dump(mode="json", include=set(changes)))
        log_audit(logger, actor=actor, action="update_asset_guardrails", target=asset_id)
        return record

    def mark_brand_reviewed(
        self, brand_id: str, *, reviewed_by: Optional[str] = None
    ) -> BrandGuardrails:
        """Stamp last_reviewed (and last_updated) with the current time.

        Raises:
            MissingBrandGuardrailsError: If the brand has no guardrails.
        """
        client = self._get_client()
        doc_ref = client.collection(self.brand_collection_name).document(brand_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            raise MissingBrandGuardrailsError(brand_id)

        now = _now()
        changes: Dict[str, Any] = {"last_reviewed": now, "last_updated": now}
        if reviewed_by:
            changes["updated_by"] = reviewed_by
        doc_ref.update(changes)

        current = snapshot.to_dict() or {}
        current.setdefault("id", snapshot.id)
        current.setdefault("brand_id", brand_id)
        log_audit(logger, actor=reviewed_by, action="mark_brand_reviewed", target=brand_id)
        return BrandGuardrails.model_validate({**current, **changes})
