"""Shared Firestore utilities for Brandguard services.

One client factory, the prefixed collection names every repository writes to,
and the PersistOutcome returned by best-effort writes.

Usage:
    from src.common.firestore import get_firestore_client, brand_guardrails_collection

    client = get_firestore_client()
    collection = client.collection(brand_guardrails_collection())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

from src.common.config import FirestoreConfig, load_firestore_config

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient


class FirestoreError(Exception):
    """Base exception for Firestore access errors; repository errors subclass it."""


@dataclass(frozen=True)
class PersistOutcome:
    """Result of a best-effort write that must not fail the caller.

    attempted is False when nothing was meant to be written (e.g. ephemeral
    predictions); error carries the failure message when succeeded is False.
    """

    attempted: bool
    succeeded: bool
    error: Optional[str] = None

    @classmethod
    def skipped(cls) -> "PersistOutcome":
        return cls(attempted=False, succeeded=False)

    @classmethod
    def ok(cls) -> "PersistOutcome":
        return cls(attempted=True, succeeded=True)

    @classmethod
    def failed(cls, error: BaseException) -> "PersistOutcome":
        return cls(attempted=True, succeeded=False, error=str(error))


def get_firestore_client(config: Optional[FirestoreConfig] = None) -> "FirestoreClient":
    """Create a Firestore client for config (loaded from the environment if omitted).

    google-cloud-firestore is imported lazily so modules that only build
    models or score content never need credentials.

    Raises:
        FirestoreError: If the library is missing or the client cannot be created.
    """
    try:
        from google.cloud import firestore
    except ImportError as e:
        raise FirestoreError(
            "google-cloud-firestore not installed. Run: pip install google-cloud-firestore"
        ) from e

    config = config or load_firestore_config()
    kwargs: Dict[str, Any] = {"database": config.database_id}
    if config.project_id:
        kwargs["project"] = config.project_id

    try:
        return firestore.Client(**kwargs)
    except Exception as e:
        raise FirestoreError(
            f"Failed to initialize Firestore client for database {config.database_id!r}: {e}"
        ) from e


def get_collection_prefix(config: Optional[FirestoreConfig] = None) -> str:
    return (config or load_firestore_config()).collection_prefix


def _prefixed(name: str, prefix: Optional[str]) -> str:
    return f"{prefix if prefix is not None else get_collection_prefix()}{name}"


# Guardrail tiers, keyed by their business id (brand_id, campaign_id, asset_id)
def brand_guardrails_collection(prefix: Optional[str] = None) -> str:
    return _prefixed("brand_guardrails", prefix)


def campaign_guardrails_collection(prefix: Optional[str] = None) -> str:
    return _prefixed("campaign_guardrails", prefix)


def asset_guardrails_collection(prefix: Optional[str] = None) -> str:
    return _prefixed("asset_guardrails", prefix)


# Insert-only rows keyed by generated UUIDs
def compliance_history_collection(prefix: Optional[str] = None) -> str:
    return _prefixed("compliance_history", prefix)


def performance_predictions_collection(prefix: Optional[str] = None) -> str:
    return _prefixed("performance_predictions", prefix)


# Read-only analytics fed by downstream reporting jobs
def content_analytics_collection(prefix: Optional[str] = None) -> str:
    return _prefixed("content_analytics", prefix)
