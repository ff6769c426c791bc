"""Firestore repository for compliance history rows.

Rows are insert-only; there is no update or delete path.
"""

from typing import List, Optional

from src.common.config import FirestoreConfig
from src.common.firestore import FirestoreError, compliance_history_collection, get_firestore_client
from src.compliance.models import ComplianceHistory, ContentType

FirestoreRepositoryError = FirestoreError


class ComplianceHistoryRepository:
    """Repository for compliance history Firestore operations."""

    def __init__(self, config: FirestoreConfig):
        self.config = config
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = get_firestore_client(self.config)
        return self._client

    @property
    def collection_name(self) -> str:
        return compliance_history_collection(self.config.collection_prefix)

    def save_compliance_check(self, record: ComplianceHistory) -> None:
        """Insert one history row keyed by its id."""
        client = self._get_client()
        client.collection(self.collection_name).document(record.id).set(record.to_dict())

    def get_compliance_history(
        self,
        content_id: str,
        content_type: ContentType,
        limit: Optional[int] = None,
    ) -> List[ComplianceHistory]:
        """Get history rows for one content item, newest first."""
        from google.cloud.firestore import Query  # type: ignore[import-not-found]

        client = self._get_client()
        query = (
            client.collection(self.collection_name)
            .where("content_id", "==", content_id)
            .where("content_type", "==", ContentType(content_type).value)
            .order_by("checked_at", direction=Query.DESCENDING)
        )
        if limit:
            query = query.limit(limit)

        rows: List[ComplianceHistory] = []
        for snapshot in query.stream():
            data = snapshot.to_dict() or {}
            data.setdefault("id", snapshot.id)
            rows.append(ComplianceHistory.model_validate(data))
        return rows
