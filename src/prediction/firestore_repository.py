"""Firestore repository for content analytics reads and prediction writes.

Handles:
- Reading recent content analytics for a brand and content type
- Writing one performance_predictions row per sub-prediction
"""

import uuid
from datetime import datetime, timezone
from typing import List

from src.common.config import DEFAULT_HISTORY_WINDOW, FirestoreConfig
from src.common.firestore import (
    FirestoreError,
    content_analytics_collection,
    get_firestore_client,
    performance_predictions_collection,
)
from src.compliance.models import ContentType
from src.prediction.models import ContentAnalytics, PredictionRecord, PredictionResult

FirestoreRepositoryError = FirestoreError


class AnalyticsRepository:
    """Repository for prediction inputs and outputs."""

    def __init__(self, config: FirestoreConfig):
        self.config = config
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = get_firestore_client(self.config)
        return self._client

    @property
    def analytics_collection_name(self) -> str:
        return content_analytics_collection(self.config.collection_prefix)

    @property
    def predictions_collection_name(self) -> str:
        return performance_predictions_collection(self.config.collection_prefix)

    def get_historical_data(
        self,
        brand_id: str,
        content_type: ContentType,
        limit: int = DEFAULT_HISTORY_WINDOW,
    ) -> List[ContentAnalytics]:
        """Get the most recent analytics rows for a brand, newest first."""
        from google.cloud.firestore import Query  # type: ignore[import-not-found]

        client = self._get_client()
        query = (
            client.collection(self.analytics_collection_name)
            .where("brand_id", "==", brand_id)
            .where("content_type", "==", ContentType(content_type).value)
            .order_by("created_at", direction=Query.DESCENDING)
            .limit(limit)
        )
        records: List[ContentAnalytics] = []
        for snapshot in query.stream():
            data = snapshot.to_dict() or {}
            data.setdefault("content_id", snapshot.id)
            records.append(ContentAnalytics.model_validate(data))
        return records

    def save_predictions(
        self, content_id: str, content_type: ContentType, result: PredictionResult
    ) -> List[PredictionRecord]:
        """Insert the four sub-predictions as separate rows in one atomic batch."""
        client = self._get_client()
        collection = client.collection(self.predictions_collection_name)
        batch = client.batch()
        predicted_at = datetime.now(timezone.utc)

        records: List[PredictionRecord] = []
        for prediction in result.predictions():
            record = PredictionRecord(
                id=str(uuid.uuid4()),
                content_id=content_id,
                content_type=ContentType(content_type),
                prediction_type=prediction.prediction_type,
                predicted_score=prediction.predicted_score,
                confidence_level=prediction.confidence_level,
                prediction_factors=prediction.prediction_factors,
                predicted_at=predicted_at,
            )
            batch.set(collection.document(record.id), record.to_dict())
            records.append(record)
        batch.commit()
        return records
