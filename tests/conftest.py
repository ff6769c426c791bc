"""Pytest configuration and shared fixtures.

Loads the project .env (if any) before tests run and provides in-memory
Firestore doubles wired into the repositories.
"""

import sys
from pathlib import Path

import pytest

# Project root on the path so `src.*` and `tests.*` import
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.common.config import ComplianceSettings, FirestoreConfig, PredictionSettings  # noqa: E402
from src.common.env import load_env  # noqa: E402
from src.compliance.compliance_service import ComplianceService  # noqa: E402
from src.compliance.firestore_repository import ComplianceHistoryRepository  # noqa: E402
from src.guardrails.firestore_repository import GuardrailsRepository  # noqa: E402
from src.prediction.firestore_repository import AnalyticsRepository  # noqa: E402
from src.prediction.prediction_service import PredictionService  # noqa: E402
from tests.fakes import PREFIX, FakeFirestoreClient, asset_doc, brand_doc, campaign_doc  # noqa: E402

load_env()


@pytest.fixture
def firestore_config() -> FirestoreConfig:
    return FirestoreConfig(collection_prefix=PREFIX, project_id="test-project")


@pytest.fixture
def fake_client() -> FakeFirestoreClient:
    return FakeFirestoreClient()


@pytest.fixture
def seeded_client(fake_client: FakeFirestoreClient) -> FakeFirestoreClient:
    """Client holding one brand, one campaign and one asset tier."""
    fake_client.collection(f"{PREFIX}brand_guardrails").docs["brand-1"] = brand_doc()
    fake_client.collection(f"{PREFIX}campaign_guardrails").docs["campaign-1"] = campaign_doc()
    fake_client.collection(f"{PREFIX}asset_guardrails").docs["asset-1"] = asset_doc()
    return fake_client


@pytest.fixture
def guardrails_repository(firestore_config, seeded_client) -> GuardrailsRepository:
    repository = GuardrailsRepository(firestore_config)
    repository._client = seeded_client
    return repository


@pytest.fixture
def history_repository(firestore_config, seeded_client) -> ComplianceHistoryRepository:
    repository = ComplianceHistoryRepository(firestore_config)
    repository._client = seeded_client
    return repository


@pytest.fixture
def analytics_repository(firestore_config, seeded_client) -> AnalyticsRepository:
    repository = AnalyticsRepository(firestore_config)
    repository._client = seeded_client
    return repository


@pytest.fixture
def compliance_settings(firestore_config) -> ComplianceSettings:
    return ComplianceSettings(
        firestore=firestore_config,
        guardrails_version="1.0.0",
        staleness_critical_days=90,
        staleness_warning_days=75,
    )


@pytest.fixture
def prediction_settings(firestore_config) -> PredictionSettings:
    return PredictionSettings(
        firestore=firestore_config,
        history_window=50,
        default_compliance_score=80.0,
        max_workers=4,
    )


@pytest.fixture
def compliance_service(guardrails_repository, history_repository, compliance_settings) -> ComplianceService:
    return ComplianceService(guardrails_repository, history_repository, settings=compliance_settings)


@pytest.fixture
def prediction_service(analytics_repository, prediction_settings) -> PredictionService:
    return PredictionService(analytics_repository, settings=prediction_settings)
