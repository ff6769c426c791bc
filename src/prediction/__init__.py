"""Content performance prediction.

Heuristic predictions of MLR approval likelihood, engagement, compliance
risk and A/B testing potential, grounded in a brand's recent content
analytics.

Modules:
    models: PerformancePrediction, PredictionResult, PredictionContext, ContentAnalytics
    content_factors: Regex features extracted from content
    predictors: The four sub-predictions and confidence calculation
    firestore_repository: Analytics reads and prediction writes
    prediction_service: Validation, fan-out and best-effort persistence
"""
