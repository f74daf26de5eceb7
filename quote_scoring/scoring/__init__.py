"""
scoring/ - Quote Score Adjustment

Modules:
    utils.py        - Decimal / ratio / variance helpers
    features.py     - FeatureVector + FeatureExtractor
    predictors.py   - Price, Quality and Risk weak predictors
    adjustment.py   - AdjustmentOrchestrator (score, grade, confidence)
    engine.py       - ScoringEngine protocol + AdjustedScoringEngine blend
    training.py     - Training data collection and dataset statistics
"""
