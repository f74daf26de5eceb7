"""
quote_scoring - Adaptive Scoring & Experimentation Engine

Subpackages:
    services/     - bounded-concurrency task executor
    scoring/      - feature extraction, weak predictors, score adjustment
    experiments/  - deterministic bucketing and A/B comparison
    models/       - pydantic data models
    core/         - exception taxonomy
"""

__version__ = "1.0.0"
