"""
In-memory experiment state owned by one ExperimentHarness.

ExperimentRegistry holds test definitions (replace-by-recreate per test_id);
OutcomeLog accumulates scored outcomes for later comparison. Neither persists
anything.
"""

from collections import defaultdict
from typing import Dict, List, Optional

from quote_scoring.models.enumerations import Bucket
from quote_scoring.models.experiment import ExperimentConfig, ExperimentOutcome


class ExperimentRegistry:
    """Test definitions keyed by test_id."""

    def __init__(self):
        self._tests: Dict[str, ExperimentConfig] = {}

    def register(self, config: ExperimentConfig) -> None:
        self._tests[config.test_id] = config

    def get(self, test_id: str) -> Optional[ExperimentConfig]:
        return self._tests.get(test_id)

    def remove(self, test_id: str) -> Optional[ExperimentConfig]:
        return self._tests.pop(test_id, None)

    def list(self) -> List[ExperimentConfig]:
        return list(self._tests.values())

    def __contains__(self, test_id: str) -> bool:
        return test_id in self._tests

    def __len__(self) -> int:
        return len(self._tests)


class OutcomeLog:
    """Scored outcomes per test, replaced per (test, subject)."""

    def __init__(self):
        self._outcomes: Dict[str, Dict[str, ExperimentOutcome]] = defaultdict(dict)

    def record(self, outcome: ExperimentOutcome) -> None:
        self._outcomes[outcome.test_id][outcome.subject_id] = outcome

    def for_test(self, test_id: str) -> List[ExperimentOutcome]:
        return list(self._outcomes.get(test_id, {}).values())

    def for_bucket(self, test_id: str, bucket: Bucket) -> List[ExperimentOutcome]:
        return [o for o in self.for_test(test_id) if o.bucket == bucket]

    def clear(self, test_id: Optional[str] = None) -> None:
        if test_id is None:
            self._outcomes.clear()
        else:
            self._outcomes.pop(test_id, None)
