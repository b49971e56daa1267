"""
Mock Label Provider - offline provider used when AI is disabled and in tests.

Returns a fixed prediction list without any network call.
"""

from app.models.classification import LabelPrediction
from app.services.label_provider.base import LabelProvider, LabelResponse
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)


class MockLabelProvider(LabelProvider):
    """
    Deterministic label provider.

    With no predictions configured it reports "no labels available", which
    routes classification to the fallback resolver, the same path a failed
    real provider takes.
    """

    MODEL_NAME = "mock-labels-v1"
    MODEL_VERSION = "1.0.0"
    TIMEOUT_SECONDS = 0.1

    def __init__(self, predictions: Optional[Iterable] = None, error: Optional[str] = None):
        self.predictions = (
            [p if isinstance(p, LabelPrediction) else LabelPrediction.model_validate(p) for p in predictions]
            if predictions is not None
            else None
        )
        self.error = error
        logger.info(f"Mock label provider initialized: {self.MODEL_NAME}")

    def is_enabled(self) -> bool:
        """Mock provider is always enabled."""
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": self.MODEL_NAME,
            "version": self.MODEL_VERSION
        }

    def get_timeout_seconds(self) -> float:
        return self.TIMEOUT_SECONDS

    def label_image(self, image_url: str) -> LabelResponse:
        now = datetime.now(timezone.utc)
        if self.error or self.predictions is None:
            return LabelResponse(
                labels=None,
                model_name=self.MODEL_NAME,
                inference_timestamp=now,
                error=self.error or "Mock provider has no labels configured",
            )
        return LabelResponse(
            labels=list(self.predictions),
            model_name=self.MODEL_NAME,
            inference_timestamp=now,
        )
