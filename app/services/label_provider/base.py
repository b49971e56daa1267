"""
Label Provider Base Interface.

Defines the contract for image-labeling collaborators.
All label providers must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from datetime import datetime
import logging

from app.models.classification import LabelPrediction

logger = logging.getLogger(__name__)


class LabelResponse:
    """
    Standardized labeling response.

    `labels` is None whenever the provider failed; callers use that as the
    "no labels available" signal and never see the provider's exception.
    """

    def __init__(
        self,
        labels: Optional[List[LabelPrediction]],
        model_name: str,
        inference_timestamp: datetime,
        error: Optional[str] = None
    ):
        self.labels = labels
        self.model_name = model_name
        self.inference_timestamp = inference_timestamp
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None and self.labels is not None

    def to_dict(self) -> Dict:
        """Convert to dictionary for logging or audit storage."""
        result = {
            "labels": [p.model_dump() for p in self.labels] if self.labels is not None else None,
            "model_name": self.model_name,
            "inference_timestamp": self.inference_timestamp.isoformat(),
        }
        if self.error:
            result["error"] = self.error
        return result


class LabelProvider(ABC):
    """
    Abstract base class for image-labeling providers.

    Implementations MUST:
    - Return a LabelResponse even on failure (error set, labels None)
    - Never raise exceptions to the caller
    - Respect their timeout
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """True if the provider is configured and ready."""
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """Dict with 'name' and 'version' keys."""
        pass

    @abstractmethod
    def get_timeout_seconds(self) -> float:
        pass

    @abstractmethod
    def label_image(self, image_url: str) -> LabelResponse:
        """
        Label the image at image_url.

        Returns:
            LabelResponse with predictions ordered highest score first
        """
        pass
