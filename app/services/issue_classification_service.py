"""
Issue Classification Service - image labels to civic category.

FLOW:
1. The label provider labels the photo (may fail independently per request)
2. A provider failure becomes "no labels" (None), never an exception
3. The category mapper classifies the labels
4. Only when no labels exist at all, the fallback resolver classifies the URL

The mapper returning "other" is a valid result and does NOT trigger the fallback.
"""

from typing import Optional, Sequence
import logging

from app.models.classification import ClassificationResult
from app.models.errors import InsufficientLabelsError
from app.services.category_mapper import CategoryMapper, PredictionLike
from app.services.fallback_resolver import FallbackResolver
from app.services.label_provider.registry import LabelProviderRegistry, get_label_registry
from app.services.triage_config import ClassificationConfig, build_classification_config

logger = logging.getLogger(__name__)


class IssueClassificationService:
    """Runs labeling, mapping and fallback for one photo at a time."""

    def __init__(
        self,
        config: Optional[ClassificationConfig] = None,
        registry: Optional[LabelProviderRegistry] = None
    ):
        self.config = config or build_classification_config()
        self.registry = registry
        self.mapper = CategoryMapper(self.config)
        self.fallback = FallbackResolver(self.config)

    def _get_registry(self) -> LabelProviderRegistry:
        if self.registry is None:
            self.registry = get_label_registry()
        return self.registry

    def classify_labels(
        self,
        labels: Optional[Sequence[PredictionLike]],
        hint_text: Optional[str] = None,
        model_name: Optional[str] = None
    ) -> ClassificationResult:
        """
        Classify labels already obtained by the caller.

        Args:
            labels: Ordered predictions, or None when the label source failed
            hint_text: URL/filename used by the fallback when labels is None
            model_name: Model that produced the labels (defaults to the configured model)

        Returns:
            ClassificationResult from the mapper, or from the fallback resolver
        """
        try:
            return self.mapper.classify(labels, model_name=model_name)
        except InsufficientLabelsError as e:
            logger.info(f"{e}; using fallback classification")
            return self.fallback.classify(hint_text)

    def classify_image(self, image_url: str) -> ClassificationResult:
        """
        Label and classify a photo. Never raises for provider failures.
        """
        logger.info(f"Starting image classification: {image_url}")
        response = self._get_registry().label_image(image_url)

        if not response.ok:
            logger.warning(f"Image labeling unavailable ({response.error}), classifying from URL")
            return self.classify_labels(None, hint_text=image_url)

        result = self.classify_labels(response.labels, hint_text=image_url, model_name=response.model_name)
        logger.info(f"Final classification: {result.category.value} ({result.confidence:.3f}, {result.severity.value})")
        return result


# Global service instance
_classification_service: Optional[IssueClassificationService] = None


def get_issue_classification_service() -> IssueClassificationService:
    """Get or create the settings-driven IssueClassificationService."""
    global _classification_service
    if _classification_service is None:
        _classification_service = IssueClassificationService()
    return _classification_service
