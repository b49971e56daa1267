"""
Category Mapper - maps generic image-classifier labels onto civic issue categories.

SCORING:
- Only the top N predictions (default 5) are considered, in the classifier's own order
- Each keyword of a category contained in a prediction's label adds
  score * position_weight(rank); matches are additive, not de-duplicated
- The strictly highest accumulated score wins; ties go to the first-declared category
- A winning score below the match threshold means no category fits ("other")

The accumulated score is not a probability and can exceed 1.0. Severity
thresholds are applied to it directly.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union
import logging

from app.models.classification import Category, ClassificationResult, LabelPrediction, Severity
from app.models.errors import InsufficientLabelsError
from app.services.triage_config import ClassificationConfig

logger = logging.getLogger(__name__)

PredictionLike = Union[LabelPrediction, Mapping[str, object]]

NO_MATCH_DETAILS = "No matching civic issue category found"


def _coerce_predictions(labels: Iterable[PredictionLike]) -> List[LabelPrediction]:
    return [
        label if isinstance(label, LabelPrediction) else LabelPrediction.model_validate(label)
        for label in labels
    ]


class CategoryMapper:
    """
    Stateless label -> category mapper bound to one ClassificationConfig.

    Safe to share between threads: nothing is cached or mutated.
    """

    def __init__(self, config: Optional[ClassificationConfig] = None):
        self.config = config or ClassificationConfig()

    def position_weight(self, rank: int) -> float:
        """Weight of the prediction at zero-based rank (1.0, 0.85, 0.70, ...), never negative."""
        return max(0.0, 1.0 - rank * self.config.position_decay)

    def top_predictions(self, labels: Sequence[PredictionLike]) -> List[LabelPrediction]:
        """The first max_predictions entries, coerced to LabelPrediction. No re-sorting."""
        return _coerce_predictions(list(labels)[: self.config.max_predictions])

    def score_categories(self, labels: Sequence[PredictionLike]) -> Dict[Category, float]:
        """
        Accumulated score per category, in keyword-table order.

        Raises:
            InsufficientLabelsError: labels is None
        """
        if labels is None:
            raise InsufficientLabelsError("No label source available for classification")
        return self._score(self.top_predictions(labels))

    def _score(self, predictions: List[LabelPrediction]) -> Dict[Category, float]:
        scores: Dict[Category, float] = {}
        for category, keywords in self.config.category_keywords.items():
            score = 0.0
            for rank, prediction in enumerate(predictions):
                label = prediction.label.casefold()
                weight = self.position_weight(rank)
                for keyword in keywords:
                    if keyword in label:
                        added = prediction.score * weight
                        score += added
                        logger.debug(f"Match: {label!r} contains {keyword!r} for {category.value} (+{added:.3f})")
            scores[category] = score
        return scores

    def severity_for_score(self, score: float) -> Severity:
        """Severity from the ordered (threshold, severity) pairs; below all of them is the default."""
        for threshold, severity in self.config.severity_thresholds:
            if score >= threshold:
                return severity
        return self.config.default_severity

    def classify(
        self,
        labels: Optional[Sequence[PredictionLike]],
        model_name: Optional[str] = None
    ) -> ClassificationResult:
        """
        Classify an ordered label sequence (highest classifier score first).

        An empty sequence is not an error: it takes the "other" path with
        confidence 0.0.

        Args:
            labels: Ordered predictions ({label, score} mappings or LabelPrediction)
            model_name: Model that produced the labels (defaults to config.model_name)

        Returns:
            ClassificationResult

        Raises:
            InsufficientLabelsError: labels is None (no label source at all);
                callers should run the fallback resolver instead
        """
        if labels is None:
            raise InsufficientLabelsError("No label source available for classification")

        predictions = self.top_predictions(labels)
        model = model_name or self.config.model_name
        scores = self._score(predictions)
        if logger.isEnabledFor(logging.DEBUG):
            summary = {category.value: round(score, 4) for category, score in scores.items()}
            logger.debug(f"Category scores: {summary}")

        best_category: Optional[Category] = None
        best_score = 0.0
        for category, score in scores.items():
            # Strict comparison keeps the first-declared category on ties
            if best_category is None or score > best_score:
                best_category, best_score = category, score

        raw_labels = tuple(predictions)

        if best_category is None or best_score < self.config.match_threshold:
            top_score = predictions[0].score if predictions else 0.0
            logger.info(f"No good category match (best score {best_score:.3f}), defaulting to 'other'")
            return ClassificationResult(
                category=Category.OTHER,
                confidence=top_score,
                severity=self.config.unmatched_severity,
                raw_labels=raw_labels,
                model=model,
                match_details=NO_MATCH_DETAILS,
            )

        severity = self.severity_for_score(best_score)
        logger.info(f"Best match: {best_category.value} (score: {best_score:.3f}, severity: {severity.value})")

        return ClassificationResult(
            category=best_category,
            confidence=best_score,
            severity=severity,
            raw_labels=raw_labels,
            model=model,
            match_details=f"Matched based on {best_score:.2f} confidence",
        )


def classify(
    labels: Optional[Sequence[PredictionLike]],
    config: Optional[ClassificationConfig] = None,
) -> ClassificationResult:
    """Classify labels with a mapper built from config (defaults if omitted)."""
    return CategoryMapper(config).classify(labels)
