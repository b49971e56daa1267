"""
Fallback Resolver - text heuristic used when image labeling could not run at all.

Only invoked when the label source failed (network error, provider disabled),
never when the category mapper simply returned "other".

Rules are checked in a fixed order (pothole, garbage, light, water) and the
first rule with a term contained in the text wins, so a filename mentioning
both "road" and "light" resolves to pothole.
"""

from typing import Optional
import logging

from app.models.classification import Category, ClassificationResult
from app.services.triage_config import ClassificationConfig

logger = logging.getLogger(__name__)

MATCH_DETAILS = "Classified based on URL keywords"
DEFAULT_DETAILS = "Unable to classify, using default"


class FallbackResolver:
    """Ordered substring heuristic over a URL, filename or other text hint."""

    def __init__(self, config: Optional[ClassificationConfig] = None):
        self.config = config or ClassificationConfig()

    def resolve_category(self, text: Optional[str]) -> Optional[Category]:
        """First category whose rule matches the text, or None."""
        hint = (text or "").casefold()
        if not hint:
            return None
        for rule in self.config.fallback_rules:
            if any(term in hint for term in rule.terms):
                return rule.category
        return None

    def classify(self, text: Optional[str]) -> ClassificationResult:
        """
        Infer a category from a text hint. Never raises.

        Returns:
            ClassificationResult with fixed confidence (0.6 on a match, 0.5 otherwise)
        """
        category = self.resolve_category(text)

        if category is None:
            logger.info("Fallback classification found no keyword, using default")
            return ClassificationResult(
                category=Category.OTHER,
                confidence=self.config.fallback_default_confidence,
                severity=self.config.fallback_severity,
                raw_labels=(),
                model=self.config.fallback_default_model_name,
                match_details=DEFAULT_DETAILS,
            )

        logger.info(f"Fallback classification: {category.value} (from text hint)")
        return ClassificationResult(
            category=category,
            confidence=self.config.fallback_confidence,
            severity=self.config.fallback_severity,
            raw_labels=(),
            model=self.config.fallback_model_name,
            match_details=MATCH_DETAILS,
        )


def fallback_classify(text: Optional[str], config: Optional[ClassificationConfig] = None) -> ClassificationResult:
    """Run the fallback heuristic with the given (or default) config."""
    return FallbackResolver(config).classify(text)
