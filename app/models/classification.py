"""
Pydantic models for image-label classification.

DESIGN PRINCIPLE:
- Models reflect data structure, not business logic
- Results are value objects: created once per classification attempt, never mutated
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional, Tuple
from enum import Enum


class Category(str, Enum):
    """Closed civic-issue taxonomy."""
    POTHOLE = "pothole"
    GARBAGE = "garbage"
    BROKEN_LIGHT = "broken_light"
    WATER_LEAKAGE = "water_leakage"
    GRAFFITI = "graffiti"
    OTHER = "other"


class Severity(str, Enum):
    """Derived issue severity."""
    MINOR = "minor"
    MODERATE = "moderate"
    CRITICAL = "critical"


class LabelPrediction(BaseModel):
    """
    A single output of the external image classifier.

    The score is a model confidence, not part of a distribution that sums to 1.
    """
    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Free-form label text from the classifier")
    score: float = Field(..., ge=0.0, le=1.0, description="Classifier confidence")


class ClassificationResult(BaseModel):
    """
    Output of the category mapper or the fallback resolver.

    `confidence` is the accumulated weighted score of the winning category and
    can exceed 1.0; it is not a probability.
    """
    model_config = ConfigDict(frozen=True)

    category: Category
    confidence: float = Field(..., ge=0.0, description="Accumulated score (unnormalised)")
    severity: Severity
    raw_labels: Tuple[LabelPrediction, ...] = Field(default_factory=tuple, description="Top predictions kept for audit")
    model: str = Field(..., description="Identifier of the model or heuristic that produced the result")
    match_details: Optional[str] = Field(None, description="Diagnostic note")

    def to_dict(self) -> Dict[str, Any]:
        """Storage/transport shape, keyed the way issue records expose it."""
        result = {
            "category": self.category.value,
            "confidence": self.confidence,
            "severity": self.severity.value,
            "rawLabels": [{"label": p.label, "score": p.score} for p in self.raw_labels],
            "model": self.model,
        }
        if self.match_details:
            result["matchDetails"] = self.match_details
        return result
