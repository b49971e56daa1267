"""
Pydantic model for the issue fields the triage core reads and writes.

Persistence is owned by the caller; this model only carries the values.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from app.models.classification import Category, LabelPrediction, Severity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IssueRecord(BaseModel):
    """
    Classification and priority fields of a citizen issue report.

    Priority is write-triggered: it is recomputed on creation, on each vote and
    on severity changes, so its freshness bonus is only as current as
    `priority_computed_at`.
    """
    id: Optional[str] = Field(None, description="Identifier assigned by the persistence layer")
    image_url: str = Field(..., description="URL of the reported photo")
    description: Optional[str] = Field(None, max_length=500, description="Citizen description")
    category: Category = Field(..., description="Classified civic issue category")
    severity: Severity = Field(default=Severity.MODERATE, description="Derived (or later edited) severity")
    ai_confidence: Optional[float] = Field(None, ge=0.0, description="Accumulated classifier score")
    ai_model: Optional[str] = Field(None, description="Model or heuristic that classified the issue")
    raw_labels: Tuple[LabelPrediction, ...] = Field(default_factory=tuple, description="Top labels kept for audit")
    match_details: Optional[str] = None
    votes: int = Field(default=0, ge=0, description="Upvote count")
    priority: Optional[int] = Field(None, description="Triage priority")
    priority_computed_at: Optional[datetime] = Field(None, description="When priority was last computed")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "65f0c2a1",
                "image_url": "https://example.com/uploads/road-pothole.jpg",
                "description": "pothole detected by AI",
                "category": "pothole",
                "severity": "critical",
                "ai_confidence": 0.9,
                "ai_model": "google/vit-base-patch16-224",
                "raw_labels": [{"label": "pothole on asphalt road", "score": 0.9}],
                "votes": 3,
                "priority": 83,
                "created_at": "2024-01-15T10:30:00Z",
            }
        }

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict for the persistence or HTTP layer."""
        return self.model_dump(mode="json")
