"""
Priority Scoring Service - system-derived triage priority.

DESIGN PRINCIPLES:
- Priority is SYSTEM-DERIVED, recomputed from scratch on every call
- Priority = severity weight + capped vote score + linear age bonus
- Unknown severities score like "moderate" instead of failing
- No clamping: the additive formula is kept exactly (natural range ~30-100)
"""

from typing import Dict, Optional, Union
import logging
import math

from app.models.classification import Severity
from app.services.triage_config import PriorityConfig
from app.utils.timestamps import TimestampLike, age_in_days

logger = logging.getLogger(__name__)

SeverityLike = Union[Severity, str, None]


def _severity_key(severity: SeverityLike) -> Optional[str]:
    if isinstance(severity, Severity):
        return severity.value
    if isinstance(severity, str):
        # Exact lookup: "CRITICAL" is not a known severity and scores as moderate
        return severity
    return None


def _round_half_up(value: float) -> int:
    # round() would use banker's rounding; ties go up here (55.5 -> 56)
    return int(math.floor(value + 0.5))


class PriorityScoringService:
    """
    Calculates priority from severity, votes and age.

    Factors:
    1. Severity weight (critical 70, moderate 50, minor 30; unknown -> 50)
    2. Votes, one point each up to a cap of 20
    3. Freshness, 10 points at creation decaying linearly to 0 over 10 days
    """

    def __init__(self, config: Optional[PriorityConfig] = None):
        self.config = config or PriorityConfig()

    def severity_score(self, severity: SeverityLike) -> int:
        key = _severity_key(severity)
        return self.config.severity_weights.get(key, self.config.default_severity_weight)

    def vote_score(self, vote_count: Optional[int]) -> int:
        return min(max(vote_count or 0, 0), self.config.vote_cap)

    def age_score(self, created_at: Optional[TimestampLike], now: Optional[TimestampLike] = None) -> float:
        """Fractional freshness bonus; issues older than the window get 0, never a penalty."""
        days = age_in_days(created_at, now)
        return max(0.0, self.config.age_window_days - days)

    def compute_priority(
        self,
        severity: SeverityLike,
        vote_count: Optional[int],
        created_at: Optional[TimestampLike],
        now: Optional[TimestampLike] = None,
    ) -> int:
        """
        Compute priority. Total: never raises for any severity value.

        Args:
            severity: Severity enum or string (unknown/None -> moderate weight)
            vote_count: Current votes (None/negative -> 0)
            created_at: Creation time (datetime, ISO string or epoch seconds)
            now: Evaluation time (defaults to current UTC time)

        Returns:
            Rounded integer priority
        """
        total = (
            self.severity_score(severity)
            + self.vote_score(vote_count)
            + self.age_score(created_at, now)
        )
        return _round_half_up(total)

    def calculate_priority(self, issue: Dict, now: Optional[TimestampLike] = None) -> Dict:
        """
        Calculate priority for an issue dictionary with an explainable reason.

        Args:
            issue: Dict with severity, votes and created_at (camelCase keys also accepted)
            now: Evaluation time

        Returns:
            Dict with priority_score and priority_reason
        """
        severity = issue.get("severity")
        votes = issue.get("votes", issue.get("voteCount", 0))
        created_at = issue.get("created_at", issue.get("createdAt"))

        severity_points = self.severity_score(severity)
        vote_points = self.vote_score(votes)
        age_points = self.age_score(created_at, now)
        score = _round_half_up(severity_points + vote_points + age_points)

        reasons = [
            f"Severity: {_severity_key(severity) or 'unknown'} (+{severity_points})",
            f"Votes: {votes or 0} (+{vote_points})",
            f"Freshness (+{age_points:.2f})",
        ]
        priority_reason = " | ".join(reasons)

        logger.info(f"Calculated priority score {score} for issue {issue.get('id')}: {priority_reason}")

        return {
            "priority_score": score,
            "priority_reason": priority_reason,
        }


# Global service instance (singleton pattern)
_priority_service = None


def get_priority_scoring_service() -> PriorityScoringService:
    """
    Get or create the default PriorityScoringService instance.

    Returns:
        PriorityScoringService with default weights
    """
    global _priority_service
    if _priority_service is None:
        _priority_service = PriorityScoringService()
    return _priority_service


def compute_priority(
    severity: SeverityLike,
    vote_count: Optional[int],
    created_at: Optional[TimestampLike],
    now: Optional[TimestampLike] = None,
) -> int:
    """Compute priority with the default weights."""
    return get_priority_scoring_service().compute_priority(severity, vote_count, created_at, now)
