"""
Issue Triage Service - merges classifications into issues and keeps priority current.

Priority is write-triggered: it is recomputed when an issue is created, when
it is voted on and when its severity changes. `refresh_priority` and
`rank_issues(fresh=True)` give callers a compute-on-read value when the
stored one may have gone stale through age decay.

Records are never mutated; every operation returns an updated copy.
"""

from typing import Iterable, List, Optional, Union
import logging

from app.models.classification import ClassificationResult, Severity
from app.models.issue import IssueRecord
from app.services.priority_scoring import PriorityScoringService, get_priority_scoring_service
from app.utils.timestamps import TimestampLike, to_utc, utc_now

logger = logging.getLogger(__name__)


class IssueTriageService:
    """Issue-level operations that trigger a priority recomputation."""

    def __init__(self, scorer: Optional[PriorityScoringService] = None):
        self.scorer = scorer or get_priority_scoring_service()

    def _with_priority(self, issue: IssueRecord, now, touch: bool = True, **changes) -> IssueRecord:
        updated = issue.model_copy(update=changes)
        priority = self.scorer.compute_priority(updated.severity, updated.votes, updated.created_at, now)
        recomputed = {"priority": priority, "priority_computed_at": now}
        if touch:
            recomputed["updated_at"] = now
        return updated.model_copy(update=recomputed)

    def build_issue(
        self,
        result: ClassificationResult,
        image_url: str,
        description: Optional[str] = None,
        issue_id: Optional[str] = None,
        now: Optional[TimestampLike] = None
    ) -> IssueRecord:
        """
        Create a new issue record from a classification result.

        Args:
            result: Mapper or fallback output
            image_url: Photo URL
            description: Citizen description (defaults to "<category> detected by AI")
            issue_id: Optional identifier from the persistence layer
            now: Creation time (defaults to current UTC time)

        Returns:
            IssueRecord with votes 0 and priority computed
        """
        created_at = to_utc(now) or utc_now()
        issue = IssueRecord(
            id=issue_id,
            image_url=image_url,
            description=description or f"{result.category.value} detected by AI",
            category=result.category,
            severity=result.severity,
            ai_confidence=result.confidence,
            ai_model=result.model,
            raw_labels=result.raw_labels,
            match_details=result.match_details,
            votes=0,
            created_at=created_at,
            updated_at=created_at,
        )
        issue = self._with_priority(issue, created_at)
        logger.info(f"Issue created: {issue.category.value}/{issue.severity.value}, priority {issue.priority}")
        return issue

    def register_vote(self, issue: IssueRecord, now: Optional[TimestampLike] = None) -> IssueRecord:
        """Add one upvote and recompute priority."""
        now_dt = to_utc(now) or utc_now()
        updated = self._with_priority(issue, now_dt, votes=issue.votes + 1)
        logger.info(f"Vote recorded for issue {issue.id}: votes {updated.votes}, priority {updated.priority}")
        return updated

    def update_severity(
        self,
        issue: IssueRecord,
        severity: Union[Severity, str],
        now: Optional[TimestampLike] = None
    ) -> IssueRecord:
        """
        Change severity (authorized edit) and recompute priority.

        Raises:
            ValueError: Unknown severity. The scorer itself is permissive, so
                edits are validated here.
        """
        new_severity = Severity(severity.strip().lower() if isinstance(severity, str) else severity)
        now_dt = to_utc(now) or utc_now()
        updated = self._with_priority(issue, now_dt, severity=new_severity)
        logger.info(f"Severity of issue {issue.id} set to {new_severity.value}, priority {updated.priority}")
        return updated

    def refresh_priority(self, issue: IssueRecord, now: Optional[TimestampLike] = None) -> IssueRecord:
        """Recompute priority at read time so the freshness bonus is current."""
        now_dt = to_utc(now) or utc_now()
        return self._with_priority(issue, now_dt, touch=False)

    def rank_issues(
        self,
        issues: Iterable[IssueRecord],
        now: Optional[TimestampLike] = None,
        fresh: bool = False
    ) -> List[IssueRecord]:
        """
        Order issues for triage: highest priority first, then newest first.

        Args:
            issues: Issue records
            now: Evaluation time when fresh=True
            fresh: Recompute priority before sorting instead of using stored values
        """
        records = list(issues)
        if fresh:
            now_dt = to_utc(now) or utc_now()
            records = [self._with_priority(issue, now_dt, touch=False) for issue in records]

        def sort_key(issue: IssueRecord):
            priority = issue.priority if issue.priority is not None else -1
            return (-priority, -issue.created_at.timestamp())

        return sorted(records, key=sort_key)
