"""Data models for cached pull requests, remote records and reviewer statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class ReviewOutcome(Enum):
    """Outcome of a requested review, as tracked per reviewer per PR.

    WAITING and UNREVIEWED are placeholders assigned by the cache to reviewers
    who were requested but have not submitted a review yet. The other members
    mirror the review states reported by GitHub.
    """
    WAITING = 'Waiting'
    UNREVIEWED = 'Unreviewed'
    APPROVED = 'APPROVED'
    COMMENTED = 'COMMENTED'
    CHANGES_REQUESTED = 'CHANGES_REQUESTED'
    DISMISSED = 'DISMISSED'
    OTHER = 'OTHER'

    @classmethod
    def classify(cls, raw: str) -> 'ReviewOutcome':
        """Map a raw outcome string to a member, OTHER if unrecognized."""
        for outcome in cls:
            if outcome is not cls.OTHER and outcome.value == raw:
                return outcome
        return cls.OTHER

    @classmethod
    def placeholder_for(cls, state: str) -> 'ReviewOutcome':
        return cls.WAITING if state == 'open' else cls.UNREVIEWED

    @property
    def is_placeholder(self) -> bool:
        return self in (ReviewOutcome.WAITING, ReviewOutcome.UNREVIEWED)


@dataclass
class CachedPullRequest:
    """Cached state of one pull request."""
    number: int
    state: Optional[str] = None  # "open" or "closed"
    updated_at: Optional[str] = None  # raw ISO-8601 string from GitHub
    reviews_fetched: bool = False
    # reviewer login -> raw outcome value
    reviewer_outcomes: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'state': self.state,
            'updated_at': self.updated_at,
            'reviews_fetched': self.reviews_fetched,
            'reviewer_outcomes': dict(self.reviewer_outcomes),
        }

    @classmethod
    def from_dict(cls, number: int, data: Dict) -> 'CachedPullRequest':
        return cls(
            number=number,
            state=data['state'],
            updated_at=data['updated_at'],
            reviews_fetched=bool(data['reviews_fetched']),
            reviewer_outcomes=dict(data['reviewer_outcomes']),
        )


@dataclass
class RemotePullRequest:
    """A pull request summary as returned by the GitHub pulls listing."""
    number: int
    state: str
    updated_at: str
    requested_reviewers: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict) -> 'RemotePullRequest':
        return cls(
            number=data['number'],
            state=data['state'],
            updated_at=data['updated_at'],
            requested_reviewers=[
                user['login'] for user in data.get('requested_reviewers') or []
            ],
        )


@dataclass
class RemoteReview:
    """A submitted review on a pull request."""
    reviewer: str
    outcome: str

    @classmethod
    def from_api(cls, data: Dict) -> Optional['RemoteReview']:
        """Build a review, or None if the author account no longer exists."""
        user = data.get('user')
        if not user:
            return None
        return cls(reviewer=user['login'], outcome=data['state'])


@dataclass
class RateLimitStatus:
    """Remaining request quota as reported by the rate_limit endpoint."""
    limit: int
    remaining: int
    reset: int  # seconds since epoch

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    @property
    def reset_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.reset)


@dataclass
class PageQuery:
    """Parameters for one page of the pulls listing."""
    sort: str
    direction: str
    page: int
    state: str = 'all'

    @classmethod
    def snapshot(cls, page: int) -> 'PageQuery':
        """Oldest first, used while sweeping the full history."""
        return cls(sort='created', direction='asc', page=page)

    @classmethod
    def delta(cls, page: int) -> 'PageQuery':
        """Most recently updated first, used once the snapshot is complete."""
        return cls(sort='updated', direction='desc', page=page)

    def to_params(self) -> Dict:
        return {
            'sort': self.sort,
            'direction': self.direction,
            'state': self.state,
            'page': self.page,
        }


@dataclass
class ReviewerStats:
    """Review statistics for one reviewer."""
    review_requests: int = 0  # PRs that requested or received a review
    approved_count: int = 0
    commented_count: int = 0
    unreviewed_count: int = 0  # closed without a review, or review dismissed
    waiting_count: int = 0  # open PRs still waiting for a review
    other_count: int = 0

    @property
    def total(self) -> int:
        return (self.approved_count + self.commented_count + self.unreviewed_count
                + self.waiting_count + self.other_count)

    @property
    def reviewed_percentage(self) -> int:
        total = self.total
        if total == 0:
            return 0
        return 100 * (total - self.unreviewed_count) // total
