"""Aggregation of cached review outcomes into per-reviewer statistics."""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Optional

from .cache import CacheStore
from .models import ReviewOutcome, ReviewerStats

VALID_STATES = ('all', 'open', 'closed')


def _parse_timestamp(value: str) -> datetime:
    # GitHub timestamps end in 'Z', which fromisoformat only accepts from 3.11
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


def _count(stats: ReviewerStats, outcome: ReviewOutcome):
    stats.review_requests += 1
    if outcome is ReviewOutcome.WAITING:
        stats.waiting_count += 1
    elif outcome in (ReviewOutcome.UNREVIEWED, ReviewOutcome.DISMISSED):
        stats.unreviewed_count += 1
    elif outcome is ReviewOutcome.APPROVED:
        stats.approved_count += 1
    elif outcome is ReviewOutcome.COMMENTED:
        stats.commented_count += 1
    else:
        stats.other_count += 1


def compute_stats(store: CacheStore, state_filter: str = 'closed',
                  updated_since: Optional[datetime] = None) -> Dict[str, ReviewerStats]:
    """Tally review outcomes per reviewer.

    Args:
        store: Cache to read
        state_filter: Only count PRs in this state ('all', 'open' or 'closed')
        updated_since: Only count PRs updated at or after this time

    Returns:
        Dictionary mapping reviewer login to their statistics
    """
    if state_filter not in VALID_STATES:
        raise ValueError(f"state_filter must be one of {', '.join(VALID_STATES)}, got {state_filter!r}")

    if updated_since is not None and updated_since.tzinfo is None:
        updated_since = updated_since.astimezone()

    stats: Dict[str, ReviewerStats] = defaultdict(ReviewerStats)
    for pr in store.pull_requests.values():
        if state_filter != 'all' and pr.state != state_filter:
            continue
        if updated_since is not None:
            if not pr.updated_at:
                continue
            try:
                updated_at = _parse_timestamp(pr.updated_at)
            except ValueError:
                logging.warning(f"Skipping PR #{pr.number} with unreadable updated_at {pr.updated_at!r}")
                continue
            if updated_at < updated_since:
                continue

        for reviewer, raw_outcome in pr.reviewer_outcomes.items():
            _count(stats[reviewer], ReviewOutcome.classify(raw_outcome))

    logging.debug(f"Computed stats for {len(stats)} reviewers")
    return dict(stats)
