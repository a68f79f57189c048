"""Printing of reviewer statistics and synchronization progress."""

from typing import Dict, Optional

from .cache import CacheStore
from .models import RateLimitStatus, ReviewerStats

TALLY_HEADER = 'ID,Approved,Commented,Unreviewed,Waiting,Other,Total,Reviewed'


class OutputFormatter:
    """Formats and prints review statistics."""

    def print_tally(self, stats: Dict[str, ReviewerStats]):
        """Print one CSV line per reviewer, sorted by login."""
        print("-" * 27)
        print(TALLY_HEADER)
        for login in sorted(stats):
            print(self.format_row(login, stats[login]))

    @staticmethod
    def format_row(login: str, stats: ReviewerStats) -> str:
        return (f"{login},{stats.approved_count},{stats.commented_count},"
                f"{stats.unreviewed_count},{stats.waiting_count},{stats.other_count},"
                f"{stats.total},{stats.reviewed_percentage}%")

    def print_incomplete(self, store: CacheStore, rate_limit: Optional[RateLimitStatus] = None):
        """Report how far synchronization got instead of printing partial stats."""
        print(f"Synchronization of {store.repository} is incomplete: "
              f"reviews fetched for {store.review_completion()}% of {len(store)} cached pull requests.")
        if not store.snapshot_complete:
            print(f"History snapshot has read {store.last_snapshot_page_read} page(s) so far.")
        if rate_limit is not None and rate_limit.exhausted:
            print(f"Rate limit will reset at {rate_limit.reset_datetime}.")
        print("Run again to continue, or use --cached-only to print statistics from cached data.")

    def print_cached_notice(self, store: CacheStore, rate_limit: Optional[RateLimitStatus] = None):
        """Explain that GitHub was not queried and the tally comes from the cache."""
        if rate_limit is not None and rate_limit.exhausted:
            print(f"Rate limit exhausted, it will reset at {rate_limit.reset_datetime}.")
        else:
            print("GitHub is unreachable.")
        print(f"Showing cached data for {store.repository}: "
              f"reviews fetched for {store.review_completion()}% of {len(store)} cached pull requests.")
