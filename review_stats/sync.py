"""Incremental synchronization of a repository's PRs and reviews into the cache."""

import logging
from typing import List, Optional

from . import github_api
from .cache import CacheStore
from .exceptions import ProtocolError, RequestRejected, TransportError
from .models import PageQuery, RateLimitStatus, RemotePullRequest, ReviewOutcome


class RepositorySynchronizer:
    """Brings a CacheStore up to date with GitHub, a bounded amount per run.

    Until a full sweep of the repository's history has finished, pages are
    read oldest-created first, resuming after the last page read by a
    previous run. After that, pages are read most-recently-updated first,
    stopping at the first page that changes nothing. Either way, reviews are
    then fetched for every PR whose reviews are out of date.
    """

    def __init__(self, store: CacheStore, transport):
        """Initialize the synchronizer.

        Args:
            store: Cache to update
            transport: Object with a get(path, params) method, normally a
                GitHubAPIClient
        """
        self.store = store
        self.transport = transport
        self.last_rate_limit: Optional[RateLimitStatus] = None
        self.unreachable = False

    @property
    def repository(self) -> str:
        return self.store.repository

    @property
    def quota_exhausted(self) -> bool:
        return self.last_rate_limit is not None and self.last_rate_limit.exhausted

    @property
    def stopped_before_fetch(self) -> bool:
        """True if the last run made no data requests, leaving the cache as it was."""
        return self.unreachable or self.quota_exhausted

    def synchronize(self, page_budget: int) -> bool:
        """Fetch up to page_budget pages of PRs, then any outstanding reviews.

        Args:
            page_budget: Maximum number of PR pages to request in this run

        Returns:
            True if both PR paging and review fetching completed, False if
            the quota is exhausted, GitHub is unreachable or a request failed

        Raises:
            ProtocolError: If GitHub returned data that could not be parsed
            RequestRejected: If GitHub refused a request, e.g. an unknown
                repository or a bad token

            Once paging has started the cache is saved before either error
            propagates.
        """
        if page_budget < 1:
            raise ValueError(f"page_budget must be at least 1, got {page_budget}")

        if not self._check_rate_limit():
            return False

        try:
            if self.store.snapshot_complete:
                self._fetch_deltas(page_budget)
            else:
                self._fetch_snapshot(page_budget)
        except TransportError as e:
            logging.error(f"Error fetching pull requests of {self.repository}: {e}")
            self.store.save()
            return False
        except (ProtocolError, RequestRejected):
            self.store.save()
            raise

        try:
            complete = self._fetch_pending_reviews()
        finally:
            self.store.save()
        return complete

    def _check_rate_limit(self) -> bool:
        """Return True if there is quota left for this run."""
        self.unreachable = False
        self.last_rate_limit = None
        try:
            self.last_rate_limit = github_api.check_rate_limit(self.transport)
        except TransportError as e:
            logging.warning(f"GitHub is unreachable, so using only cached data: {e}")
            self.unreachable = True
            return False

        if self.last_rate_limit.exhausted:
            logging.warning(f"Rate limit exhausted, it will reset at {self.last_rate_limit.reset_datetime}")
            return False
        return True

    def _apply_page(self, records: List[RemotePullRequest]) -> int:
        """Merge one page of PR summaries into the cache.

        Returns:
            Number of PRs whose updated_at changed
        """
        changed = 0
        for pr in records:
            # Placeholders go in before the state gate resets reviews_fetched
            placeholder = ReviewOutcome.placeholder_for(pr.state)
            for reviewer in pr.requested_reviewers:
                self.store.assign_placeholder(pr.number, reviewer, placeholder)

            if self.store.upsert_pull_request_state(pr.number, pr.state, pr.updated_at):
                changed += 1
        return changed

    def _fetch_snapshot(self, page_budget: int):
        """Continue the full history sweep, oldest-created first."""
        page = self.store.last_snapshot_page_read + 1
        last_page = None
        pages_read = 0

        while pages_read < page_budget and (last_page is None or page <= last_page):
            records, last_page = github_api.fetch_page(
                self.transport, self.repository, PageQuery.snapshot(page), require_total=True
            )
            self._apply_page(records)
            pages_read += 1

            self.store.last_snapshot_page_read = page
            if page >= last_page:
                self.store.snapshot_complete = True
                logging.info(f"Snapshot of {self.repository} complete after page {page}")
            self.store.save()

            page += 1

        if not self.store.snapshot_complete:
            logging.info(f"Snapshot of {self.repository} read through page "
                         f"{self.store.last_snapshot_page_read} of {last_page}")

    def _fetch_deltas(self, page_budget: int):
        """Read recently updated PRs until a page changes nothing."""
        page = 1
        while page <= page_budget:
            records, last_page = github_api.fetch_page(
                self.transport, self.repository, PageQuery.delta(page)
            )
            changed = self._apply_page(records)
            logging.info(f"Delta page {page} of {self.repository}: {changed} of {len(records)} PRs changed")

            if changed == 0:
                break
            if last_page is not None and page >= last_page:
                break
            page += 1

    def _fetch_pending_reviews(self) -> bool:
        """Fetch reviews for every PR that needs them.

        Returns:
            False on the first request that fails
        """
        pending = self.store.pending_review_numbers()
        if pending:
            logging.info(f"Fetching reviews for {len(pending)} pull requests")

        for number in pending:
            try:
                reviews = github_api.fetch_reviews(self.transport, self.repository, number)
            except TransportError as e:
                logging.error(f"Error fetching reviews of PR #{number}: {e}")
                return False

            for review in reviews:
                self.store.record_review_outcome(number, review.reviewer, review.outcome)
            self.store.mark_reviews_fetched(number)
        return True
