"""Persistent cache of pull request and review state for one repository."""

import os
import json
import logging
import tempfile
from typing import Dict, List, Optional

from .exceptions import CorruptCache
from .models import CachedPullRequest, ReviewOutcome

CACHE_VERSION = 1


class CacheStore:
    """Holds everything known about one repository's pull requests.

    Besides the pull requests themselves the store keeps two snapshot
    cursors: whether a full sweep of the history has finished, and the last
    page of that sweep that was read. The store is loaded and saved as a
    whole.
    """

    def __init__(self, repository: str, cache_dir: str = '.'):
        """Create an empty store.

        Args:
            repository: Repository in 'owner/name' form
            cache_dir: Directory holding the cache files
        """
        if any(segment in ('', '.', '..') for segment in repository.split('/')):
            raise ValueError(f"Invalid repository name {repository!r}")
        self.repository = repository
        self.cache_dir = cache_dir
        self.pull_requests: Dict[int, CachedPullRequest] = {}
        self.snapshot_complete = False
        self.last_snapshot_page_read = 0

    @property
    def cache_file(self) -> str:
        return os.path.join(self.cache_dir, *self.repository.split('/')) + '.json'

    @classmethod
    def load(cls, repository: str, cache_dir: str = '.') -> 'CacheStore':
        """Load the store for a repository, or an empty one if none was saved.

        Raises:
            CorruptCache: If the cache file exists but cannot be read back
        """
        store = cls(repository, cache_dir)
        path = store.cache_file
        if not os.path.exists(path):
            logging.info(f"No cache found at {path}, starting fresh")
            return store

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CorruptCache(f"Failed to read cache {path}: {e}", path) from e

        if not isinstance(data, dict):
            raise CorruptCache(f"Cache {path} is not a JSON object", path)
        if data.get('version') != CACHE_VERSION:
            raise CorruptCache(f"Cache {path} has unsupported version {data.get('version')!r}", path)
        if data.get('repository') != repository:
            raise CorruptCache(f"Cache {path} belongs to {data.get('repository')!r}, not {repository!r}", path)

        try:
            store.snapshot_complete = bool(data['snapshot_complete'])
            store.last_snapshot_page_read = int(data['last_snapshot_page_read'])
            for key, pr_data in data['pull_requests'].items():
                number = int(key)
                store.pull_requests[number] = CachedPullRequest.from_dict(number, pr_data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CorruptCache(f"Cache {path} is malformed: {e}", path) from e

        logging.info(f"Loaded cache from {path} with {len(store.pull_requests)} pull requests")
        return store

    def to_dict(self) -> Dict:
        return {
            'version': CACHE_VERSION,
            'repository': self.repository,
            'snapshot_complete': self.snapshot_complete,
            'last_snapshot_page_read': self.last_snapshot_page_read,
            'pull_requests': {
                str(number): self.pull_requests[number].to_dict()
                for number in sorted(self.pull_requests)
            },
        }

    def save(self):
        """Write the whole store to disk.

        The data goes to a temporary file in the same directory which then
        replaces the cache file, so an interrupted save leaves the previous
        cache intact.
        """
        path = self.cache_file
        directory = os.path.dirname(path) or '.'
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logging.info(f"Saved cache to {path} with {len(self.pull_requests)} pull requests")

    def _find_or_create(self, number: int) -> CachedPullRequest:
        pr = self.pull_requests.get(number)
        if pr is None:
            pr = CachedPullRequest(number=number)
            self.pull_requests[number] = pr
        return pr

    def upsert_pull_request_state(self, number: int, state: str, updated_at: str) -> bool:
        """Record the latest state of a pull request.

        Returns:
            True if updated_at changed, in which case the PR's reviews need
            to be fetched again; False otherwise
        """
        pr = self._find_or_create(number)
        pr.state = state
        if pr.updated_at == updated_at:
            return False
        pr.updated_at = updated_at
        pr.reviews_fetched = False
        return True

    def mark_reviews_fetched(self, number: int):
        self._find_or_create(number).reviews_fetched = True

    def record_review_outcome(self, number: int, reviewer: str, outcome: str):
        """Set a reviewer's outcome on a PR, replacing any previous one."""
        self._find_or_create(number).reviewer_outcomes[reviewer] = outcome

    def assign_placeholder(self, number: int, reviewer: str, placeholder: ReviewOutcome) -> bool:
        """Record a Waiting/Unreviewed placeholder for a requested reviewer.

        A submitted outcome is never replaced by a placeholder.

        Returns:
            True if the placeholder was written
        """
        pr = self._find_or_create(number)
        current = pr.reviewer_outcomes.get(reviewer)
        if current is not None and not ReviewOutcome.classify(current).is_placeholder:
            return False
        pr.reviewer_outcomes[reviewer] = placeholder.value
        return True

    def last_known_update_timestamp(self, number: int) -> Optional[str]:
        pr = self.pull_requests.get(number)
        return pr.updated_at if pr else None

    def get(self, number: int) -> Optional[CachedPullRequest]:
        return self.pull_requests.get(number)

    def pending_review_numbers(self) -> List[int]:
        """Numbers of PRs whose reviews have not been fetched, ascending."""
        return sorted(number for number, pr in self.pull_requests.items() if not pr.reviews_fetched)

    def review_completion(self) -> int:
        """Percentage of cached PRs whose reviews have been fetched."""
        if not self.pull_requests:
            return 100
        fetched = sum(1 for pr in self.pull_requests.values() if pr.reviews_fetched)
        return 100 * fetched // len(self.pull_requests)

    def __len__(self) -> int:
        return len(self.pull_requests)

    def __contains__(self, number: int) -> bool:
        return number in self.pull_requests
