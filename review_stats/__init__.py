"""GitHub review stats - mirror a repository's PR reviews and tally them per reviewer."""

__version__ = '1.0.0'

from .models import ReviewOutcome, ReviewerStats, CachedPullRequest
from .exceptions import ReviewStatsError, TransportError, ProtocolError, CorruptCache
from .api_client import GitHubAPIClient
from .cache import CacheStore
from .sync import RepositorySynchronizer
from .stats import compute_stats
from .output import OutputFormatter

__all__ = [
    'ReviewOutcome',
    'ReviewerStats',
    'CachedPullRequest',
    'ReviewStatsError',
    'TransportError',
    'ProtocolError',
    'CorruptCache',
    'GitHubAPIClient',
    'CacheStore',
    'RepositorySynchronizer',
    'compute_stats',
    'OutputFormatter',
]
