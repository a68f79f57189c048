"""Functions for fetching pull requests, reviews and quota from GitHub.

Every function takes the transport as its first argument (normally a
GitHubAPIClient) so a fake can be substituted in tests.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests

from .exceptions import ProtocolError
from .models import PageQuery, RateLimitStatus, RemotePullRequest, RemoteReview

PER_PAGE = 100


def _json(response):
    try:
        return response.json()
    except ValueError as e:
        raise ProtocolError(f"Malformed JSON from {response.url}: {e}") from e


def parse_last_page(link_header: Optional[str], current_page: int) -> Optional[int]:
    """Find the total page count in a Link header.

    The header looks like this:
    <https://api.github.com/repositories/1/pulls?state=all&page=2>; rel="next", <https://api.github.com/repositories/1/pulls?state=all&page=60>; rel="last"

    GitHub leaves out rel="last" on the last page itself, in which case the
    current page is the last one.

    Args:
        link_header: Raw Link header value, or None
        current_page: Page number of the response carrying the header

    Returns:
        Last page number, or None if the header is absent

    Raises:
        ProtocolError: If the header is present but has no usable last page
    """
    if not link_header or not link_header.strip():
        return None

    links = {
        link.get('rel'): link.get('url', '')
        for link in requests.utils.parse_header_links(link_header)
    }

    if 'last' not in links:
        if 'prev' in links and 'next' not in links:
            return current_page
        raise ProtocolError(f"Link header has no last page: {link_header}")

    pages = parse_qs(urlparse(links['last']).query).get('page')
    try:
        return int(pages[-1])
    except (TypeError, ValueError):
        raise ProtocolError(f"Link header has a malformed last page: {link_header}")


def check_rate_limit(transport) -> RateLimitStatus:
    """Query the remaining request quota.

    Raises:
        TransportError: If GitHub is unreachable
        ProtocolError: If the response cannot be parsed
    """
    data = _json(transport.get('/rate_limit'))
    try:
        rate = data['rate']
        status = RateLimitStatus(
            limit=int(rate['limit']),
            remaining=int(rate['remaining']),
            reset=int(rate['reset'])
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed rate limit response: {e}") from e

    logging.debug(f"Rate limit: {status.remaining}/{status.limit} remaining")
    return status


def fetch_page(transport, repository: str, query: PageQuery,
               require_total: bool = False) -> Tuple[List[RemotePullRequest], Optional[int]]:
    """Fetch one page of pull request summaries.

    Args:
        transport: Object with a get(path, params) method
        repository: Repository in 'owner/name' form
        query: Sort order, state filter and page number
        require_total: Raise instead of returning None when the total page
            count cannot be determined

    Returns:
        Tuple of (records, total page count or None)

    Raises:
        TransportError: On network failure
        ProtocolError: On a malformed body or missing required pagination
    """
    params = query.to_params()
    params['per_page'] = PER_PAGE
    response = transport.get(f'/repos/{repository}/pulls', params=params)

    data = _json(response)
    if not isinstance(data, list):
        raise ProtocolError(f"Expected a list of pull requests, got {type(data).__name__}")
    try:
        records = [RemotePullRequest.from_api(item) for item in data]
    except (KeyError, TypeError) as e:
        raise ProtocolError(f"Malformed pull request record: {e}") from e

    link_header = response.headers.get('Link')
    total_pages = parse_last_page(link_header, query.page)
    if total_pages is None and query.page == 1:
        # No Link header on the first page means everything fit on it
        total_pages = 1

    if total_pages is None and require_total:
        raise ProtocolError(f"Missing pagination metadata for page {query.page} of {repository}")

    logging.debug(f"Fetched page {query.page}/{total_pages} of {repository}: {len(records)} PRs")
    return records, total_pages


def fetch_reviews(transport, repository: str, number: int) -> List[RemoteReview]:
    """Fetch the submitted reviews of one pull request, oldest first.

    Raises:
        TransportError: On network failure
        ProtocolError: On a malformed body
    """
    data = _json(transport.get(f'/repos/{repository}/pulls/{number}/reviews',
                               params={'per_page': PER_PAGE}))
    if not isinstance(data, list):
        raise ProtocolError(f"Expected a list of reviews, got {type(data).__name__}")

    reviews = []
    try:
        for item in data:
            review = RemoteReview.from_api(item)
            if review is not None:
                reviews.append(review)
    except (KeyError, TypeError) as e:
        raise ProtocolError(f"Malformed review record on PR #{number}: {e}") from e

    logging.debug(f"PR #{number}: {len(reviews)} reviews")
    return reviews
