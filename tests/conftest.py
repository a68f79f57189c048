"""
Shared fixtures: an in-memory GitHub transport for synchronization tests
"""

import pytest
from unittest.mock import Mock

from review_stats.exceptions import RequestRejected, TransportError

REPO = 'owner/repo'


def make_pr(number, state='closed', updated_at='2020-01-01T00:00:00Z', reviewers=()):
    """Build a pull request summary as returned by the pulls listing."""
    return {
        'number': number,
        'state': state,
        'updated_at': updated_at,
        'requested_reviewers': [{'login': login} for login in reviewers],
    }


def make_review(login, state):
    return {'user': {'login': login}, 'state': state}


def make_response(data, link=None, url='https://api.github.com/test'):
    response = Mock()
    response.json.return_value = data
    response.headers = {'Link': link} if link else {}
    response.url = url
    return response


def link_header(page, last_page, repo=REPO):
    """Link header as GitHub sends it for a page of the pulls listing."""
    base = f'https://api.github.com/repos/{repo}/pulls?state=all'
    links = []
    if page > 1:
        links.append(f'<{base}&page={page - 1}>; rel="prev"')
    if page < last_page:
        links.append(f'<{base}&page={page + 1}>; rel="next"')
        links.append(f'<{base}&page={last_page}>; rel="last"')
    if page > 1:
        links.append(f'<{base}&page=1>; rel="first"')
    return ', '.join(links) or None


class FakeTransport:
    """Serves pages of PRs, reviews and the rate limit from memory.

    pages maps sort order ('created' or 'updated') to a list of pages, each
    a list of PR dicts. reviews maps PR number to a list of review dicts.
    Paths listed in fail_paths raise TransportError, pages listed in
    reject_pages raise RequestRejected.
    """

    def __init__(self, pages=None, reviews=None, remaining=5000, reset=1600000000):
        self.pages = pages or {}
        self.reviews = reviews or {}
        self.remaining = remaining
        self.reset = reset
        self.fail_paths = set()
        self.fail_pages = set()
        self.reject_pages = set()
        self.calls = []

    def page_requests(self, sort=None):
        return [params['page'] for path, params in self.calls
                if path.endswith('/pulls') and (sort is None or params['sort'] == sort)]

    def review_requests(self):
        return [int(path.split('/')[-2]) for path, _ in self.calls if path.endswith('/reviews')]

    def get(self, path, params=None):
        self.calls.append((path, dict(params or {})))
        if path in self.fail_paths:
            raise TransportError(f"GET {path} failed")

        if path == '/rate_limit':
            return make_response({'rate': {'limit': 5000, 'remaining': self.remaining, 'reset': self.reset}})

        if path.endswith('/pulls'):
            page = params['page']
            if page in self.fail_pages:
                raise TransportError(f"GET {path} page {page} failed")
            if page in self.reject_pages:
                raise RequestRejected(f"GET {path} page {page} rejected", 404)
            pages = self.pages.get(params['sort'], [])
            data = pages[page - 1] if page <= len(pages) else []
            return make_response(data, link_header(page, max(len(pages), 1)))

        if path.endswith('/reviews'):
            number = int(path.split('/')[-2])
            return make_response(self.reviews.get(number, []))

        raise AssertionError(f"Unexpected path {path}")


@pytest.fixture
def cache_dir(tmp_path):
    return str(tmp_path)
