"""GitHub API client wrapping an HTTP session with retry logic."""

import os
import logging
from typing import Dict
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import RequestRejected, TransportError

DEFAULT_API_URL = 'https://api.github.com'

# Client errors that clear up on their own (rate limiting)
RETRYABLE_CLIENT_ERRORS = (403, 429)


class GitHubAPIClient:
    """Performs GET requests against the GitHub REST API."""

    def __init__(self, token: str = None, api_url: str = None, timeout: float = 30):
        """Initialize the GitHub API client.

        Args:
            token: GitHub personal access token for authentication
            api_url: Base URL of the REST API (defaults to api.github.com)
            timeout: Per-request timeout in seconds
        """
        # Use provided token or fall back to environment variable
        self.token = token or os.environ.get('GITHUB_TOKEN')
        self.api_url = (api_url or os.environ.get('GITHUB_API_URL') or DEFAULT_API_URL).rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

        # Requests are issued one at a time, so a small pool is enough
        adapter = HTTPAdapter(
            pool_connections=1,
            pool_maxsize=1,
            max_retries=Retry(
                total=3,
                backoff_factor=0.3,
                status_forcelist=[500, 502, 503, 504]
            )
        )
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

        self.session.headers.update({
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'github-review-stats'
        })

        if self.token:
            self.session.headers['Authorization'] = f'token {self.token}'
            logging.info("Initialized GitHub API client with token")
        else:
            logging.warning("No GitHub token provided. Rate limits will be much lower.")
            logging.warning("Set GITHUB_TOKEN environment variable or pass token as argument.")

    def url(self, path: str) -> str:
        """Build an absolute API URL from a path such as '/rate_limit'."""
        return f"{self.api_url}/{path.lstrip('/')}"

    def get(self, path: str, params: Dict = None) -> requests.Response:
        """Make a single GET request to the GitHub API.

        Args:
            path: API path relative to the base URL
            params: Query parameters

        Returns:
            Response object with a 2xx status

        Raises:
            RequestRejected: On a 4xx status other than rate limiting
            TransportError: On network failure or any other non-2xx status
        """
        url = self.url(path)
        logging.debug(f"GET {url} {params or ''}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"GET {url} failed: {e}") from e

        status = response.status_code
        if 400 <= status < 500 and status not in RETRYABLE_CLIENT_ERRORS:
            raise RequestRejected(f"GET {url} was rejected with status {status}", status)

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e
        return response
