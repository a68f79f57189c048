"""
Unit tests for the GitHub API client transport
"""

import pytest
import requests
from unittest.mock import Mock

from review_stats.api_client import DEFAULT_API_URL, GitHubAPIClient
from review_stats.exceptions import RequestRejected, TransportError


class TestClientInitialization:
    """Test cases for client setup."""

    def test_token_sets_authorization_header(self):
        """Test that a token is sent with every request."""
        client = GitHubAPIClient(token='test_token')
        assert client.session.headers['Authorization'] == 'token test_token'
        assert client.session.headers['Accept'] == 'application/vnd.github.v3+json'

    def test_token_from_environment(self, monkeypatch):
        """Test that GITHUB_TOKEN is used when no token is passed."""
        monkeypatch.setenv('GITHUB_TOKEN', 'env_token')
        client = GitHubAPIClient()
        assert client.token == 'env_token'

    def test_no_token(self, monkeypatch):
        """Test that the client works without a token."""
        monkeypatch.delenv('GITHUB_TOKEN', raising=False)
        client = GitHubAPIClient()
        assert client.token is None
        assert 'Authorization' not in client.session.headers

    def test_default_api_url(self, monkeypatch):
        """Test URL building against the default API."""
        monkeypatch.delenv('GITHUB_API_URL', raising=False)
        client = GitHubAPIClient(token='t')
        assert client.api_url == DEFAULT_API_URL
        assert client.url('/rate_limit') == 'https://api.github.com/rate_limit'

    def test_custom_api_url(self):
        """Test URL building against a GitHub Enterprise API."""
        client = GitHubAPIClient(token='t', api_url='https://github.example.com/api/v3/')
        assert client.url('repos/o/r/pulls') == 'https://github.example.com/api/v3/repos/o/r/pulls'


class TestClientGet:
    """Test cases for GET requests and error translation."""

    @pytest.fixture
    def client(self):
        client = GitHubAPIClient(token='test_token')
        client.session = Mock()
        return client

    def test_successful_get(self, client):
        """Test that a 2xx response is returned."""
        response = Mock()
        response.status_code = 200
        client.session.get.return_value = response

        result = client.get('/rate_limit', params={'a': 1})

        assert result is response
        client.session.get.assert_called_once_with(
            'https://api.github.com/rate_limit', params={'a': 1}, timeout=client.timeout
        )

    def test_http_error_becomes_transport_error(self, client):
        """Test that an error status is a transport error."""
        response = Mock()
        response.status_code = 403
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("403 Forbidden")
        client.session.get.return_value = response

        with pytest.raises(TransportError):
            client.get('/repos/o/r/pulls')

    @pytest.mark.parametrize('status', [401, 404, 422])
    def test_client_error_is_rejected(self, client, status):
        """Test that permanent 4xx responses are not treated as retryable."""
        response = Mock()
        response.status_code = status
        client.session.get.return_value = response

        with pytest.raises(RequestRejected) as exc_info:
            client.get('/repos/o/r/pulls')
        assert exc_info.value.status_code == status

    @pytest.mark.parametrize('status', [403, 429])
    def test_rate_limit_status_is_transport_error(self, client, status):
        """Test that rate limiting responses stay retryable."""
        response = Mock()
        response.status_code = status
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status}")
        client.session.get.return_value = response

        with pytest.raises(TransportError):
            client.get('/repos/o/r/pulls')

    def test_server_error_is_transport_error(self, client):
        """Test that a 5xx left over after adapter retries is retryable."""
        response = Mock()
        response.status_code = 502
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("502 Bad Gateway")
        client.session.get.return_value = response

        with pytest.raises(TransportError):
            client.get('/repos/o/r/pulls')

    def test_network_error_becomes_transport_error(self, client):
        """Test that connection failures are transport errors."""
        client.session.get.side_effect = requests.exceptions.ConnectionError("Network error")

        with pytest.raises(TransportError):
            client.get('/repos/o/r/pulls')

    def test_timeout_becomes_transport_error(self, client):
        """Test that timeouts are transport errors."""
        client.session.get.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(TransportError):
            client.get('/repos/o/r/pulls')


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
