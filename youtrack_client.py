"""YouTrack REST API client with status classification for the knowledge base export."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
import urllib3


class YouTrackError(Exception):
    """Base exception for unrecoverable YouTrack export errors."""
    pass


class AuthenticationError(YouTrackError):
    """Raised when the API rejects the token (HTTP 401). Always fatal."""
    pass


class ConnectionCheckError(YouTrackError):
    """Raised when the initial identity check does not succeed."""
    pass


def resolve_download_url(base_url: str, url: str) -> str:
    """
    Resolve an attachment URL against the instance base URL.

    Absolute http(s) URLs are returned untouched; relative ones are joined to
    ``base_url`` with exactly one slash between the two.
    """
    if url.startswith(('http://', 'https://')):
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


class YouTrackClient:
    """Thin YouTrack REST client: one attempt per call, responses classified by status code."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: Union[int, float] = 30,
        verify_ssl: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the client with bearer authentication.

        Args:
            base_url: YouTrack base URL (e.g., "https://youtrack.example.com")
            token: Permanent token, passed through verbatim as a bearer credential
            timeout: HTTP request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            logger: Logger instance
        """
        if not base_url:
            raise ValueError("YouTrack client requires a base_url")
        if not token:
            raise ValueError("YouTrack client requires a token")

        self.base_url = base_url.rstrip('/')
        self.api_base_url = f"{self.base_url}/api"
        self.timeout = timeout
        self.logger = logger or logging.getLogger('youtrack_kb_exporter.client')

        self.session = requests.Session()
        self.session.headers['Authorization'] = f'Bearer {token}'
        self.session.headers['Accept'] = 'application/json'
        self.session.headers['Content-Type'] = 'application/json'

        self.session.verify = verify_ssl
        if not verify_ssl:
            self.logger.warning("SSL verification disabled - this is insecure!")
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        self.logger.debug(f"Initialized YouTrack client for {self.api_base_url} (timeout={timeout}s)")

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        Issue a single authenticated GET against the API root.

        Args:
            endpoint: Path relative to ``<base_url>/api`` (e.g., "/articles/1-2")
            params: Optional query parameters

        Returns:
            Decoded JSON body on HTTP 200, otherwise None

        Raises:
            AuthenticationError: On HTTP 401
        """
        url = f"{self.api_base_url}{endpoint}"
        self.logger.debug(f"API Request: GET {url} params={params}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"  API Error (request failed): {endpoint} - {e}")
            return None

        status = response.status_code
        self.logger.debug(f"API Response: {status} {url}")

        if status == 200:
            try:
                return response.json()
            except ValueError:
                self.logger.warning(f"  API Error (invalid JSON): {endpoint}")
                return None

        if status == 404:
            self.logger.warning(f"  Warning: Resource not found - {endpoint}")
            return None

        if status == 401:
            raise AuthenticationError("Unauthorized. Please check your token!")

        self.logger.warning(f"  API Error ({status}): {endpoint}")
        return None

    def download_attachment(self, url: str, destination: Path) -> bool:
        """
        Download an attachment binary to ``destination``.

        Args:
            url: Attachment URL, absolute or relative to the base URL
            destination: Target file path; parent directories are created

        Returns:
            True if the file was written, False on failure

        Raises:
            AuthenticationError: On HTTP 401
        """
        download_url = resolve_download_url(self.base_url, url)
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        # Body goes to a sibling first; only a complete transfer replaces the destination.
        partial = destination.with_name(destination.name + '.part')

        try:
            with self.session.get(download_url, stream=True, timeout=self.timeout) as response:
                if response.status_code == 401:
                    raise AuthenticationError("Unauthorized. Please check your token!")
                if response.status_code != 200:
                    self.logger.warning(
                        f"    Download error: Failed to download {url} (HTTP {response.status_code})"
                    )
                    return False

                with open(partial, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=64 * 1024):
                        if chunk:
                            f.write(chunk)
            partial.replace(destination)
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"    Download error: Failed to download {url} - {e}")
            partial.unlink(missing_ok=True)
            return False
        except OSError as e:
            self.logger.warning(f"    Download error: Could not write {destination} - {e}")
            partial.unlink(missing_ok=True)
            return False

        return True

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> 'YouTrackClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @classmethod
    def from_config(cls, config: Dict[str, Any], logger: Optional[logging.Logger] = None) -> 'YouTrackClient':
        """
        Initialize YouTrack client from configuration dictionary.

        Args:
            config: Configuration dictionary with youtrack and advanced settings
            logger: Logger instance

        Returns:
            YouTrackClient instance
        """
        youtrack_config = config.get('youtrack', {})
        advanced_config = config.get('advanced', {})

        return cls(
            base_url=youtrack_config.get('base_url'),
            token=youtrack_config.get('token'),
            timeout=advanced_config.get('request_timeout', 30),
            verify_ssl=youtrack_config.get('verify_ssl', True),
            logger=logger
        )


__all__ = [
    'YouTrackClient',
    'YouTrackError',
    'AuthenticationError',
    'ConnectionCheckError',
    'resolve_download_url'
]
