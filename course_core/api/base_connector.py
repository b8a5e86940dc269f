"""
Base API Connector Class for the Student Course REST backend
Provides the shared HTTP session, request/response handling and origin tagging
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
import requests_cache

from course_core.api.origin import DataSource, origin_of
from course_core.errors import RemoteCallError
from course_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://10.0.2.2:5000/"


@dataclass
class APIConfig:
    """Configuration for API connection"""
    api_name: str
    base_url: str = DEFAULT_BASE_URL
    headers: Optional[Dict[str, str]] = None
    timeout: int = 30
    cache_enabled: bool = True
    cache_expire_after: int = 60          # seconds a GET stays fresh
    cache_stale_if_error: int = 604800    # seconds a stale GET may stand in for a failure
    additional_params: Dict[str, Any] = field(default_factory=dict)

    @property
    def normalized_base_url(self) -> str:
        return self.base_url if self.base_url.endswith("/") else self.base_url + "/"

    @property
    def images_base_url(self) -> str:
        """Base URL that relative image paths are resolved against."""
        return self.normalized_base_url + "uploads/"


@dataclass
class APIResponse:
    """Decoded response plus how the transport produced it."""
    data: Any
    origin: DataSource
    status_code: int


def create_session(
    config: APIConfig,
    cache_path: Optional[Union[str, Path]] = None,
) -> requests.Session:
    """
    Build the HTTP session shared by all connectors.

    With caching enabled this is a requests-cache session backed by SQLite:
    GETs are cached for `cache_expire_after` seconds and a stale copy is
    served when the backend is unreachable.
    """
    if config.cache_enabled and cache_path is not None:
        session = requests_cache.CachedSession(
            str(cache_path),
            backend="sqlite",
            expire_after=config.cache_expire_after,
            stale_if_error=config.cache_stale_if_error,
            allowable_methods=("GET", "HEAD"),
        )
    else:
        session = requests.Session()

    session.headers["Accept"] = "application/json"
    if config.headers:
        session.headers.update(config.headers)
    return session


class BaseAPIConnector(ABC):
    """Abstract base class for the REST resource connectors"""

    def __init__(self, config: APIConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session if session is not None else create_session(config)

    @property
    @abstractmethod
    def resource(self) -> str:
        """Resource path under the base URL, e.g. 'api/course'"""

    def _url(self, *parts: Any) -> str:
        path = "/".join([self.resource] + [str(p) for p in parts])
        return f"{self.config.normalized_base_url}{path}"

    def _make_request(
        self,
        path_parts: tuple = (),
        method: str = "GET",
        params: Optional[Dict] = None,
        json: Optional[Dict] = None,
        files: Optional[Dict] = None,
    ) -> requests.Response:
        """
        Make HTTP request with error handling

        Args:
            path_parts: Segments appended to the resource path
            method: HTTP method (GET, POST, PUT, DELETE)
            params: Query parameters
            json: JSON request body
            files: Multipart parts (text parts as (None, value) tuples)

        Returns:
            Response object with a 2xx status

        Raises:
            RemoteCallError: transport failure or non-2xx status
        """
        url = self._url(*path_parts)

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json,
                files=files,
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteCallError(
                f"API request failed for {self.config.api_name}: {e}",
                endpoint=f"{method} {url}",
            ) from e

        if not response.ok:
            raise RemoteCallError(
                f"{method} {url} returned {response.status_code}",
                endpoint=f"{method} {url}",
                status_code=response.status_code,
            )

        logger.debug(f"{method} {url} -> {response.status_code} ({origin_of(response).value})")
        return response

    def _decode(self, response: requests.Response) -> Any:
        """Decode a JSON body; an empty body decodes to None."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteCallError(
                f"Malformed JSON from {response.url}",
                endpoint=response.url,
                status_code=response.status_code,
            ) from e

    def _invalidate_cache(self) -> None:
        """
        Drop cached GET responses after a successful write.

        Without this a list fetched within the freshness window would replay
        the pre-write state into the local store.
        """
        cache = getattr(self.session, "cache", None)
        if cache is not None:
            cache.clear()
