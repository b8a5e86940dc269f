"""
API Configuration Manager
Centralized management of the backend configuration and connector instances
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
import streamlit as st

from course_core.api.base_connector import APIConfig, DEFAULT_BASE_URL, create_session
from course_core.api.course_connector import CourseAPIConnector
from course_core.api.student_connector import StudentAPIConnector
from course_core.errors import ConfigurationError
from course_core.logging import get_logger

logger = get_logger(__name__)

# Environment variables consulted when no Streamlit secrets are configured
ENV_BASE_URL = "COURSES_API_BASE_URL"
ENV_TIMEOUT = "COURSES_API_TIMEOUT"
ENV_HTTP_CACHE = "COURSES_HTTP_CACHE"


class APIConfigManager:
    """
    Manages the backend configuration and creates connector instances

    Both connectors share one HTTP session, so they share the transparent
    response cache as well.

    Usage:
        config_manager = APIConfigManager(cache_path=Path("local_data/cache/http_cache"))
        courses = config_manager.get_course_connector().list_courses()
    """

    CONFIG_KEYS = ["base_url", "timeout", "headers", "cache_enabled",
                   "cache_expire_after", "cache_stale_if_error"]

    def __init__(
        self,
        overrides: Optional[Dict[str, Any]] = None,
        cache_path: Optional[Union[str, Path]] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize with configuration from Streamlit secrets, environment or defaults"""
        self.settings = {**self._load_settings(), **(overrides or {})}
        self.config = self._build_config(self.settings)
        self.cache_path = cache_path
        self._session: Optional[requests.Session] = session

    def _load_settings(self) -> Dict[str, Any]:
        """
        Load API settings from Streamlit secrets, falling back to the environment

        Expected secrets.toml format:
        [api]
        base_url = "http://10.0.2.2:5000/"
        timeout = 30
        cache_enabled = true
        """
        try:
            if hasattr(st, "secrets") and "api" in st.secrets:
                return dict(st.secrets["api"])
        except Exception:
            # No secrets.toml outside a Streamlit deployment
            pass

        return self._get_env_settings()

    def _get_env_settings(self) -> Dict[str, Any]:
        settings: Dict[str, Any] = {"base_url": os.getenv(ENV_BASE_URL, DEFAULT_BASE_URL)}
        if os.getenv(ENV_TIMEOUT):
            settings["timeout"] = os.getenv(ENV_TIMEOUT)
        if os.getenv(ENV_HTTP_CACHE):
            settings["cache_enabled"] = os.getenv(ENV_HTTP_CACHE).lower() not in ("0", "false", "no")
        return settings

    def _build_config(self, settings: Dict[str, Any]) -> APIConfig:
        """Build APIConfig from merged settings"""
        base_url = settings.get("base_url") or DEFAULT_BASE_URL
        if not str(base_url).startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid API base URL: {base_url}",
                config_key="base_url",
                expected_type="http(s) URL",
            )

        try:
            timeout = int(settings.get("timeout", 30))
            expire_after = int(settings.get("cache_expire_after", 60))
            stale_if_error = int(settings.get("cache_stale_if_error", 604800))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid numeric API setting: {e}",
                expected_type="int",
            ) from e

        return APIConfig(
            api_name="student_courses",
            base_url=str(base_url),
            headers=settings.get("headers"),
            timeout=timeout,
            cache_enabled=bool(settings.get("cache_enabled", True)),
            cache_expire_after=expire_after,
            cache_stale_if_error=stale_if_error,
            additional_params={
                k: v for k, v in settings.items() if k not in self.CONFIG_KEYS
            },
        )

    @property
    def session(self) -> requests.Session:
        """Shared HTTP session (created on first use)."""
        if self._session is None:
            self._session = create_session(self.config, self.cache_path)
            logger.info(
                f"HTTP session ready for {self.config.base_url} "
                f"(cache={'on' if self.config.cache_enabled and self.cache_path else 'off'})"
            )
        return self._session

    def get_course_connector(self) -> CourseAPIConnector:
        return CourseAPIConnector(self.config, session=self.session)

    def get_student_connector(self) -> StudentAPIConnector:
        return StudentAPIConnector(self.config, session=self.session)
