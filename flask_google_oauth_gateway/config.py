"""Configuration management for flask_google_oauth_gateway.

Every setting is read from an environment variable first. If the variable is
not set, the library attempts to fetch a Secret Manager secret with the same
name. Resolved values are frozen into a ``GatewaySettings`` that is loaded
once and never mutated.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import google.auth
from google.cloud import secretmanager

from .client import ClientCache

EXTENSION_NAME = 'flask_google_oauth_gateway'

CONFIG_NAMES = (
    'GOOGLE_CLIENT_ID',
    'GOOGLE_CLIENT_SECRET',
    'REDIRECT_URLS',
    'RESTRICT_TO_IPS',
    'RESTRICT_TO_DOMAINS',
)

_NUMBERED_REDIRECT_URL = re.compile(r'^REDIRECT_URL_(\d+)$')

logger = logging.getLogger(__name__)


def split_list(value: Optional[str]) -> Tuple[str, ...]:
    """Split a space-delimited setting into a tuple, dropping blanks."""
    if not value:
        return ()
    return tuple(item for item in value.split(' ') if item)


@dataclass(frozen=True)
class GatewaySettings:
    """Immutable gateway settings, loaded once per process."""

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_urls: Tuple[str, ...] = ()
    allowed_ips: Tuple[str, ...] = ()
    allowed_domains: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, values) -> 'GatewaySettings':
        """
        Build settings from a mapping of raw configuration values.

        ``REDIRECT_URLS`` is space-delimited. Numbered ``REDIRECT_URL_<n>``
        entries are appended after it in numeric order.

        Args:
            values: Mapping such as ``os.environ`` or ``app.config``

        Returns:
            GatewaySettings
        """
        redirect_urls = list(split_list(values.get('REDIRECT_URLS')))
        numbered = []
        for key in values.keys():
            match = _NUMBERED_REDIRECT_URL.match(key)
            if match and values.get(key):
                numbered.append((int(match.group(1)), values.get(key)))
        redirect_urls.extend(url for _, url in sorted(numbered))

        return cls(
            client_id=values.get('GOOGLE_CLIENT_ID') or None,
            client_secret=values.get('GOOGLE_CLIENT_SECRET') or None,
            redirect_urls=tuple(redirect_urls),
            allowed_ips=split_list(values.get('RESTRICT_TO_IPS')),
            allowed_domains=split_list(values.get('RESTRICT_TO_DOMAINS')),
        )


class Config:
    """Configuration manager for the flask_google_oauth_gateway module."""

    def __init__(self, app=None, use_secret_manager=True, client_cache=None):
        """
        Initialize configuration.

        Args:
            app: Flask application instance (optional)
            use_secret_manager: Fall back to Secret Manager for unset variables
            client_cache: ClientCache shared by all requests (optional)
        """
        self.app = app
        self.use_secret_manager = use_secret_manager
        self.client_cache = client_cache or ClientCache()
        self.logger = logger
        self._settings: Optional[GatewaySettings] = None

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """
        Initialize the Flask application with this config.

        Resolves all configuration values up front from:
        1. Environment variables
        2. Google Cloud Secret Manager (if env var not set)
        3. None (if neither available)

        Args:
            app: Flask application instance
        """
        self.app = app
        self.logger = app.logger

        if not hasattr(app, 'extensions'):
            app.extensions = {}
        app.extensions[EXTENSION_NAME] = self

        for name in CONFIG_NAMES:
            app.config.setdefault(name, self._resolve_config(name))
        for name in sorted(os.environ):
            if _NUMBERED_REDIRECT_URL.match(name):
                app.config.setdefault(name, os.environ[name])

        app.logger.info("Configuration initialized for flask_google_oauth_gateway")

    def _resolve_config(self, name: str) -> Optional[str]:
        """
        Resolve configuration value from environment variable or Secret Manager.

        Args:
            name: The name to use for both env var and Secret Manager secret

        Returns:
            The configuration value or None if not found
        """
        value = os.getenv(name)
        if value:
            self.logger.info(f"Loaded {name} from environment variable")
            return value

        if not self.use_secret_manager:
            self.logger.debug(f"Environment variable {name} not set")
            return None

        self.logger.info(f"Environment variable {name} not set, trying Secret Manager")
        try:
            value = self.get_secret(name)
            self.logger.info(f"Successfully loaded {name} from Secret Manager")
            return value
        except Exception as e:
            self.logger.debug(f"Could not load {name} from Secret Manager: {type(e).__name__}: {e}")
            return None

    def get_secret(self, secret_id: str, project_id: Optional[str] = None) -> str:
        """
        Retrieve a secret from Google Cloud Secret Manager.

        Uses Application Default Credentials (ADC) to determine the project
        if not explicitly provided.

        Args:
            secret_id: The ID of the secret to retrieve
            project_id: GCP project ID (optional, uses ADC if not provided)

        Returns:
            The secret value as a string
        """
        if not project_id:
            credentials, project_id = google.auth.default()

            if not project_id and hasattr(credentials, 'quota_project_id'):
                project_id = credentials.quota_project_id

            if not project_id:
                project_id = os.getenv('GOOGLE_CLOUD_PROJECT') or os.getenv('GCP_PROJECT') or os.getenv('GCLOUD_PROJECT')

            if not project_id:
                raise ValueError(
                    "Cannot determine GCP project ID. Either:\n"
                    "  - Run 'gcloud config set project YOUR_PROJECT_ID'\n"
                    "  - Set GOOGLE_CLOUD_PROJECT environment variable\n"
                    "  - Provide project_id parameter"
                )

        try:
            with secretmanager.SecretManagerServiceClient() as client:
                name = f"projects/{project_id}/secrets/{secret_id}/versions/latest"
                response = client.access_secret_version(request={"name": name})
                return response.payload.data.decode('UTF-8')
        except Exception as e:
            self.logger.error(f"Error accessing secret {secret_id}: {type(e).__name__}: {e}")
            raise

    def get_settings(self) -> GatewaySettings:
        """
        Get the immutable gateway settings, resolving them on first use.

        With a Flask app the values come from ``app.config``, which
        ``init_app`` already populated. Without one they are resolved
        directly from the environment (and Secret Manager).

        Returns:
            GatewaySettings
        """
        if self._settings is None:
            if self.app is not None:
                values = self.app.config
            else:
                values = {name: self._resolve_config(name) for name in CONFIG_NAMES}
                values.update(
                    (name, os.environ[name])
                    for name in os.environ
                    if _NUMBERED_REDIRECT_URL.match(name)
                )
            self._settings = GatewaySettings.from_mapping(values)
            self.logger.info(
                f"Gateway settings loaded: {len(self._settings.redirect_urls)} redirect URL(s), "
                f"IP restriction {'on' if self._settings.allowed_ips else 'off'}, "
                f"domain restriction {'on' if self._settings.allowed_domains else 'off'}"
            )
        return self._settings
