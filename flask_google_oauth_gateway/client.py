"""
Google OAuth client used by the gateway handlers.

The OAuth2 protocol itself is delegated to google_auth_oauthlib's Flow (and
the requests-oauthlib session behind it). The user profile is read through
the oauth2 v2 API.
"""

import logging
import os
import threading

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

from .errors import ExchangeFailed, ProfileFetchFailed, RefreshFailed
from .validators import validate_required

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"
EMAIL_SCOPE = "https://www.googleapis.com/auth/userinfo.email"

logger = logging.getLogger(__name__)

# Google adds "openid" to the granted scopes
os.environ.setdefault('OAUTHLIB_RELAX_TOKEN_SCOPE', '1')


class OAuthClient:
    """
    Thin proxy over the Google OAuth2 libraries, bound to one
    (client id, client secret, redirect URL) triple.

    Stored credentials are kept per thread so that concurrent requests
    sharing a warm client never see each other's tokens.
    """

    def __init__(self, client_id, client_secret, redirect_url):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self._local = threading.local()

    @property
    def credentials(self):
        """Credentials stored by the last ``set_credentials`` on this thread."""
        return getattr(self._local, 'credentials', None)

    def get_flow(self, scopes=(EMAIL_SCOPE,)):
        """
        Create a Google OAuth flow for this client.

        Args:
            scopes: OAuth scopes to request

        Returns:
            Flow: Configured Google OAuth flow
        """
        client_config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [self.redirect_url],
            }
        }

        # The URL and the code exchange happen in separate invocations, so
        # there is nowhere to keep a PKCE verifier between them.
        flow = Flow.from_client_config(
            client_config=client_config,
            scopes=list(scopes),
            autogenerate_code_verifier=False,
        )
        flow.redirect_uri = self.redirect_url

        return flow

    def authorization_url(self, scope=EMAIL_SCOPE, access_type='offline'):
        """
        Generate a Google OAuth authorization URL.

        Args:
            scope: Scope to request
            access_type: 'offline' also yields a refresh token

        Returns:
            str: The authorization URL
        """
        flow = self.get_flow(scopes=(scope,))
        authorization_url, _ = flow.authorization_url(access_type=access_type)
        return authorization_url

    def exchange_code(self, code):
        """
        Exchange an authorization code for tokens.

        Args:
            code: Authorization code from Google

        Returns:
            dict: Token set (access_token, optional refresh_token, expiry, id_token)

        Raises:
            ExchangeFailed: If Google rejects the code or the call fails
        """
        try:
            tokens = self.get_flow().fetch_token(code=code)
        except Exception as e:
            logger.error(f"Authorization code exchange failed: {type(e).__name__}: {e}")
            raise ExchangeFailed(f"Authorization code exchange failed: {e}") from e

        return dict(tokens)

    def set_credentials(self, tokens):
        """
        Store credentials for the following calls on this thread.

        Args:
            tokens: Token mapping; only the keys present are used
        """
        self._local.credentials = Credentials(
            token=tokens.get('access_token'),
            refresh_token=tokens.get('refresh_token'),
            id_token=tokens.get('id_token'),
            token_uri=TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
        )

    def refresh_access_token(self):
        """
        Ask Google for a fresh access token using the stored refresh token.

        Returns:
            dict: The raw token response, chiefly its id_token; empty if
            Google sent nothing back

        Raises:
            RefreshFailed: If there is no refresh token or the call fails
        """
        credentials = self.credentials
        refresh_token = credentials.refresh_token if credentials else None
        if not refresh_token:
            raise RefreshFailed("No refresh token stored")

        try:
            session = self.get_flow().oauth2session
            data = session.refresh_token(
                TOKEN_URI,
                refresh_token=refresh_token,
                client_id=self.client_id,
                client_secret=self.client_secret,
            )
        except Exception as e:
            logger.error(f"Token refresh failed: {type(e).__name__}: {e}")
            raise RefreshFailed(f"Token refresh failed: {e}") from e

        if not data:
            return {}

        data = dict(data)
        self.set_credentials({
            'access_token': data.get('access_token'),
            'refresh_token': data.get('refresh_token', refresh_token),
            'id_token': data.get('id_token'),
        })
        return data

    def fetch_userinfo(self):
        """
        Fetch the profile of the user the stored credentials belong to.

        Returns:
            dict: Profile including 'email'

        Raises:
            ProfileFetchFailed: If no credentials are stored or the call fails
        """
        credentials = self.credentials
        if credentials is None or not credentials.token:
            raise ProfileFetchFailed("No access token stored")

        try:
            service = build('oauth2', 'v2', credentials=credentials, cache_discovery=False)
            return service.userinfo().get().execute()
        except Exception as e:
            logger.error(f"Error fetching user profile: {type(e).__name__}: {e}")
            raise ProfileFetchFailed(f"Could not fetch the user profile: {e}") from e


class ClientCache:
    """
    Holds the last OAuthClient so warm processes can skip rebuilding it.

    A cached client is reused only when its client id, client secret and
    redirect URL all match the ones currently required.
    """

    def __init__(self, factory=OAuthClient):
        self.factory = factory
        self._client = None
        self._lock = threading.Lock()

    def get_client(self, settings, redirect_url):
        """
        Return an OAuth client for the settings and redirect URL.

        Args:
            settings: GatewaySettings with client id and secret
            redirect_url: Redirect URL resolved from the request origin

        Returns:
            OAuthClient

        Raises:
            MissingConfiguration: If client id or secret is not configured
        """
        with self._lock:
            client = self._client
            if client is not None and (
                client.client_id,
                client.client_secret,
                client.redirect_url,
            ) == (settings.client_id, settings.client_secret, redirect_url):
                logger.debug("OAuth client is already instantiated")
                return client

            validate_required(settings.client_id, 'GOOGLE_CLIENT_ID')
            validate_required(settings.client_secret, 'GOOGLE_CLIENT_SECRET')

            logger.debug(f"Instantiating OAuth client for {redirect_url}")
            self._client = self.factory(settings.client_id, settings.client_secret, redirect_url)
            return self._client

    def clear(self):
        """Drop the cached client."""
        with self._lock:
            self._client = None
