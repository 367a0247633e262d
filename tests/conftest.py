import pytest

from flask_google_oauth_gateway.client import ClientCache
from flask_google_oauth_gateway.config import GatewaySettings

REDIRECT_URLS = ('https://app.example.com/login', 'https://staging.example.com/login')

DEFAULT_BEHAVIOUR = {
    'tokens': {
        'access_token': 'access-abc',
        'refresh_token': 'refresh-abc',
        'expires_in': 3599,
        'id_token': 'id-abc',
        'token_type': 'Bearer',
    },
    'userinfo': {'email': 'u@allowed.com', 'verified_email': True},
    'refresh_data': {'access_token': 'access-new', 'id_token': 'id-new', 'expires_in': 3599},
    'exchange_error': None,
}


class FakeOAuthClient:
    """Stands in for OAuthClient without talking to Google."""

    def __init__(self, client_id, client_secret, redirect_url, behaviour):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.behaviour = behaviour
        self.credentials = None
        self.calls = []

    def authorization_url(self, scope, access_type):
        self.calls.append(('authorization_url', scope, access_type))
        return f"https://accounts.google.com/o/oauth2/auth?redirect_uri={self.redirect_url}"

    def exchange_code(self, code):
        self.calls.append(('exchange_code', code))
        if self.behaviour['exchange_error']:
            raise self.behaviour['exchange_error']
        return dict(self.behaviour['tokens'])

    def set_credentials(self, tokens):
        self.calls.append(('set_credentials', dict(tokens)))
        self.credentials = dict(tokens)

    def refresh_access_token(self):
        self.calls.append(('refresh_access_token', dict(self.credentials)))
        return self.behaviour['refresh_data']

    def fetch_userinfo(self):
        self.calls.append(('fetch_userinfo',))
        return self.behaviour['userinfo']


@pytest.fixture
def behaviour():
    return {key: (dict(value) if isinstance(value, dict) else value) for key, value in DEFAULT_BEHAVIOUR.items()}


@pytest.fixture
def client_cache(behaviour):
    created = []

    def factory(client_id, client_secret, redirect_url):
        client = FakeOAuthClient(client_id, client_secret, redirect_url, behaviour)
        created.append(client)
        return client

    cache = ClientCache(factory=factory)
    cache.created = created
    return cache


@pytest.fixture
def settings():
    return GatewaySettings(
        client_id='client-id',
        client_secret='client-secret',
        redirect_urls=REDIRECT_URLS,
    )
