import pytest
from flask import Flask

from flask_google_oauth_gateway.config import EXTENSION_NAME, Config, GatewaySettings, split_list
from flask_google_oauth_gateway.errors import MissingConfiguration, MissingParameter
from flask_google_oauth_gateway.validators import validate_required

ENV_NAMES = (
    'GOOGLE_CLIENT_ID',
    'GOOGLE_CLIENT_SECRET',
    'REDIRECT_URLS',
    'RESTRICT_TO_IPS',
    'RESTRICT_TO_DOMAINS',
    'REDIRECT_URL_1',
    'REDIRECT_URL_2',
    'REDIRECT_URL_10',
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestValidateRequired:
    def test_accepts_non_empty_string(self):
        assert validate_required('value') == 'value'

    @pytest.mark.parametrize('value', [None, '', 0, 42, 1.5, [], {}, b'bytes'])
    def test_rejects_everything_else(self, value):
        with pytest.raises(MissingConfiguration):
            validate_required(value)

    def test_names_the_variable(self):
        with pytest.raises(MissingConfiguration, match='GOOGLE_CLIENT_ID'):
            validate_required(None, 'GOOGLE_CLIENT_ID')

    def test_custom_error(self):
        with pytest.raises(MissingParameter):
            validate_required('', 'code', error=MissingParameter)


class TestGatewaySettings:
    def test_split_list_drops_blanks(self):
        assert split_list('a  b c ') == ('a', 'b', 'c')
        assert split_list('') == ()
        assert split_list(None) == ()

    def test_from_mapping(self):
        settings = GatewaySettings.from_mapping({
            'GOOGLE_CLIENT_ID': 'id',
            'GOOGLE_CLIENT_SECRET': 'secret',
            'REDIRECT_URLS': 'https://a.example.com https://b.example.com',
            'RESTRICT_TO_IPS': '10.0.0.1 10.0.0.2',
            'RESTRICT_TO_DOMAINS': '@corp.example.com',
        })
        assert settings.client_id == 'id'
        assert settings.client_secret == 'secret'
        assert settings.redirect_urls == ('https://a.example.com', 'https://b.example.com')
        assert settings.allowed_ips == ('10.0.0.1', '10.0.0.2')
        assert settings.allowed_domains == ('@corp.example.com',)

    def test_numbered_redirect_urls_follow_in_numeric_order(self):
        settings = GatewaySettings.from_mapping({
            'REDIRECT_URLS': 'https://first.example.com',
            'REDIRECT_URL_10': 'https://ten.example.com',
            'REDIRECT_URL_2': 'https://two.example.com',
            'REDIRECT_URL_1': 'https://one.example.com',
        })
        assert settings.redirect_urls == (
            'https://first.example.com',
            'https://one.example.com',
            'https://two.example.com',
            'https://ten.example.com',
        )

    def test_missing_values_are_empty(self):
        settings = GatewaySettings.from_mapping({'GOOGLE_CLIENT_ID': ''})
        assert settings.client_id is None
        assert settings.client_secret is None
        assert settings.redirect_urls == ()
        assert settings.allowed_ips == ()
        assert settings.allowed_domains == ()

    def test_is_immutable(self):
        settings = GatewaySettings(client_id='id')
        with pytest.raises(AttributeError):
            settings.client_id = 'other'


class TestConfig:
    def test_without_app_reads_environment(self, clean_env):
        clean_env.setenv('GOOGLE_CLIENT_ID', 'env-id')
        clean_env.setenv('GOOGLE_CLIENT_SECRET', 'env-secret')
        clean_env.setenv('REDIRECT_URLS', 'https://app.example.com')
        clean_env.setenv('REDIRECT_URL_1', 'https://other.example.com')

        settings = Config(use_secret_manager=False).get_settings()

        assert settings.client_id == 'env-id'
        assert settings.client_secret == 'env-secret'
        assert settings.redirect_urls == ('https://app.example.com', 'https://other.example.com')

    def test_settings_are_loaded_once(self, clean_env):
        clean_env.setenv('GOOGLE_CLIENT_ID', 'first')
        config = Config(use_secret_manager=False)
        settings = config.get_settings()

        clean_env.setenv('GOOGLE_CLIENT_ID', 'second')
        assert config.get_settings() is settings
        assert config.get_settings().client_id == 'first'

    def test_init_app_populates_app_config(self, clean_env):
        clean_env.setenv('GOOGLE_CLIENT_ID', 'env-id')
        clean_env.setenv('RESTRICT_TO_DOMAINS', '@corp.example.com')
        app = Flask(__name__)

        config = Config(app, use_secret_manager=False)

        assert app.extensions[EXTENSION_NAME] is config
        assert app.config['GOOGLE_CLIENT_ID'] == 'env-id'
        assert app.config['GOOGLE_CLIENT_SECRET'] is None
        assert config.get_settings().allowed_domains == ('@corp.example.com',)

    def test_app_config_takes_precedence(self, clean_env):
        clean_env.setenv('GOOGLE_CLIENT_ID', 'env-id')
        app = Flask(__name__)
        app.config['GOOGLE_CLIENT_ID'] = 'app-id'

        config = Config(app, use_secret_manager=False)

        assert config.get_settings().client_id == 'app-id'

    def test_falls_back_to_secret_manager(self, clean_env, monkeypatch):
        secrets = {'GOOGLE_CLIENT_SECRET': 'from-secret-manager'}

        def fake_get_secret(self, secret_id, project_id=None):
            if secret_id in secrets:
                return secrets[secret_id]
            raise KeyError(secret_id)

        monkeypatch.setattr(Config, 'get_secret', fake_get_secret)

        settings = Config().get_settings()

        assert settings.client_secret == 'from-secret-manager'
        assert settings.client_id is None
