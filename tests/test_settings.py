from portal_auth.config.settings import Settings
from portal_auth.infrastructure.storage.key_value import MemoryKeyValueStorage, RedisKeyValueStorage
from portal_auth.infrastructure.storage.redis import create_storage
from portal_auth.shared.i18n import get_translator


def test_api_base_url_and_route_normalization():
    settings = Settings(_env_file=None, API_URL='http://backend:3001/ ', LOGIN_ROUTE='login', DEFAULT_ROUTE='')

    assert settings.API_BASE_URL == 'http://backend:3001/api'
    assert settings.LOGIN_ROUTE == '/login'
    assert settings.DEFAULT_ROUTE == '/'


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.RESEND_COOLDOWN_UNITS == 60
    assert settings.VERIFICATION_CODE_LENGTH == 6
    assert settings.ACCESS_DENIED_REDIRECT_SECONDS == 3
    assert settings.ADMIN_USER_TYPE == 'Admin'


def test_create_storage_by_backend():
    assert isinstance(create_storage(Settings(_env_file=None, STORAGE_BACKEND='memory')), MemoryKeyValueStorage)
    # redis.from_url não conecta até o primeiro comando
    assert isinstance(create_storage(Settings(_env_file=None, STORAGE_BACKEND='redis')), RedisKeyValueStorage)


def test_translator_falls_back_to_default_locale():
    translate = get_translator('pt-BR')

    assert translate('ACCESS_DENIED_TITLE') == 'Acceso Denegado'
    assert translate('UNKNOWN_KEY') == 'UNKNOWN_KEY'
    assert get_translator('EN')('CODE_LENGTH_INVALID', length=6) == 'The code must have 6 digits'


def test_translator_accepts_regional_locale():
    assert get_translator('en-US')('ACCESS_DENIED_TITLE') == 'Access Denied'
    assert get_translator(' ES-pe ')('ACCESS_DENIED_TITLE') == 'Acceso Denegado'
