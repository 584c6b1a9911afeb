import json
from http import HTTPStatus

import httpx
import pytest

from portal_auth.infrastructure.http.api_client import PortalApiClient
from portal_auth.shared.errors import (
    ChallengeExpiredError,
    ConnectionFailedError,
    DocumentNotFoundError,
    InvalidCodeError,
    InvalidRequestError,
    InvalidResponseError,
    ServiceUnavailableError,
)

BASE_URL = 'http://backend.test/api'


def make_client(handler, token=None) -> PortalApiClient:
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return PortalApiClient(http, token_provider=(lambda: token))


def reply(status=HTTPStatus.OK, **body):
    return lambda request: httpx.Response(status, json=body)


async def test_validate_document_posts_wire_names():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['path'] = request.url.path
        seen['body'] = json.loads(request.content)
        return httpx.Response(
            HTTPStatus.OK,
            json={'success': True, 'data': {'idus': 101, 'tipoUsuario': 'Trabajador', 'numeroCelular': '987654321', 'area': 'ventas'}},
        )

    client = make_client(handler)
    user = await client.validate_document('12345678', 'Trabajador')

    assert seen == {'path': '/api/auth/validar-documento', 'body': {'documento': '12345678', 'tipoUsuario': 'Trabajador'}}
    assert user.idus == '101'
    assert user.numero_celular == '987654321'
    assert user.extra == {'area': 'ventas'}


@pytest.mark.parametrize(
    ('status', 'error'),
    [
        (HTTPStatus.NOT_FOUND, DocumentNotFoundError),
        (HTTPStatus.SERVICE_UNAVAILABLE, ServiceUnavailableError),
        (HTTPStatus.BAD_REQUEST, InvalidRequestError),
    ],
)
async def test_validate_document_status_mapping(status, error):
    client = make_client(reply(status, success=False, message='detalle del servidor'))

    with pytest.raises(error) as exc_info:
        await client.validate_document('12345678', 'Trabajador')

    assert exc_info.value.status_code == status
    assert exc_info.value.message == 'detalle del servidor'


async def test_validate_document_success_false_is_not_found():
    client = make_client(reply(success=False, message='Usuario inactivo'))

    with pytest.raises(DocumentNotFoundError) as exc_info:
        await client.validate_document('12345678', 'Admin')

    assert exc_info.value.message == 'Usuario inactivo'


async def test_verify_challenge_builds_session():
    client = make_client(
        reply(
            success=True,
            data={
                'usuario': {'idus': '1', 'tipoUsuario': 'Admin'},
                'sesion': {'expiraEn': '2025-01-15T20:00:00Z', 'codigoAccesoExpira': '2025-01-15T13:00:00'},
                'token': 'jwt-token',
            },
        )
    )

    verified = await client.verify_challenge('1', '123456', True)

    assert verified.user.is_admin
    assert verified.session.token == 'jwt-token'
    assert verified.session.remember is True
    # Data sem fuso tratada como UTC
    assert verified.session.codigo_acceso_expira.tzinfo is not None
    assert verified.session.codigo_acceso_expira.hour == 13


@pytest.mark.parametrize(
    ('status', 'error'),
    [
        (HTTPStatus.BAD_REQUEST, InvalidCodeError),
        (HTTPStatus.UNAUTHORIZED, InvalidCodeError),
        (HTTPStatus.GONE, ChallengeExpiredError),
    ],
)
async def test_verify_challenge_errors(status, error):
    client = make_client(reply(status, success=False, message='Código incorrecto'))

    with pytest.raises(error):
        await client.verify_challenge('1', '000000', False)


async def test_verify_challenge_success_false_is_invalid_code():
    client = make_client(reply(success=False, message='Código incorrecto'))

    with pytest.raises(InvalidCodeError) as exc_info:
        await client.verify_challenge('1', '000000', False)

    assert exc_info.value.message == 'Código incorrecto'


async def test_granted_views_skip_malformed_entries():
    client = make_client(
        reply(
            success=True,
            data=[
                {'ID': 1, 'Ruta': '/kardex', 'Nombre': 'Kardex', 'Orden': 1, 'Icono': 'BoxIcon'},
                {'ID': 2, 'Ruta': 'sin-barra', 'Nombre': 'Mala', 'Orden': 2},
                {'ID': 3, 'Ruta': '/a/b/c', 'Nombre': 'Profunda', 'Orden': 3},
                {'ID': 4, 'Nombre': 'Sin ruta', 'Orden': 4},
                {'ID': 5, 'Ruta': '/reportes/ventas', 'Nombre': 'Ventas', 'Orden': 5, 'Categoria': 'Reportes'},
            ],
        )
    )

    views = await client.fetch_granted_views('101')

    assert [view.ruta for view in views] == ['/kardex', '/reportes/ventas']
    assert views[1].categoria == 'Reportes'


async def test_bearer_token_attached_when_present():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['auth'] = request.headers.get('Authorization')
        seen['path'] = request.url.path
        return httpx.Response(HTTPStatus.OK, json={'success': True, 'data': []})

    client = make_client(handler, token='abc')
    await client.fetch_system_views()

    assert seen == {'auth': 'Bearer abc', 'path': '/api/vistas'}


async def test_assign_views_puts_ids():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['method'] = request.method
        seen['path'] = request.url.path
        seen['body'] = json.loads(request.content)
        return httpx.Response(HTTPStatus.OK, json={'success': True})

    client = make_client(handler)

    assert await client.assign_views('7', [1, 3])
    assert seen == {'method': 'PUT', 'path': '/api/vistas/usuario/7', 'body': {'vistas': [1, 3]}}


async def test_network_failure_is_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('refused', request=request)

    client = make_client(handler)

    with pytest.raises(ConnectionFailedError):
        await client.logout('1')


async def test_non_json_body_is_invalid_response():
    client = make_client(lambda request: httpx.Response(HTTPStatus.OK, text='<html>'))

    with pytest.raises(InvalidResponseError):
        await client.send_challenge('1', '999')


async def test_check_health():
    assert await make_client(reply(connected=True)).check_health() is True
    assert await make_client(reply(HTTPStatus.SERVICE_UNAVAILABLE, connected=False)).check_health() is False

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('refused', request=request)

    assert await make_client(handler).check_health() is False


@pytest.mark.parametrize('body', [{'success': None}, {'success': True, 'message': {'texto': 'ok'}}])
async def test_malformed_envelope_is_invalid_response(body):
    client = make_client(lambda request: httpx.Response(HTTPStatus.OK, json=body))

    with pytest.raises(InvalidResponseError):
        await client.validate_document('12345678', 'Trabajador')
