# caminho: portal_auth/infrastructure/http/api_client.py
# Funções:
# - PortalApiClient: cliente httpx dos endpoints de autenticação e de vistas
# - Mapeia status HTTP para a taxonomia de erros (404/503/400/401/410)
# - Vistas malformadas são descartadas (com log) na fronteira

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Callable, Mapping, Optional

import httpx
from pydantic import ValidationError

from portal_auth.application.auth.dto import ApiEnvelope, UserAccountPayload, VerifiedLoginPayload, ViewPayload
from portal_auth.config.constants import (
    ENDPOINT_HEALTH,
    ENDPOINT_LOGOUT,
    ENDPOINT_SEND_CHALLENGE,
    ENDPOINT_SYSTEM_VIEWS,
    ENDPOINT_USER_VIEWS,
    ENDPOINT_VALIDATE_DOCUMENT,
    ENDPOINT_VERIFY_CHALLENGE,
)
from portal_auth.config.settings import Settings
from portal_auth.domain.permissions.entities import View
from portal_auth.domain.sessions.entities import SessionGrant, UserAccount, VerifiedLogin
from portal_auth.shared.errors import (
    ChallengeExpiredError,
    ConnectionFailedError,
    DocumentNotFoundError,
    InvalidCodeError,
    InvalidRequestError,
    InvalidResponseError,
    PortalServiceError,
    ServiceUnavailableError,
)
from portal_auth.shared.logging import log_warning

ErrorMap = Mapping[int, type[PortalServiceError]]

_DOCUMENT_ERRORS: ErrorMap = {
    HTTPStatus.BAD_REQUEST: InvalidRequestError,
    HTTPStatus.NOT_FOUND: DocumentNotFoundError,
    HTTPStatus.FORBIDDEN: DocumentNotFoundError,
    HTTPStatus.SERVICE_UNAVAILABLE: ServiceUnavailableError,
}

_VERIFY_ERRORS: ErrorMap = {
    HTTPStatus.BAD_REQUEST: InvalidCodeError,
    HTTPStatus.UNAUTHORIZED: InvalidCodeError,
    HTTPStatus.GONE: ChallengeExpiredError,
    HTTPStatus.SERVICE_UNAVAILABLE: ServiceUnavailableError,
}

_DEFAULT_ERRORS: ErrorMap = {
    HTTPStatus.BAD_REQUEST: InvalidRequestError,
    HTTPStatus.SERVICE_UNAVAILABLE: ServiceUnavailableError,
}


class PortalApiClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
    ) -> None:
        self._http = http
        self._token_provider = token_provider

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> PortalApiClient:
        http = httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT_S,
            headers={'Accept': 'application/json'},
        )
        return cls(http, **kwargs)

    def set_token_provider(self, provider: Optional[Callable[[], Optional[str]]]) -> None:
        self._token_provider = provider

    async def aclose(self) -> None:
        await self._http.aclose()

    # -- Login ------------------------------------------------------------------

    async def validate_document(self, document: str, role: str) -> UserAccount:
        envelope = await self._request(
            'POST',
            ENDPOINT_VALIDATE_DOCUMENT,
            json={'documento': document, 'tipoUsuario': role},
            errors=_DOCUMENT_ERRORS,
        )
        if not envelope.success or not envelope.data:
            raise DocumentNotFoundError(envelope.message, status_code=HTTPStatus.OK)
        try:
            return UserAccountPayload.model_validate(envelope.data).to_domain()
        except ValidationError as exc:
            raise InvalidResponseError(status_code=HTTPStatus.OK) from exc

    async def send_challenge(self, idus: str, phone: Optional[str]) -> bool:
        envelope = await self._request(
            'POST',
            ENDPOINT_SEND_CHALLENGE,
            json={'idus': idus, 'numeroCelular': phone},
        )
        return envelope.success

    async def verify_challenge(self, idus: str, code: str, remember: bool) -> VerifiedLogin:
        envelope = await self._request(
            'POST',
            ENDPOINT_VERIFY_CHALLENGE,
            json={'idus': idus, 'codigo': code, 'recordarSesion': remember},
            errors=_VERIFY_ERRORS,
        )
        if not envelope.success:
            raise InvalidCodeError(envelope.message, status_code=HTTPStatus.OK)
        try:
            payload = VerifiedLoginPayload.model_validate(envelope.data)
        except ValidationError as exc:
            raise InvalidResponseError(status_code=HTTPStatus.OK) from exc
        session = SessionGrant(
            token=payload.token,
            expira_en=payload.sesion.expira_en,
            codigo_acceso_expira=payload.sesion.codigo_acceso_expira,
            remember=remember,
        )
        return VerifiedLogin(user=payload.usuario.to_domain(), session=session)

    async def logout(self, idus: str) -> bool:
        envelope = await self._request('POST', ENDPOINT_LOGOUT, json={'idus': idus})
        return envelope.success

    # -- Vistas -----------------------------------------------------------------

    async def fetch_granted_views(self, idus: str) -> list[View]:
        envelope = await self._request('GET', ENDPOINT_USER_VIEWS.format(idus=idus))
        return self._parse_views(envelope, source='granted')

    async def fetch_system_views(self) -> list[View]:
        envelope = await self._request('GET', ENDPOINT_SYSTEM_VIEWS)
        return self._parse_views(envelope, source='system')

    async def assign_views(self, idus: str, view_ids: list[int]) -> bool:
        envelope = await self._request(
            'PUT',
            ENDPOINT_USER_VIEWS.format(idus=idus),
            json={'vistas': list(view_ids)},
        )
        return envelope.success

    async def check_health(self) -> bool:
        try:
            response = await self._http.get(ENDPOINT_HEALTH)
            return bool(response.json().get('connected'))
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            log_warning('BACKEND_HEALTH_CHECK_FAILED', {'error': str(exc)})
            return False

    # -- Helpers ----------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        errors: ErrorMap = _DEFAULT_ERRORS,
    ) -> ApiEnvelope:
        headers = {}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers['Authorization'] = f'Bearer {token}'

        try:
            response = await self._http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            log_warning('BACKEND_REQUEST_FAILED', {'method': method, 'path': path, 'error': type(exc).__name__})
            raise ConnectionFailedError() from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        message = body.get('message') if isinstance(body, dict) else None

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            error_cls = errors.get(response.status_code, PortalServiceError)
            log_warning(
                'BACKEND_REQUEST_REJECTED',
                {'method': method, 'path': path, 'status_code': response.status_code, 'code': error_cls.code},
            )
            raise error_cls(message, status_code=response.status_code)

        if not isinstance(body, dict):
            raise InvalidResponseError(status_code=response.status_code)
        try:
            return ApiEnvelope.model_validate(body)
        except ValidationError as exc:
            log_warning('BACKEND_ENVELOPE_REJECTED', {'method': method, 'path': path, 'errors': exc.error_count()})
            raise InvalidResponseError(status_code=response.status_code) from exc

    @staticmethod
    def _parse_views(envelope: ApiEnvelope, *, source: str) -> list[View]:
        if not envelope.success:
            raise PortalServiceError(envelope.message, status_code=HTTPStatus.OK)
        raw_items = envelope.data or []
        if not isinstance(raw_items, list):
            raise InvalidResponseError(status_code=HTTPStatus.OK)

        views: list[View] = []
        for raw in raw_items:
            try:
                views.append(ViewPayload.model_validate(raw).to_domain())
            except ValidationError as exc:
                log_warning(
                    'VIEW_PAYLOAD_REJECTED',
                    {'source': source, 'route': raw.get('Ruta') if isinstance(raw, dict) else None, 'errors': exc.error_count()},
                )
        return views
