import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from portal_auth.application.context import build_portal_context
from portal_auth.config.settings import Settings
from portal_auth.domain.permissions.entities import View
from portal_auth.domain.sessions.entities import SessionGrant, UserAccount, VerifiedLogin
from portal_auth.infrastructure.storage.key_value import MemoryKeyValueStorage
from portal_auth.interfaces.api.app import create_application
from portal_auth.shared.errors import (
    ConnectionFailedError,
    DocumentNotFoundError,
    InvalidCodeError,
    ServiceUnavailableError,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
VALID_CODE = '123456'

WORKER = UserAccount(idus='101', tipo_usuario='Trabajador', numero_celular='987654321', documento='12345678')
ADMIN = UserAccount(idus='1', tipo_usuario='Admin', numero_celular='999888777', documento='20123456789')

WORKER_VIEWS = [
    View(id=3, ruta='/reportes/ventas', nombre='Ventas', orden=2, categoria='Reportes'),
    View(id=1, ruta='/', nombre='Inicio', orden=0, icono='HomeIcon'),
    View(id=2, ruta='/kardex', nombre='Kardex', orden=1, icono='BoxIcon', categoria='Inventario'),
]
SYSTEM_VIEWS = [
    *WORKER_VIEWS,
    View(id=9, ruta='/admin/usuarios', nombre='Gestión de Usuarios', orden=9, categoria='Administración'),
]


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakePortalApi:
    """Backend em memória com contadores e falhas configuráveis."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.users = {WORKER.documento: WORKER, ADMIN.documento: ADMIN}
        self.granted = {WORKER.idus: list(WORKER_VIEWS), ADMIN.idus: list(SYSTEM_VIEWS)}
        self.system_views = list(SYSTEM_VIEWS)
        self.unavailable = False
        self.send_ok = True
        self.logout_fails = False
        self.views_fail = False
        self.system_views_fail = False
        self.healthy = True
        self.gate: Optional[asyncio.Event] = None
        self.session_ttl = timedelta(hours=8)
        self.code_ttl = timedelta(hours=1)

        self.validate_calls: list[tuple[str, str]] = []
        self.challenges_sent: list[str] = []
        self.logout_calls: list[str] = []
        self.granted_calls: list[str] = []
        self.system_calls = 0
        self.assigned: dict[str, list[int]] = {}
        self.closed = False

    async def validate_document(self, document: str, role: str) -> UserAccount:
        self.validate_calls.append((document, role))
        if self.unavailable:
            raise ServiceUnavailableError(status_code=503)
        user = self.users.get(document)
        if user is None or user.tipo_usuario != role:
            raise DocumentNotFoundError('Usuario no encontrado', status_code=404)
        return user

    async def send_challenge(self, idus: str, phone: Optional[str]) -> bool:
        self.challenges_sent.append(idus)
        return self.send_ok

    async def verify_challenge(self, idus: str, code: str, remember: bool) -> VerifiedLogin:
        if code != VALID_CODE:
            raise InvalidCodeError('Código incorrecto', status_code=400)
        user = next(user for user in self.users.values() if user.idus == idus)
        session = SessionGrant(
            token=f'token-{idus}',
            expira_en=self.clock() + self.session_ttl,
            codigo_acceso_expira=self.clock() + self.code_ttl,
            remember=remember,
        )
        return VerifiedLogin(user=user, session=session)

    async def logout(self, idus: str) -> bool:
        self.logout_calls.append(idus)
        if self.logout_fails:
            raise ConnectionFailedError()
        return True

    async def fetch_granted_views(self, idus: str) -> list[View]:
        self.granted_calls.append(idus)
        if self.gate is not None:
            await self.gate.wait()
        if self.views_fail:
            raise ConnectionFailedError()
        return list(self.granted.get(idus, []))

    async def fetch_system_views(self) -> list[View]:
        self.system_calls += 1
        if self.system_views_fail:
            raise ServiceUnavailableError(status_code=503)
        return list(self.system_views)

    async def assign_views(self, idus: str, view_ids: list[int]) -> bool:
        self.assigned[idus] = list(view_ids)
        self.granted[idus] = [view for view in self.system_views if view.id in view_ids]
        return True

    async def check_health(self) -> bool:
        return self.healthy

    async def aclose(self) -> None:
        self.closed = True


def session_for(clock: FakeClock, *, hours: float = 8, code_hours: float = 1, token: str = 'tok') -> SessionGrant:
    return SessionGrant(
        token=token,
        expira_en=clock() + timedelta(hours=hours),
        codigo_acceso_expira=clock() + timedelta(hours=code_hours),
    )


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        STORAGE_BACKEND='memory',
        LOG_LEVEL='DEBUG',
        RESEND_TICK_SECONDS=0.01,
        PERMISSION_SETTLE_TIMEOUT_S=1.0,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def api(clock):
    return FakePortalApi(clock)


@pytest.fixture
def storage():
    return MemoryKeyValueStorage()


@pytest.fixture
def portal(settings, api, storage, clock):
    return build_portal_context(settings, api=api, storage=storage, clock=clock)


@pytest.fixture
def client(portal):
    app = create_application(portal)
    with TestClient(app) as client:
        yield client
