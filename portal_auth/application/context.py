# caminho: portal_auth/application/context.py
# Funções:
# - PortalApi: protocolo completo da fronteira com o backend
# - PortalContext: agrega store, AuthState, PermissionLoader, guardas e o fluxo de login
# - build_portal_context(): monta o contexto a partir das Settings (adaptadores injetáveis)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from portal_auth.application.auth.auth_state import AuthState
from portal_auth.application.auth.login_flow import ChallengeGateway, LoginFlow
from portal_auth.application.auth.session_store import Clock, SessionStore
from portal_auth.application.guards import AdminRouteGuard, RouteGuard
from portal_auth.application.permissions.loader import PermissionLoader, ViewsGateway
from portal_auth.config.settings import Settings
from portal_auth.domain.sessions.entities import utc_now
from portal_auth.infrastructure.http.api_client import PortalApiClient
from portal_auth.infrastructure.storage.key_value import KeyValueStorage
from portal_auth.infrastructure.storage.redis import create_storage
from portal_auth.shared.i18n import get_translator
from portal_auth.shared.logging import log_info


class PortalApi(ChallengeGateway, ViewsGateway, Protocol):
    async def logout(self, idus: str) -> bool: ...
    async def assign_views(self, idus: str, view_ids: list[int]) -> bool: ...
    async def check_health(self) -> bool: ...
    async def aclose(self) -> None: ...


@dataclass(slots=True)
class PortalContext:
    settings: Settings
    api: PortalApi
    storage: KeyValueStorage
    store: SessionStore
    auth: AuthState
    permissions: PermissionLoader
    route_guard: RouteGuard
    admin_guard: AdminRouteGuard
    translator: Callable[..., str]
    login_flow: Optional[LoginFlow] = field(default=None)

    async def start(self) -> None:
        await self.auth.initialize()
        log_info('PORTAL_CONTEXT_STARTED', {'status': self.auth.status.value})

    async def aclose(self) -> None:
        if self.login_flow is not None:
            await self.login_flow.aclose()
        await self.api.aclose()
        await self.storage.aclose()

    def new_login_flow(self) -> LoginFlow:
        settings = self.settings
        if self.login_flow is not None:
            # Fluxo anterior abandonado: para a contagem regressiva pendente
            self.login_flow.stop_countdown()
        self.login_flow = LoginFlow(
            self.api,
            self.auth,
            cooldown_units=settings.RESEND_COOLDOWN_UNITS,
            tick_seconds=settings.RESEND_TICK_SECONDS,
            code_length=settings.VERIFICATION_CODE_LENGTH,
            default_route=settings.DEFAULT_ROUTE,
            login_route=settings.LOGIN_ROUTE,
            translator=self.translator,
        )
        return self.login_flow

    def current_login_flow(self) -> LoginFlow:
        return self.login_flow or self.new_login_flow()


def build_portal_context(
    settings: Settings,
    *,
    api: Optional[PortalApi] = None,
    storage: Optional[KeyValueStorage] = None,
    clock: Clock = utc_now,
) -> PortalContext:
    client = api
    if client is None:
        client = PortalApiClient.from_settings(settings)
    storage = storage or create_storage(settings)
    translator = get_translator(settings.DEFAULT_LOCALE)

    store = SessionStore(storage, clock=clock)
    auth = AuthState(store, client, clock=clock)
    if isinstance(client, PortalApiClient):
        # Token Bearer lido da sessão atual a cada requisição
        client.set_token_provider(lambda: auth.token)

    permissions = PermissionLoader(
        client,
        default_route=settings.DEFAULT_ROUTE,
        login_route=settings.LOGIN_ROUTE,
    )
    # Carga de vistas só começa depois que a identidade foi resolvida
    auth.subscribe(permissions.on_user_changed)

    guard_options = {
        'login_route': settings.LOGIN_ROUTE,
        'redirect_seconds': settings.ACCESS_DENIED_REDIRECT_SECONDS,
        'translator': translator,
    }
    return PortalContext(
        settings=settings,
        api=client,
        storage=storage,
        store=store,
        auth=auth,
        permissions=permissions,
        route_guard=RouteGuard(auth, permissions, **guard_options),
        admin_guard=AdminRouteGuard(auth, permissions, admin_user_type=settings.ADMIN_USER_TYPE, **guard_options),
        translator=translator,
    )
