# caminho: portal_auth/application/guards.py
# Funções:
# - NavigationTarget: rota pedida + rota de origem (independente do roteador)
# - GuardOutcome: RENDER / LOADING / REDIRECT / ACCESS_DENIED
# - RouteGuard: exige sessão válida e vista concedida para a rota
# - AdminRouteGuard: seção restrita ao tipo de usuário administrador

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from portal_auth.application.auth.auth_state import AuthState
from portal_auth.application.permissions.loader import PermissionLoader
from portal_auth.config.constants import USER_TYPE_ADMIN
from portal_auth.domain.permissions.authorizer import AccessDecision, AuthStatus, PermissionStatus, authorize
from portal_auth.shared.i18n import get_default_translator
from portal_auth.shared.logging import log_info


class OutcomeKind(str, Enum):
    RENDER = 'render'
    LOADING = 'loading'
    REDIRECT = 'redirect'
    ACCESS_DENIED = 'access_denied'


@dataclass(slots=True, frozen=True)
class NavigationTarget:
    path: str
    origin: Optional[str] = None


@dataclass(slots=True, frozen=True)
class AccessDeniedView:
    requested_path: str
    escape_route: str
    title: str
    message: str
    redirect_message: str
    redirect_seconds: int

    def to_dict(self) -> dict[str, Any]:
        return {
            'requested_path': self.requested_path,
            'escape_route': self.escape_route,
            'title': self.title,
            'message': self.message,
            'redirect_message': self.redirect_message,
            'redirect_seconds': self.redirect_seconds,
        }


@dataclass(slots=True, frozen=True)
class GuardOutcome:
    kind: OutcomeKind
    redirect_to: Optional[str] = None
    # Rota que o usuário tentava abrir; devolvida ao login para o pós-login
    origin: Optional[str] = None
    denied: Optional[AccessDeniedView] = None

    @classmethod
    def render(cls) -> GuardOutcome:
        return cls(OutcomeKind.RENDER)

    @classmethod
    def loading(cls) -> GuardOutcome:
        return cls(OutcomeKind.LOADING)

    @classmethod
    def redirect(cls, to: str, origin: Optional[str] = None) -> GuardOutcome:
        return cls(OutcomeKind.REDIRECT, redirect_to=to, origin=origin)


class RouteGuard:
    def __init__(
        self,
        auth: AuthState,
        permissions: PermissionLoader,
        *,
        login_route: str = '/login',
        redirect_seconds: int = 3,
        translator: Optional[Callable[..., str]] = None,
    ) -> None:
        self._auth = auth
        self._permissions = permissions
        self._login_route = login_route
        self._redirect_seconds = redirect_seconds
        self._t = translator or get_default_translator()

    async def evaluate(self, target: NavigationTarget) -> GuardOutcome:
        # Dupla expiração reavaliada a cada navegação
        await self._auth.revalidate()

        decision = authorize(
            target.path,
            self._auth.status,
            self._permissions.status,
            self._permissions.can_access_route,
            login_route=self._login_route,
        )
        if decision is AccessDecision.PENDING:
            return GuardOutcome.loading()
        if decision is AccessDecision.ALLOW:
            return GuardOutcome.render()

        if self._auth.status is AuthStatus.UNAUTHENTICATED:
            return GuardOutcome.redirect(self._login_route, origin=target.path)

        log_info('ROUTE_ACCESS_DENIED', {'idus': self._auth.user.idus if self._auth.user else None, 'path': target.path})
        return GuardOutcome(OutcomeKind.ACCESS_DENIED, denied=self.access_denied_view(target.path))

    def access_denied_view(self, requested_path: str) -> AccessDeniedView:
        escape_route = self._permissions.first_allowed_route() or self._login_route
        return AccessDeniedView(
            requested_path=requested_path,
            escape_route=escape_route,
            title=self._t('ACCESS_DENIED_TITLE'),
            message=self._t('ACCESS_DENIED_MESSAGE'),
            redirect_message=self._t('ACCESS_DENIED_REDIRECT'),
            redirect_seconds=self._redirect_seconds,
        )


class AdminRouteGuard(RouteGuard):
    """Seção administrativa: para quem não é admin redireciona em vez de negar.

    Menu vazio leva ao login; caso contrário, à primeira entrada do menu.
    """

    def __init__(self, auth: AuthState, permissions: PermissionLoader, *, admin_user_type: str = USER_TYPE_ADMIN, **kwargs: Any) -> None:
        super().__init__(auth, permissions, **kwargs)
        self._admin_user_type = admin_user_type

    async def evaluate(self, target: NavigationTarget) -> GuardOutcome:
        await self._auth.revalidate()

        if self._auth.status is AuthStatus.LOADING:
            return GuardOutcome.loading()
        if self._auth.status is AuthStatus.UNAUTHENTICATED:
            return GuardOutcome.redirect(self._login_route, origin=target.path)
        if self._permissions.status is not PermissionStatus.LOADED:
            return GuardOutcome.loading()

        user = self._auth.user
        if user is not None and user.tipo_usuario == self._admin_user_type and self._permissions.can_access_route(target.path):
            return GuardOutcome.render()

        first_route = self._permissions.first_allowed_route()
        log_info('ADMIN_ROUTE_REDIRECTED', {'idus': user.idus if user else None, 'path': target.path, 'to': first_route})
        if first_route is None:
            return GuardOutcome.redirect(self._login_route)
        return GuardOutcome.redirect(first_route)
