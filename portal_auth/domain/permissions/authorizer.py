# caminho: portal_auth/domain/permissions/authorizer.py
# Funções:
# - AuthStatus / PermissionStatus / AccessDecision: estados usados nas decisões
# - can_access_route(): regra de acesso sobre a lista de vistas concedidas
# - authorize(): decisão pura Allow / Deny / Pending para uma rota

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable

from portal_auth.domain.permissions.entities import View


class AuthStatus(str, Enum):
    LOADING = 'loading'
    AUTHENTICATED = 'authenticated'
    UNAUTHENTICATED = 'unauthenticated'


class PermissionStatus(str, Enum):
    NOT_LOADED = 'not_loaded'
    LOADING = 'loading'
    LOADED = 'loaded'


class AccessDecision(str, Enum):
    ALLOW = 'allow'
    DENY = 'deny'
    PENDING = 'pending'


def can_access_route(
    path: str,
    *,
    authenticated: bool,
    permission_status: PermissionStatus,
    granted_views: Iterable[View],
    default_route: str = '/',
    login_route: str = '/login',
) -> bool:
    if not authenticated:
        return False

    # Passagem otimista enquanto as vistas carregam
    if permission_status is not PermissionStatus.LOADED:
        return True

    views = list(granted_views)
    if not views:
        return path in (default_route, login_route)

    return any(view.ruta == path for view in views)


def authorize(
    path: str,
    auth_status: AuthStatus,
    permission_status: PermissionStatus,
    can_access: Callable[[str], bool],
    *,
    login_route: str = '/login',
) -> AccessDecision:
    """Decide o que fazer com a navegação para `path`.

    PENDING enquanto a autenticação ou as permissões ainda estão resolvendo
    (inclui o intervalo entre autenticar e iniciar a carga). A rota de login
    é sempre liberada; fora dela, sem autenticação ou sem vista concedida o
    resultado é DENY.
    """
    if auth_status is AuthStatus.LOADING:
        return AccessDecision.PENDING

    if path == login_route:
        return AccessDecision.ALLOW

    if auth_status is AuthStatus.UNAUTHENTICATED:
        return AccessDecision.DENY

    if permission_status is not PermissionStatus.LOADED:
        return AccessDecision.PENDING

    if not can_access(path):
        return AccessDecision.DENY
    return AccessDecision.ALLOW
