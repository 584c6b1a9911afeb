# caminho: portal_auth/interfaces/api/dependencies.py
# Funções:
# - get_portal(): PortalContext guardado em app.state
# - GuardInterrupted: resultado de guarda diferente de RENDER (tratado em app.py)
# - require_route(): dependência que aplica RouteGuard / AdminRouteGuard
# - require_session(): exige identidade autenticada (401 caso contrário)

from __future__ import annotations

from http import HTTPStatus
from typing import Annotated, Optional
from urllib.parse import urlencode

from fastapi import Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from portal_auth.application.context import PortalContext
from portal_auth.application.guards import GuardOutcome, NavigationTarget, OutcomeKind
from portal_auth.domain.permissions.authorizer import AuthStatus, PermissionStatus
from portal_auth.domain.sessions.entities import UserAccount


def get_portal(request: Request) -> PortalContext:
    return request.app.state.portal


Portal = Annotated[PortalContext, Depends(get_portal)]


class GuardInterrupted(Exception):
    def __init__(self, outcome: GuardOutcome) -> None:
        super().__init__(outcome.kind.value)
        self.outcome = outcome


async def settle_permissions(portal: PortalContext) -> None:
    """Revalida a sessão e aguarda (com limite) a carga de vistas em andamento."""
    await portal.auth.revalidate()
    if portal.auth.status is AuthStatus.AUTHENTICATED and portal.permissions.status is not PermissionStatus.LOADED:
        await portal.permissions.wait_settled(portal.settings.PERMISSION_SETTLE_TIMEOUT_S)


def require_route(path: Optional[str] = None, *, admin_only: bool = False):
    """Cria a dependência de guarda para uma rota.

    `path` fixa a rota avaliada (ex.: seção admin com subrotas); sem ele,
    usa o caminho da própria requisição.
    """

    async def _guard(request: Request, portal: Portal) -> PortalContext:
        await settle_permissions(portal)
        target = NavigationTarget(path=path or request.url.path, origin=request.query_params.get('from'))
        guard = portal.admin_guard if admin_only else portal.route_guard
        outcome = await guard.evaluate(target)
        if outcome.kind is not OutcomeKind.RENDER:
            raise GuardInterrupted(outcome)
        return portal

    return _guard


async def require_session(portal: Portal) -> UserAccount:
    await portal.auth.revalidate()
    user = portal.auth.user
    if user is None:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail={'code': 'SESSION_NOT_FOUND'})
    return user


CurrentUser = Annotated[UserAccount, Depends(require_session)]


def outcome_response(request: Request, outcome: GuardOutcome):
    portal = get_portal(request)
    if outcome.kind is OutcomeKind.REDIRECT:
        url = outcome.redirect_to or portal.settings.LOGIN_ROUTE
        if outcome.origin:
            url = f'{url}?{urlencode({"from": outcome.origin})}'
        return RedirectResponse(url, status_code=HTTPStatus.SEE_OTHER)
    if outcome.kind is OutcomeKind.ACCESS_DENIED and outcome.denied is not None:
        return JSONResponse(status_code=HTTPStatus.FORBIDDEN, content=outcome.denied.to_dict())
    return JSONResponse(
        status_code=HTTPStatus.ACCEPTED,
        content={'status': 'loading', 'message': portal.translator('PERMISSIONS_LOADING')},
    )
