# caminho: portal_auth/interfaces/api/routers/session.py
# Funções:
# - Estado da sessão, renovação, logout
# - Menu montado a partir das vistas e decisão de acesso para uma rota

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, status

from portal_auth.application.auth.dto import SessionRefreshRequest, UserAccountPayload
from portal_auth.application.context import PortalContext
from portal_auth.domain.permissions.authorizer import authorize
from portal_auth.domain.sessions.entities import SessionGrant
from portal_auth.interfaces.api.dependencies import CurrentUser, Portal, settle_permissions

router = APIRouter(tags=['session'])


def _session_view(portal: PortalContext) -> dict[str, Any]:
    user = portal.auth.user
    session = portal.auth.session
    return {
        'status': portal.auth.status.value,
        'user': UserAccountPayload.from_domain(user).model_dump(mode='json', by_alias=True) if user else None,
        'session': {
            'expiraEn': session.expira_en.isoformat(),
            'codigoAccesoExpira': session.codigo_acceso_expira.isoformat(),
            'recordarSesion': session.remember,
        }
        if session
        else None,
        'permissions': portal.permissions.status.value,
    }


@router.get('/session', status_code=status.HTTP_200_OK, summary='Sessão atual')
async def current_session(portal: Portal):
    await portal.auth.revalidate()
    return _session_view(portal)


@router.post(
    '/session/refresh',
    status_code=status.HTTP_200_OK,
    summary='Renovar sessão',
    description='Regrava apenas a metade `session` do registro (mesma identidade).',
)
async def refresh_session(payload: SessionRefreshRequest, user: CurrentUser, portal: Portal):
    current = portal.auth.session
    session = SessionGrant(
        token=payload.token or current.token,
        expira_en=payload.sesion.expira_en,
        codigo_acceso_expira=payload.sesion.codigo_acceso_expira,
        remember=current.remember,
    )
    await portal.auth.refresh_session(session)
    return _session_view(portal)


@router.post('/logout', status_code=status.HTTP_200_OK, summary='Encerrar sessão')
async def logout(portal: Portal):
    await portal.auth.logout()
    portal.new_login_flow()
    return {'status': portal.auth.status.value, 'redirect_to': portal.settings.LOGIN_ROUTE}


@router.get(
    '/menu',
    status_code=status.HTTP_200_OK,
    summary='Menu de navegação',
    description='Árvore montada a partir das vistas concedidas; rotas aninhadas agrupadas pelo primeiro segmento.',
)
async def menu(user: CurrentUser, portal: Portal):
    await settle_permissions(portal)
    return {
        'permissions': portal.permissions.status.value,
        'items': [node.to_dict() for node in portal.permissions.menu_items()],
    }


@router.get('/access', status_code=status.HTTP_200_OK, summary='Decisão de acesso para uma rota')
async def access(portal: Portal, path: str = Query(min_length=1)):
    await settle_permissions(portal)
    decision = authorize(
        path,
        portal.auth.status,
        portal.permissions.status,
        portal.permissions.can_access_route,
        login_route=portal.settings.LOGIN_ROUTE,
    )
    return {'path': path, 'decision': decision.value}
