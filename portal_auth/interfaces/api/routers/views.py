# caminho: portal_auth/interfaces/api/routers/views.py
# Funções:
# - Vista inicial protegida (RouteGuard)
# - Seção de gestão de usuários (AdminRouteGuard): catálogo por categoria e atribuição de vistas
# - Health check da conexão backend / banco

from __future__ import annotations

from dataclasses import asdict
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from portal_auth.application.auth.dto import AssignViewsRequest, UserAccountPayload
from portal_auth.application.context import PortalContext
from portal_auth.config.constants import ADMIN_USERS_ROUTE
from portal_auth.interfaces.api.dependencies import Portal, require_route
from portal_auth.shared.errors import PortalServiceError
from portal_auth.shared.logging import log_info

router = APIRouter(tags=['views'])

GuardedPortal = Annotated[PortalContext, Depends(require_route())]
AdminPortal = Annotated[PortalContext, Depends(require_route(ADMIN_USERS_ROUTE, admin_only=True))]


def _backend_error(exc: PortalServiceError) -> HTTPException:
    status_code = exc.status_code if exc.status_code >= HTTPStatus.BAD_REQUEST else HTTPStatus.BAD_GATEWAY
    return HTTPException(status_code=status_code, detail=exc.detail())


@router.get('/health', status_code=status.HTTP_200_OK, summary='Conexão com o backend')
async def health(portal: Portal):
    connected = await portal.api.check_health()
    message_key = 'DATABASE_CONNECTED' if connected else 'DATABASE_DISCONNECTED'
    return {'connected': connected, 'message': portal.translator(message_key)}


@router.get('/', status_code=status.HTTP_200_OK, summary='Início')
async def home(portal: GuardedPortal):
    user = portal.auth.user
    return {
        'user': UserAccountPayload.from_domain(user).model_dump(mode='json', by_alias=True),
        'menu': [node.to_dict() for node in portal.permissions.menu_items()],
    }


@router.get(
    ADMIN_USERS_ROUTE,
    status_code=status.HTTP_200_OK,
    summary='Catálogo de vistas do sistema',
    description='Vistas do sistema agrupadas por categoria (apenas administradores).',
)
async def system_catalog(portal: AdminPortal):
    grouped = portal.permissions.system_views_by_category()
    return {category: [asdict(view) for view in views] for category, views in grouped.items()}


@router.get(
    ADMIN_USERS_ROUTE + '/{idus}/vistas',
    status_code=status.HTTP_200_OK,
    summary='Vistas atribuídas a um usuário',
)
async def user_views(idus: str, portal: AdminPortal):
    try:
        views = await portal.api.fetch_granted_views(idus)
    except PortalServiceError as exc:
        raise _backend_error(exc) from exc
    return {'idus': idus, 'vistas': [view.id for view in views if view.id is not None]}


@router.put(
    ADMIN_USERS_ROUTE + '/{idus}/vistas',
    status_code=status.HTTP_200_OK,
    summary='Atribuir vistas a um usuário',
    description='Substitui o conjunto de vistas do usuário; recarrega as permissões quando é o próprio usuário.',
)
async def assign_user_views(idus: str, payload: AssignViewsRequest, portal: AdminPortal):
    try:
        saved = await portal.api.assign_views(idus, payload.vistas)
    except PortalServiceError as exc:
        raise _backend_error(exc) from exc

    current = portal.auth.user
    log_info('USER_VIEWS_ASSIGNED', {'by': current.idus if current else None, 'idus': idus, 'views': len(payload.vistas)})
    if saved and current is not None and current.idus == idus:
        await portal.permissions.reload()
    return {'idus': idus, 'saved': saved}
