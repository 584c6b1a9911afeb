# caminho: portal_auth/application/permissions/loader.py
# Funções:
# - PermissionLoader: vistas concedidas (e catálogo do sistema para Admin) da identidade atual
# - on_user_changed(): ouvinte do AuthState; limpa tudo e agenda nova carga
# - load(): carga idempotente por identidade (uma busca em voo por vez)
# - can_access_route()/menu_items()/first_allowed_route(): consultas sobre as vistas carregadas

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Optional, Protocol

from portal_auth.domain.permissions.authorizer import PermissionStatus, can_access_route
from portal_auth.domain.permissions.entities import MenuNode, View
from portal_auth.domain.permissions.menu import build_menu, first_menu_path
from portal_auth.domain.sessions.entities import UserAccount
from portal_auth.shared.logging import log_info, log_warning

UNCATEGORIZED = 'General'


class ViewsGateway(Protocol):
    async def fetch_granted_views(self, idus: str) -> list[View]: ...
    async def fetch_system_views(self) -> list[View]: ...


class PermissionLoader:
    def __init__(
        self,
        api: ViewsGateway,
        *,
        default_route: str = '/',
        login_route: str = '/login',
    ) -> None:
        self._api = api
        self._default_route = default_route
        self._login_route = login_route
        self._user: Optional[UserAccount] = None
        self._status = PermissionStatus.NOT_LOADED
        self._user_views: list[View] = []
        self._system_views: list[View] = []
        # Incrementada a cada troca de identidade; respostas de gerações antigas são descartadas
        self._generation = 0
        self._task: Optional[asyncio.Task[None]] = None
        # Referências fortes até o término; o loop guarda só referências fracas
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def status(self) -> PermissionStatus:
        return self._status

    @property
    def user(self) -> Optional[UserAccount]:
        return self._user

    @property
    def user_views(self) -> list[View]:
        return list(self._user_views)

    @property
    def system_views(self) -> list[View]:
        return list(self._system_views)

    async def on_user_changed(self, user: Optional[UserAccount]) -> None:
        self._generation += 1
        self._user = user
        self._user_views = []
        self._system_views = []
        self._status = PermissionStatus.NOT_LOADED
        self._task = None
        if user is not None:
            self._task = self._spawn(user)

    async def reload(self) -> None:
        """Descarta as vistas atuais e recarrega para a mesma identidade."""
        await self.on_user_changed(self._user)

    async def load(self) -> None:
        """Carrega as vistas da identidade atual (equivalente a `cargarVistas`).

        Chamadas repetidas para a mesma identidade aguardam a busca em voo ou
        retornam de imediato quando já carregado.
        """
        if self._user is None or self._status is PermissionStatus.LOADED:
            return
        if self._task is None or (self._task.done() and self._status is not PermissionStatus.LOADED):
            self._task = self._spawn(self._user)
        await asyncio.shield(self._task)

    async def wait_settled(self, timeout: float) -> bool:
        if self._user is None:
            return False
        try:
            await asyncio.wait_for(self.load(), timeout)
        except asyncio.TimeoutError:
            log_warning('PERMISSIONS_SETTLE_TIMEOUT', {'idus': self._user.idus, 'timeout': timeout})
        return self._status is PermissionStatus.LOADED

    def _spawn(self, user: UserAccount) -> asyncio.Task[None]:
        task = asyncio.create_task(self._fetch(self._generation, user))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _fetch(self, generation: int, user: UserAccount) -> None:
        if generation != self._generation:
            return
        self._status = PermissionStatus.LOADING

        system_views: list[View] = []
        if user.is_admin:
            try:
                system_views = await self._api.fetch_system_views()
            except Exception as exc:
                log_warning('SYSTEM_VIEWS_FETCH_FAILED', {'idus': user.idus, 'error': type(exc).__name__})

        try:
            user_views = await self._api.fetch_granted_views(user.idus)
        except Exception as exc:
            log_warning('USER_VIEWS_FETCH_FAILED', {'idus': user.idus, 'error': type(exc).__name__})
            user_views = []

        if generation != self._generation:
            log_info('PERMISSIONS_STALE_DISCARDED', {'idus': user.idus})
            return

        self._system_views = system_views
        self._user_views = user_views
        self._status = PermissionStatus.LOADED
        log_info(
            'PERMISSIONS_LOADED',
            {'idus': user.idus, 'views': len(user_views), 'system_views': len(system_views)},
        )

    # -- Consultas --------------------------------------------------------------

    def can_access_route(self, path: str) -> bool:
        return can_access_route(
            path,
            authenticated=self._user is not None,
            permission_status=self._status,
            granted_views=self._user_views,
            default_route=self._default_route,
            login_route=self._login_route,
        )

    def menu_items(self) -> list[MenuNode]:
        return build_menu(self._user_views)

    def first_allowed_route(self) -> Optional[str]:
        return first_menu_path(self.menu_items())

    def system_views_by_category(self) -> dict[str, list[View]]:
        grouped: dict[str, list[View]] = defaultdict(list)
        for view in sorted(self._system_views, key=lambda item: item.orden):
            grouped[view.categoria or UNCATEGORIZED].append(view)
        return dict(grouped)
