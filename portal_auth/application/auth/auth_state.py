# caminho: portal_auth/application/auth/auth_state.py
# Funções:
# - AuthState: cache em memória da identidade atual (status, user, session)
# - initialize()/revalidate(): relê o registro persistido e aplica a dupla expiração
# - login()/logout()/refresh_session(): transições de identidade
# - subscribe(): ouvintes notificados após a resolução de cada mudança

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol

from portal_auth.application.auth.session_store import Clock, SessionStore
from portal_auth.domain.permissions.authorizer import AuthStatus
from portal_auth.domain.sessions.entities import SessionGrant, SessionRecord, UserAccount, utc_now
from portal_auth.shared.logging import log_info, log_warning

IdentityListener = Callable[[Optional[UserAccount]], Awaitable[None]]


class LogoutGateway(Protocol):
    async def logout(self, idus: str) -> bool: ...


class AuthState:
    def __init__(self, store: SessionStore, api: LogoutGateway, *, clock: Clock = utc_now) -> None:
        self._store = store
        self._api = api
        self._clock = clock
        self._status = AuthStatus.LOADING
        self._record: Optional[SessionRecord] = None
        self._listeners: list[IdentityListener] = []

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def user(self) -> Optional[UserAccount]:
        return self._record.user if self._record else None

    @property
    def session(self) -> Optional[SessionGrant]:
        return self._record.session if self._record else None

    @property
    def is_authenticated(self) -> bool:
        return self._status is AuthStatus.AUTHENTICATED

    @property
    def token(self) -> Optional[str]:
        return self._record.session.token if self._record else None

    def subscribe(self, listener: IdentityListener) -> None:
        self._listeners.append(listener)

    async def initialize(self) -> AuthStatus:
        """Resolve o estado inicial a partir do registro persistido.

        Registro ausente ou ilegível: não autenticado. Registro com qualquer
        um dos relógios vencido: limpeza local (sem chamada remota) e não
        autenticado.
        """
        self._status = AuthStatus.LOADING
        record = await self._store.load()
        if record is not None and not record.is_valid(self._clock()):
            log_info('SESSION_EXPIRED', {'idus': record.user.idus})
            await self._clear_persisted()
            record = None
        await self._resolve(record)
        return self._status

    async def revalidate(self) -> AuthStatus:
        if self._status is AuthStatus.LOADING:
            return await self.initialize()

        if self._record is not None and not self._record.is_valid(self._clock()):
            log_info('SESSION_EXPIRED', {'idus': self._record.user.idus})
            await self._clear_persisted()
            await self._resolve(None)
        return self._status

    async def login(self, user: UserAccount, session: SessionGrant) -> None:
        record = SessionRecord(user=user, session=session)
        await self._store.persist(record)
        await self._resolve(record)
        log_info('LOGIN_SUCCEEDED', {'idus': user.idus, 'tipo_usuario': user.tipo_usuario})

    async def logout(self) -> None:
        user = self.user
        try:
            if user is not None:
                await self._api.logout(user.idus)
        except Exception as exc:
            log_warning('LOGOUT_REMOTE_FAILED', {'idus': user.idus if user else None, 'error': type(exc).__name__})
        finally:
            await self._clear_persisted()
            await self._resolve(None)
        log_info('LOGOUT_COMPLETED', {'idus': user.idus if user else None})

    async def refresh_session(self, session: SessionGrant) -> None:
        if self._record is None:
            log_warning('SESSION_REFRESH_WITHOUT_USER', {})
            return
        await self._store.refresh(session)
        # Mesma identidade: ouvintes não são notificados
        self._record = SessionRecord(user=self._record.user, session=session)

    async def _clear_persisted(self) -> None:
        # Falha no storage não impede a limpeza do cache em memória
        try:
            await self._store.clear()
        except Exception as exc:
            log_warning('SESSION_CLEAR_FAILED', {'error': type(exc).__name__})

    async def _resolve(self, record: Optional[SessionRecord]) -> None:
        previous = self.user
        self._record = record
        self._status = AuthStatus.AUTHENTICATED if record else AuthStatus.UNAUTHENTICATED
        if _identity(previous) != _identity(self.user):
            for listener in list(self._listeners):
                await listener(self.user)


def _identity(user: Optional[UserAccount]) -> Optional[tuple[str, str]]:
    return (user.idus, user.tipo_usuario) if user else None
