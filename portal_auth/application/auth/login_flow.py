# caminho: portal_auth/application/auth/login_flow.py
# Funções:
# - LoginStep: IDLE -> AWAITING_CODE -> VERIFIED (IDLE reentrante via change_document)
# - ResendCooldown: contador decrescente que bloqueia o reenvio do código
# - LoginFlow: protocolo de login em dois passos (documento -> código)

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from portal_auth.application.auth.auth_state import AuthState
from portal_auth.config.constants import USER_TYPE_WORKER
from portal_auth.domain.credentials.document import classify_document
from portal_auth.domain.sessions.entities import UserAccount, VerifiedLogin
from portal_auth.shared.errors import PortalServiceError, ServiceUnavailableError
from portal_auth.shared.i18n import get_default_translator
from portal_auth.shared.logging import log_info, log_warning

FIELD_DOCUMENT = 'documento'
FIELD_CODE = 'codigo'


class LoginStep(str, Enum):
    IDLE = 'idle'
    AWAITING_CODE = 'awaiting_code'
    VERIFIED = 'verified'


class ChallengeGateway(Protocol):
    async def validate_document(self, document: str, role: str) -> UserAccount: ...
    async def send_challenge(self, idus: str, phone: Optional[str]) -> bool: ...
    async def verify_challenge(self, idus: str, code: str, remember: bool) -> VerifiedLogin: ...


class ResendCooldown:
    def __init__(self, units: int = 60) -> None:
        self.units = units
        self.remaining = 0

    @property
    def running(self) -> bool:
        return self.remaining > 0

    def start(self) -> None:
        self.remaining = self.units

    def tick(self) -> int:
        if self.remaining > 0:
            self.remaining -= 1
        return self.remaining

    def reset(self) -> None:
        self.remaining = 0


class LoginFlow:
    def __init__(
        self,
        api: ChallengeGateway,
        auth: AuthState,
        *,
        cooldown_units: int = 60,
        tick_seconds: float = 1.0,
        code_length: int = 6,
        default_route: str = '/',
        login_route: str = '/login',
        translator: Optional[Callable[..., str]] = None,
    ) -> None:
        self._api = api
        self._auth = auth
        self._tick_seconds = tick_seconds
        self._code_length = code_length
        self._default_route = default_route
        self._login_route = login_route
        self._t = translator or get_default_translator()
        self._countdown_task: Optional[asyncio.Task[None]] = None

        self.step = LoginStep.IDLE
        self.cooldown = ResendCooldown(cooldown_units)
        self.errors: dict[str, str] = {}
        self.user: Optional[UserAccount] = None
        self.document: Optional[str] = None
        self.role: str = USER_TYPE_WORKER
        self.origin: Optional[str] = None

    # -- Passo 1: documento -----------------------------------------------------

    async def submit_document(self, raw: str, role: str = USER_TYPE_WORKER, *, origin: Optional[str] = None) -> bool:
        if self.step is LoginStep.AWAITING_CODE:
            # Um desafio pendente por tentativa: trocar de documento exige change_document()
            self.errors = {FIELD_DOCUMENT: self._t('CHALLENGE_PENDING')}
            return False

        self.errors = {}
        if origin is not None:
            self.origin = origin

        classification = classify_document(raw, self._t)
        if not classification.is_valid:
            self.errors[FIELD_DOCUMENT] = classification.message
            return False

        try:
            user = await self._api.validate_document(classification.digits, role)
            sent = await self._api.send_challenge(user.idus, user.numero_celular)
        except PortalServiceError as exc:
            log_warning('LOGIN_DOCUMENT_REJECTED', {'kind': classification.kind, 'code': exc.code})
            self.errors[FIELD_DOCUMENT] = self._error_message(exc)
            return False

        if not sent:
            self.errors[FIELD_DOCUMENT] = self._t('CHALLENGE_SEND_FAILED')
            return False

        self.user = user
        self.document = classification.digits
        self.role = role
        self.step = LoginStep.AWAITING_CODE
        self.cooldown.start()
        log_info('LOGIN_CHALLENGE_SENT', {'idus': user.idus, 'kind': classification.kind})
        return True

    async def resend(self) -> bool:
        if self.cooldown.running or self.user is None or self.step is not LoginStep.AWAITING_CODE:
            return False
        try:
            sent = await self._api.send_challenge(self.user.idus, self.user.numero_celular)
        except PortalServiceError as exc:
            log_warning('LOGIN_CHALLENGE_RESEND_FAILED', {'idus': self.user.idus, 'code': exc.code})
            return False
        if sent:
            self.cooldown.start()
            log_info('LOGIN_CHALLENGE_RESENT', {'idus': self.user.idus})
        return sent

    # -- Passo 2: código --------------------------------------------------------

    async def verify(self, code: str, remember: bool = False) -> Optional[str]:
        """Verifica o código e grava a sessão; devolve a rota pós-login ou None."""
        code = (code or '').strip()
        if len(code) != self._code_length or not code.isdigit():
            self.errors = {FIELD_CODE: self._t('CODE_LENGTH_INVALID', length=self._code_length)}
            return None
        if self.user is None:
            self.errors = {FIELD_CODE: self._t('LOGIN_USER_MISSING')}
            return None

        self.errors = {}
        try:
            verified = await self._api.verify_challenge(self.user.idus, code, remember)
        except PortalServiceError as exc:
            log_warning('LOGIN_CODE_REJECTED', {'idus': self.user.idus, 'code': exc.code})
            self.errors[FIELD_CODE] = exc.message or self._t(exc.code)
            return None

        await self._auth.login(verified.user, verified.session)
        self.step = LoginStep.VERIFIED
        self.cooldown.reset()
        self.stop_countdown()
        return self.post_login_target()

    def post_login_target(self) -> str:
        origin = self.origin
        if not origin or not origin.startswith('/') or origin == self._login_route:
            return self._default_route
        return origin

    def change_document(self) -> None:
        self.step = LoginStep.IDLE
        self.errors = {}
        self.user = None
        self.document = None

    # -- Contagem regressiva ----------------------------------------------------

    def tick(self) -> int:
        return self.cooldown.tick()

    def start_countdown(self) -> asyncio.Task[None]:
        """Agenda o decremento do cooldown a cada `tick_seconds` sem bloquear o fluxo."""
        if self._countdown_task is None or self._countdown_task.done():
            self._countdown_task = asyncio.create_task(self._run_countdown())
        return self._countdown_task

    async def _run_countdown(self) -> None:
        while self.cooldown.running:
            await asyncio.sleep(self._tick_seconds)
            self.cooldown.tick()

    def stop_countdown(self) -> None:
        if self._countdown_task is not None and not self._countdown_task.done():
            self._countdown_task.cancel()
        self._countdown_task = None

    async def aclose(self) -> None:
        self.stop_countdown()

    # -- Helpers ----------------------------------------------------------------

    def _error_message(self, exc: PortalServiceError) -> str:
        # Banco fora do ar sempre com a mensagem explícita
        if isinstance(exc, ServiceUnavailableError):
            return self._t(exc.code)
        return exc.message or self._t(exc.code)

    def snapshot(self) -> dict[str, Any]:
        return {
            'step': self.step.value,
            'document': self.document,
            'role': self.role,
            'resend_in': self.cooldown.remaining,
            'can_resend': self.step is LoginStep.AWAITING_CODE and not self.cooldown.running,
            'errors': dict(self.errors),
            'origin': self.origin,
        }
