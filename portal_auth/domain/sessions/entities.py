# caminho: portal_auth/domain/sessions/entities.py
# Funções:
# - UserAccount: usuário devolvido pela validação do documento
# - SessionGrant: token + os dois relógios de expiração
# - SessionRecord: registro persistido (usuário + sessão)
# - VerifiedLogin: resultado da verificação do código

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from portal_auth.config.constants import USER_TYPE_ADMIN


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class UserAccount:
    idus: str
    tipo_usuario: str
    numero_celular: Optional[str] = None
    documento: Optional[str] = None
    nombres: Optional[str] = None
    # Campos adicionais do perfil, preservados sem interpretação
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_admin(self) -> bool:
        return self.tipo_usuario == USER_TYPE_ADMIN


@dataclass(slots=True, frozen=True)
class SessionGrant:
    token: str
    expira_en: datetime
    codigo_acceso_expira: datetime
    remember: bool = False

    def is_valid(self, now: datetime | None = None) -> bool:
        current = now or utc_now()
        return current < self.expira_en and current < self.codigo_acceso_expira


@dataclass(slots=True, frozen=True)
class SessionRecord:
    user: UserAccount
    session: SessionGrant

    def is_valid(self, now: datetime | None = None) -> bool:
        return self.session.is_valid(now)


@dataclass(slots=True, frozen=True)
class VerifiedLogin:
    user: UserAccount
    session: SessionGrant
