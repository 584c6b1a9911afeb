# caminho: portal_auth/application/auth/dto.py
# Funções:
# - DTOs Pydantic para os envelopes do backend e para o registro persistido
# - Conversão DTO <-> entidades de domínio (UserAccount, SessionGrant, View)

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portal_auth.domain.permissions.entities import View
from portal_auth.domain.sessions.entities import SessionGrant, UserAccount
from portal_auth.domain.sessions.enums import USER_TYPE_CHOICES, USER_TYPE_DEFAULT


def _as_utc(value: datetime) -> datetime:
    # Datas sem fuso vindas do backend são tratadas como UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ApiEnvelope(BaseModel):
    model_config = ConfigDict(extra='ignore')

    success: bool = False
    data: Any = None
    message: Optional[str] = None


class UserAccountPayload(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True, str_strip_whitespace=True)

    idus: str = Field(min_length=1)
    tipo_usuario: str = Field(alias='tipoUsuario', min_length=1)
    numero_celular: Optional[str] = Field(default=None, alias='numeroCelular')
    documento: Optional[str] = None
    nombres: Optional[str] = None

    @field_validator('idus', 'numero_celular', mode='before')
    @classmethod
    def _stringify(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def to_domain(self) -> UserAccount:
        return UserAccount(
            idus=self.idus,
            tipo_usuario=self.tipo_usuario,
            numero_celular=self.numero_celular,
            documento=self.documento,
            nombres=self.nombres,
            extra=dict(self.model_extra or {}),
        )

    @classmethod
    def from_domain(cls, user: UserAccount) -> UserAccountPayload:
        return cls.model_validate(
            {
                **user.extra,
                'idus': user.idus,
                'tipoUsuario': user.tipo_usuario,
                'numeroCelular': user.numero_celular,
                'documento': user.documento,
                'nombres': user.nombres,
            }
        )


class SessionPayload(BaseModel):
    """Objeto `sesion` devolvido pela verificação do código."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    expira_en: datetime = Field(alias='expiraEn')
    codigo_acceso_expira: datetime = Field(alias='codigoAccesoExpira')

    @field_validator('expira_en', 'codigo_acceso_expira')
    @classmethod
    def _normalize(cls, v: datetime) -> datetime:
        return _as_utc(v)


class StoredSessionPayload(SessionPayload):
    """Metade `session` do registro persistido."""

    token: str = Field(min_length=1)
    remember: bool = Field(default=False, alias='recordarSesion')

    def to_domain(self) -> SessionGrant:
        return SessionGrant(
            token=self.token,
            expira_en=self.expira_en,
            codigo_acceso_expira=self.codigo_acceso_expira,
            remember=self.remember,
        )

    @classmethod
    def from_domain(cls, session: SessionGrant) -> StoredSessionPayload:
        return cls(
            token=session.token,
            expira_en=session.expira_en,
            codigo_acceso_expira=session.codigo_acceso_expira,
            remember=session.remember,
        )


class VerifiedLoginPayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    usuario: UserAccountPayload
    sesion: SessionPayload
    token: str = Field(min_length=1)


class ViewPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, str_strip_whitespace=True)

    id: Optional[int] = Field(default=None, alias='ID')
    ruta: str = Field(alias='Ruta', min_length=1)
    nombre: str = Field(alias='Nombre', min_length=1)
    icono: Optional[str] = Field(default=None, alias='Icono')
    categoria: Optional[str] = Field(default=None, alias='Categoria')
    orden: int = Field(alias='Orden')

    @field_validator('ruta')
    @classmethod
    def _validate_route(cls, v: str) -> str:
        if not v.startswith('/'):
            raise ValueError('VIEW_ROUTE_MUST_START_WITH_SLASH')
        segments = [part for part in v.split('/') if part]
        if len(segments) > 2:
            raise ValueError('VIEW_ROUTE_TOO_DEEP')
        if v != '/' and v.endswith('/'):
            raise ValueError('VIEW_ROUTE_TRAILING_SLASH')
        return v

    def to_domain(self) -> View:
        return View(
            id=self.id,
            ruta=self.ruta,
            nombre=self.nombre,
            icono=self.icono,
            categoria=self.categoria,
            orden=self.orden,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Entradas da API HTTP local (FastAPI)
# ─────────────────────────────────────────────────────────────────────────────


class DocumentSubmitRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True, str_strip_whitespace=True)

    documento: str = Field(max_length=32)
    tipo_usuario: str = Field(default=USER_TYPE_DEFAULT, alias='tipoUsuario')
    origin: Optional[str] = Field(default=None, alias='from')

    @field_validator('tipo_usuario')
    @classmethod
    def _validate_user_type(cls, v: str) -> str:
        if v not in USER_TYPE_CHOICES:
            raise ValueError('USER_TYPE_INVALID')
        return v


class CodeVerifyRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True, str_strip_whitespace=True)

    codigo: str = Field(max_length=32)
    remember: bool = Field(default=False, alias='recordarSesion')


class SessionRefreshRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    token: Optional[str] = None
    sesion: SessionPayload


class AssignViewsRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    vistas: list[int] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
