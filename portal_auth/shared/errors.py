# caminho: portal_auth/shared/errors.py
# Funções:
# - PortalServiceError: base dos erros da fronteira com o backend
# - Subclasses com `code` estável (usado como chave de i18n e nos eventos de log)

from __future__ import annotations


class PortalServiceError(Exception):
    code = 'PORTAL_SERVICE_ERROR'

    def __init__(self, message: str | None = None, *, status_code: int = 0) -> None:
        super().__init__(message or self.code)
        # Mensagem enviada pelo backend (None quando não veio nenhuma)
        self.message = message
        self.status_code = status_code

    def detail(self) -> dict[str, str | int | None]:
        return {'code': self.code, 'status_code': self.status_code, 'message': self.message}


class DocumentNotFoundError(PortalServiceError):
    """Documento sem conta para o tipo de usuário solicitado (404 ou success=false)."""

    code = 'DOCUMENT_NOT_FOUND'


class ServiceUnavailableError(PortalServiceError):
    """Backend ou banco de dados fora do ar (503)."""

    code = 'SERVICE_UNAVAILABLE'


class InvalidRequestError(PortalServiceError):
    code = 'INVALID_REQUEST'


class InvalidCodeError(PortalServiceError):
    code = 'VERIFICATION_CODE_INVALID'


class ChallengeExpiredError(PortalServiceError):
    code = 'VERIFICATION_CODE_EXPIRED'


class ConnectionFailedError(PortalServiceError):
    code = 'CONNECTION_FAILED'


class InvalidResponseError(PortalServiceError):
    code = 'INVALID_RESPONSE'
