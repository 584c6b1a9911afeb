# caminho: portal_auth/interfaces/api/app.py
# Funções:
# - create_application(): configura FastAPI, contexto do portal e rotas
# - Handlers: resultado de guarda -> 303/403/202; erro do backend -> JSON com código

from __future__ import annotations

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portal_auth.application.context import PortalContext, build_portal_context
from portal_auth.config import get_settings
from portal_auth.interfaces.api.dependencies import GuardInterrupted, outcome_response
from portal_auth.interfaces.api.routers import login, session, views
from portal_auth.shared.errors import PortalServiceError
from portal_auth.shared.logging import log_warning, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Inicialização: resolve a sessão persistida antes de aceitar navegação
    portal: PortalContext = app.state.portal
    await portal.start()

    yield

    # Desligamento
    log_warning('APP_SHUTDOWN', {'reason': 'lifespan'})
    await portal.aclose()


def create_application(context: Optional[PortalContext] = None) -> FastAPI:
    settings = context.settings if context is not None else get_settings()
    setup_logging(level=settings.LOG_LEVEL, to_file=settings.LOG_TO_FILE)

    app = FastAPI(
        title='portal-auth',
        version='0.1.0',
        lifespan=lifespan,
    )
    app.state.portal = context or build_portal_context(settings)

    @app.exception_handler(GuardInterrupted)
    async def _guard_interrupted(request: Request, exc: GuardInterrupted):
        return outcome_response(request, exc.outcome)

    @app.exception_handler(PortalServiceError)
    async def _portal_service_error(request: Request, exc: PortalServiceError):
        portal: PortalContext = request.app.state.portal
        log_warning('BACKEND_ERROR_UNHANDLED', {'path': request.url.path, 'code': exc.code})
        return JSONResponse(
            status_code=HTTPStatus.BAD_GATEWAY,
            content={'detail': exc.detail(), 'message': portal.translator(exc.code)},
        )

    app.include_router(login.router)
    app.include_router(session.router)
    app.include_router(views.router)

    return app
