# caminho: portal_auth/interfaces/api/routers/login.py
# Funções:
# - Endpoints do login em dois passos (documento -> código) sobre o LoginFlow atual

from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from portal_auth.application.auth.dto import CodeVerifyRequest, DocumentSubmitRequest
from portal_auth.application.auth.login_flow import LoginStep
from portal_auth.interfaces.api.dependencies import Portal

router = APIRouter(prefix='/login', tags=['login'])


@router.get(
    '',
    status_code=status.HTTP_200_OK,
    summary='Estado do login',
    description='Passo atual, segundos restantes para reenvio e mensagens por campo.',
)
async def login_state(portal: Portal):
    flow = portal.current_login_flow()
    return {**flow.snapshot(), 'authenticated': portal.auth.is_authenticated}


@router.post(
    '/document',
    status_code=status.HTTP_200_OK,
    summary='Enviar documento (DNI/RUC)',
    description="""Valida o documento no backend e envia o código de verificação ao celular cadastrado.

Em caso de sucesso o fluxo passa a aguardar o código e o reenvio fica bloqueado por `RESEND_COOLDOWN_UNITS`.
Erros ficam em `errors.documento`. Com um código já pendente responde 409 sem novo envio; use `/login/change-document`.
""",
)
async def submit_document(payload: DocumentSubmitRequest, portal: Portal):
    flow = portal.current_login_flow()
    if flow.step is LoginStep.VERIFIED:
        flow = portal.new_login_flow()

    ok = await flow.submit_document(payload.documento, payload.tipo_usuario, origin=payload.origin)
    if not ok:
        # Código pendente: 409 até change-document
        code = HTTPStatus.CONFLICT if flow.step is LoginStep.AWAITING_CODE else HTTPStatus.BAD_REQUEST
        return JSONResponse(status_code=code, content=flow.snapshot())
    flow.start_countdown()
    return flow.snapshot()


@router.post(
    '/resend',
    status_code=status.HTTP_200_OK,
    summary='Reenviar código',
    description='Ignorado enquanto a contagem regressiva não terminar (429).',
)
async def resend_code(portal: Portal):
    flow = portal.current_login_flow()
    if flow.cooldown.running:
        return JSONResponse(
            status_code=HTTPStatus.TOO_MANY_REQUESTS,
            content={
                **flow.snapshot(),
                'message': portal.translator('CHALLENGE_RESEND_WAIT', seconds=flow.cooldown.remaining),
            },
        )
    sent = await flow.resend()
    if sent:
        flow.start_countdown()
    return {**flow.snapshot(), 'sent': sent}


@router.post(
    '/code',
    status_code=status.HTTP_200_OK,
    summary='Verificar código',
    description="""Confirma o código recebido, grava a sessão e devolve a rota pós-login.

A rota devolvida é a originalmente pedida (`from`) ou a rota padrão; nunca a de login.
""",
)
async def verify_code(payload: CodeVerifyRequest, portal: Portal):
    flow = portal.current_login_flow()
    target = await flow.verify(payload.codigo, payload.remember)
    if target is None:
        return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content=flow.snapshot())
    return {'step': flow.step.value, 'redirect_to': target}


@router.post(
    '/change-document',
    status_code=status.HTTP_200_OK,
    summary='Trocar documento',
    description='Volta ao primeiro passo descartando o usuário pendente.',
)
async def change_document(portal: Portal):
    flow = portal.current_login_flow()
    flow.change_document()
    return flow.snapshot()
