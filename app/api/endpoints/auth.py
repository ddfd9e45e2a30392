"""
    Authentication Endpoints
    Thin HTTP layer over AuthService: request bodies are validated by their
    schemas, each route delegates to the service and renders the returned Result.
    Endpoints:
    - /register: creates an unconfirmed account and e-mails a confirmation link.
    - /login: issues access/refresh tokens, or starts an e-mailed 2FA challenge.
    - /two-factor: completes the 2FA challenge and issues tokens.
    - /refresh-token: exchanges an expired access token + refresh token for a new pair.
    - /confirm-email: consumes the link sent at registration.
    - /forgot-password: e-mails a reset link (same answer for unknown e-mails).
    - /reset-password: consumes the reset link and sets the new password.
    - /two-factor/enable, /two-factor/disable: toggle 2FA for the signed-in user.
"""
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import PlainTextResponse

from app.api.dependencies import get_auth_service, get_current_user
from app.api.responses import failure_response, render
from app.core.results import Ok
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TwoFactorRequest,
)
from app.schemas.common import ValidationApiResponse
from app.services.auth_service import AuthService

router = APIRouter()

ERROR_RESPONSES = {400: {"model": ValidationApiResponse}}


@router.post("/register", response_model=AuthResponse, responses=ERROR_RESPONSES)
async def register(
    request: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """
    Cria a conta (não confirmada) e envia o link de confirmação por email.
    Não devolve tokens.
    """
    result = await service.register(request.first_name, request.last_name, request.email, request.password)
    return render(result)


@router.post("/login", response_model=AuthResponse, responses=ERROR_RESPONSES)
async def login(
    request: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """
    Autentica com email e senha.

    Com 2FA habilitado a resposta traz `requiresTwoFactor=true` e nenhum token;
    o código vai por email e deve ser enviado para `/two-factor`.
    """
    result = await service.login(request.email, request.password)
    return render(result)


@router.post("/two-factor", response_model=AuthResponse, responses=ERROR_RESPONSES)
async def two_factor(
    request: TwoFactorRequest,
    service: AuthService = Depends(get_auth_service)
):
    result = await service.validate_two_factor(request.email, request.two_factor_code)
    return render(result)


@router.post("/refresh-token", response_model=AuthResponse, responses=ERROR_RESPONSES)
async def refresh_token(
    request: RefreshTokenRequest,
    service: AuthService = Depends(get_auth_service)
):
    """
    Troca o access token (pode estar expirado) + refresh token por um novo par.
    O refresh token anterior deixa de valer.
    """
    result = await service.refresh_token(request.token, request.refresh_token)
    return render(result)


@router.get("/confirm-email", response_class=PlainTextResponse, responses=ERROR_RESPONSES)
async def confirm_email(
    user_id: str = Query("", alias="userId"),
    token: str = Query(""),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.confirm_email(user_id, token)
    if not isinstance(result, Ok):
        return failure_response(result)
    return PlainTextResponse("Email confirmed successfully.")


@router.post("/forgot-password", response_class=PlainTextResponse)
async def forgot_password(
    email: str = Body(...),
    service: AuthService = Depends(get_auth_service)
):
    """
    Sempre responde o mesmo texto, exista ou não a conta (anti-enumeração).
    """
    result = await service.forgot_password(email)
    if not isinstance(result, Ok):
        return failure_response(result)
    return PlainTextResponse("If your email is registered with us, you will receive a password reset link.")


@router.post("/reset-password", response_class=PlainTextResponse, responses=ERROR_RESPONSES)
async def reset_password(
    email: str = Query(""),
    token: str = Query(""),
    new_password: str = Body(...),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.reset_password(email, token, new_password)
    if not isinstance(result, Ok):
        return failure_response(result)
    return PlainTextResponse("Password has been reset successfully.")


# ==================== 2FA settings ====================

@router.post("/two-factor/enable", response_model=AuthResponse)
async def enable_two_factor(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.set_two_factor(current_user, True)
    return render(result)


@router.post("/two-factor/disable", response_model=AuthResponse)
async def disable_two_factor(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.set_two_factor(current_user, False)
    return render(result)
