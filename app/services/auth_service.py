"""
Auth Service

Orchestrates the credential store, the token service and the email notifier
for every authentication flow:

- register: create an unconfirmed account and e-mail a confirmation link;
- login: reject bad/unconfirmed credentials, start a two-factor challenge, or
  issue an access/refresh token pair;
- validate_two_factor: finish a two-factor challenge with the e-mailed code;
- refresh_token: exchange an expired access token plus the stored refresh
  token for a new pair (one active refresh token per user);
- confirm_email / forgot_password / reset_password: single-use token flows
  whose tokens travel base64url-encoded inside links;
- set_two_factor: turn e-mailed two-factor on or off for a signed-in user.

Every operation returns a ``Result``; nothing here raises for expected
failures. Credential-related rejections share one message so a caller cannot
tell which factor failed.
"""

import secrets
from datetime import timedelta
from urllib.parse import urlencode

from app.core.config import settings
from app.core.results import Ok, Result, ValidationFailure
from app.core.security import dummy_verify, urlsafe_decode, urlsafe_encode
from app.core.time import as_utc, utcnow
from app.logging import get_logger
from app.models.user import User
from app.schemas.auth import AuthResponse
from app.services.credential_store import EMAIL_CONFIRMATION, PASSWORD_RESET, CredentialStore
from app.services.email import EmailService
from app.services.token_service import TokenService

logger = get_logger("auth")

INVALID_LOGIN = "Invalid login attempt."


class AuthService:
    def __init__(self, store: CredentialStore, tokens: TokenService, email: EmailService):
        self.store = store
        self.tokens = tokens
        self.email = email
        self.refresh_token_lifetime = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def _link(self, path: str, **params: str) -> str:
        return f"{settings.APP_BASE_URL.rstrip('/')}/{path}?{urlencode(params)}"

    async def _issue_tokens(self, user: User, update_last_login: bool = True) -> tuple:
        token, refresh_token = self.tokens.generate_tokens(user)
        user.refresh_token = refresh_token
        user.refresh_token_expiry_time = utcnow() + self.refresh_token_lifetime
        if update_last_login:
            user.last_login_date = utcnow()
        await self.store.update_user(user)
        return token, refresh_token

    # ==================== Registration ====================

    async def register(self, first_name: str, last_name: str, email: str, password: str) -> Result[AuthResponse]:
        if await self.store.find_by_email(email):
            logger.warning("Registration rejected: email already registered", email=email)
            return ValidationFailure.single("Email is already registered.")

        user = User(
            email=email.strip(),
            first_name=first_name,
            last_name=last_name,
            created_date=utcnow(),
            is_active=True,
            email_confirmed=False,
        )
        created = await self.store.create_user(user, password)
        if not created.succeeded:
            logger.warning("Registration rejected by credential store", email=email, errors=len(created.errors))
            return ValidationFailure(created.errors)

        confirmation_token = await self.store.generate_token(user, EMAIL_CONFIRMATION)
        link = self._link("confirm-email", userId=user.id, token=urlsafe_encode(confirmation_token))
        await self.email.send_email_confirmation(user.email, user.first_name, link)

        logger.great("User registered", user_id=user.id, email=user.email)
        return Ok(AuthResponse(
            succeeded=True,
            message="Registration successful. Please check your email for confirmation.",
        ))

    # ==================== Login / two-factor ====================

    async def login(self, email: str, password: str) -> Result[AuthResponse]:
        user = await self.store.find_by_email(email)
        if user is None or not user.is_active:
            dummy_verify()
            logger.warning("Login rejected: unknown or inactive account", email=email)
            return ValidationFailure.single(INVALID_LOGIN)

        if not await self.store.verify_password(user, password):
            logger.warning("Login rejected: wrong password", email=email)
            return ValidationFailure.single(INVALID_LOGIN)

        if not user.email_confirmed:
            logger.warning("Login rejected: email not confirmed", email=email)
            return ValidationFailure.single("Please confirm your email before logging in.")

        if user.two_factor_enabled:
            user.two_factor_secret = self.tokens.generate_two_factor_secret()
            await self.store.update_user(user)
            code = self.tokens.current_two_factor_code(user.two_factor_secret)
            await self.email.send_two_factor_code(user.email, user.first_name, code)

            logger.info("Two-factor challenge sent", user_id=user.id)
            return Ok(AuthResponse(
                succeeded=True,
                requires_two_factor=True,
                message="2FA code has been sent to your email.",
            ))

        token, refresh_token = await self._issue_tokens(user)
        logger.info("Login successful", user_id=user.id)
        return Ok(AuthResponse(
            succeeded=True,
            token=token,
            refresh_token=refresh_token,
            message="Login successful",
        ))

    async def validate_two_factor(self, email: str, code: str) -> Result[AuthResponse]:
        user = await self.store.find_by_email(email)
        if user is None or not user.is_active:
            logger.warning("Two-factor rejected: unknown or inactive account", email=email)
            return ValidationFailure.single("Invalid request.")

        if not self.tokens.validate_two_factor_code(user.two_factor_secret, code):
            logger.warning("Two-factor rejected: invalid code", user_id=user.id)
            return ValidationFailure.single("Invalid 2FA code.")

        # o segredo vale para um único desafio
        user.two_factor_secret = None
        token, refresh_token = await self._issue_tokens(user)

        logger.info("Two-factor validation successful", user_id=user.id)
        return Ok(AuthResponse(
            succeeded=True,
            token=token,
            refresh_token=refresh_token,
            message="2FA validation successful",
        ))

    async def set_two_factor(self, user: User, enabled: bool) -> Result[AuthResponse]:
        user.two_factor_enabled = enabled
        user.two_factor_secret = None
        await self.store.update_user(user)

        logger.info("Two-factor setting changed", user_id=user.id, enabled=enabled)
        state = "enabled" if enabled else "disabled"
        return Ok(AuthResponse(succeeded=True, message=f"Two-factor authentication {state}."))

    # ==================== Refresh ====================

    async def refresh_token(self, access_token: str, refresh_token: str) -> Result[AuthResponse]:
        principal = self.tokens.get_principal_from_expired_token(access_token)
        if not isinstance(principal, Ok) or not principal.value.get("sub"):
            logger.warning("Token refresh rejected: invalid access token")
            return ValidationFailure.single("Invalid token")

        user = await self.store.find_by_id(principal.value["sub"])
        if user is None or not user.is_active:
            logger.warning("Token refresh rejected: user not found or inactive", user_id=principal.value["sub"])
            return ValidationFailure.single("User not found or inactive")

        expiry = as_utc(user.refresh_token_expiry_time)
        if (
            not user.refresh_token
            or not secrets.compare_digest(user.refresh_token.encode(), (refresh_token or "").encode())
            or expiry is None
            or expiry <= utcnow()
        ):
            logger.warning("Token refresh rejected: invalid or expired refresh token", user_id=user.id)
            return ValidationFailure.single("Invalid or expired refresh token")

        new_token, new_refresh_token = await self._issue_tokens(user, update_last_login=False)
        logger.info("Token refresh successful", user_id=user.id)
        return Ok(AuthResponse(
            succeeded=True,
            token=new_token,
            refresh_token=new_refresh_token,
            message="Token refresh successful",
        ))

    # ==================== Email confirmation / password reset ====================

    async def confirm_email(self, user_id: str, token: str) -> Result[bool]:
        user = await self.store.find_by_id(user_id)
        if user is None:
            logger.warning("Email confirmation rejected: unknown user", user_id=user_id)
            return ValidationFailure.single("Invalid user.")

        try:
            decoded_token = urlsafe_decode(token or "")
        except ValueError:
            decoded_token = ""

        result = await self.store.confirm_email(user, decoded_token)
        if not result.succeeded:
            logger.warning("Email confirmation failed", user_id=user_id)
            return ValidationFailure(result.errors)

        logger.great("Email confirmed successfully", user_id=user_id)
        return Ok(True)

    async def forgot_password(self, email: str) -> Result[bool]:
        user = await self.store.find_by_email(email)
        if user is None:
            # mesma resposta para emails desconhecidos (anti-enumeração)
            logger.info("Password reset requested for unknown email")
            return Ok(True)

        reset_token = await self.store.generate_token(user, PASSWORD_RESET)
        link = self._link("reset-password", email=user.email, token=urlsafe_encode(reset_token))
        await self.email.send_password_reset(user.email, user.first_name, link)

        logger.info("Password reset link sent", user_id=user.id)
        return Ok(True)

    async def reset_password(self, email: str, token: str, new_password: str) -> Result[bool]:
        user = await self.store.find_by_email(email)
        if user is None:
            logger.warning("Password reset rejected: unknown email")
            return ValidationFailure.single("Invalid request.")

        try:
            decoded_token = urlsafe_decode(token or "")
        except ValueError:
            decoded_token = ""

        result = await self.store.reset_password(user, decoded_token, new_password)
        if not result.succeeded:
            logger.warning("Password reset failed", user_id=user.id, errors=len(result.errors))
            return ValidationFailure(result.errors)

        logger.great("Password reset successfully", user_id=user.id)
        return Ok(True)
