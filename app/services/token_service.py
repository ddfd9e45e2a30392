"""
Token Service

Issues and verifies the credentials handed to clients:

- access tokens: HS256-signed JWTs carrying the user id, email and names,
  valid for one hour and bound to the configured issuer/audience;
- refresh tokens: 32 random bytes, base64, persisted by the caller;
- two-factor codes: TOTP (30 s step, 6 digits) derived from a per-login
  base32 secret that never leaves the server.

The service only holds immutable configuration. Verification methods report
bad input as ``False`` / ``InvalidToken`` and never raise.
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

import pyotp
from jose import JWTError, jwt

from app.core.config import settings
from app.core.results import InvalidToken, Ok, Result
from app.core.security import generate_opaque_token
from app.core.time import utcnow
from app.logging import get_logger
from app.models.user import User

ALGORITHM = "HS256"
TOTP_VALID_WINDOW = 1

logger = get_logger("auth.tokens")


@dataclass(frozen=True)
class JwtSettings:
    secret_key: str
    issuer: str
    audience: str
    access_token_lifetime: timedelta = timedelta(hours=1)

    @classmethod
    def from_settings(cls, app_settings=settings) -> "JwtSettings":
        return cls(
            secret_key=app_settings.JWT_SECRET_KEY,
            issuer=app_settings.JWT_ISSUER,
            audience=app_settings.JWT_AUDIENCE,
            access_token_lifetime=timedelta(minutes=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )


class TokenService:
    def __init__(self, config: JwtSettings):
        self.config = config

    # ==================== Access / refresh tokens ====================

    def generate_tokens(self, user: User) -> Tuple[str, str]:
        now = utcnow()
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "given_name": user.first_name,
            "family_name": user.last_name,
            "iss": self.config.issuer,
            "aud": self.config.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + self.config.access_token_lifetime).timestamp()),
        }
        access_token = jwt.encode(claims, self.config.secret_key, algorithm=ALGORITHM)
        return access_token, self.generate_refresh_token()

    @staticmethod
    def generate_refresh_token() -> str:
        return generate_opaque_token(32)

    def _decode(self, token: str, verify_exp: bool) -> Dict[str, Any]:
        return jwt.decode(
            token,
            self.config.secret_key,
            algorithms=[ALGORITHM],
            audience=self.config.audience,
            issuer=self.config.issuer,
            options={"verify_exp": verify_exp},
        )

    def validate_token(self, token: str) -> bool:
        if not token:
            return False
        try:
            self._decode(token, verify_exp=True)
        except JWTError:
            return False
        return True

    def decode_access_token(self, token: str) -> Result[Dict[str, Any]]:
        """Full validation (lifetime included); used for bearer authentication."""
        if not token:
            return InvalidToken()
        try:
            return Ok(self._decode(token, verify_exp=True))
        except JWTError as exc:
            logger.warning("Access token rejected", reason=str(exc))
            return InvalidToken()

    def get_principal_from_expired_token(self, token: str) -> Result[Dict[str, Any]]:
        """
        Validate everything except expiry, so a just-expired access token can
        still identify its owner during a refresh exchange.
        """
        if not token:
            return InvalidToken()
        try:
            header = jwt.get_unverified_header(token)
            if str(header.get("alg", "")).upper() != ALGORITHM:
                logger.warning("Token signed with unexpected algorithm", alg=header.get("alg"))
                return InvalidToken()
            claims = self._decode(token, verify_exp=False)
        except JWTError as exc:
            logger.warning("Expired-token principal extraction failed", reason=str(exc))
            return InvalidToken()
        return Ok(claims)

    # ==================== Two-factor (TOTP) ====================

    @staticmethod
    def generate_two_factor_secret() -> str:
        return pyotp.random_base32()

    @staticmethod
    def current_two_factor_code(secret: str) -> str:
        return pyotp.TOTP(secret).now()

    @staticmethod
    def validate_two_factor_code(secret: Optional[str], code: Optional[str]) -> bool:
        if not secret or not code:
            return False
        try:
            return pyotp.TOTP(secret).verify(code, valid_window=TOTP_VALID_WINDOW)
        except Exception as exc:  # malformed base32 secret, etc.
            logger.warning("Two-factor code could not be checked", reason=type(exc).__name__)
            return False


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService(JwtSettings.from_settings())
