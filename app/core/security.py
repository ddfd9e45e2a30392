import base64
import hashlib
import secrets

from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> bool:
    """Spend the time of a real bcrypt check; used when there is no account to check against."""
    return pwd_context.dummy_verify()


def generate_opaque_token(num_bytes: int = 32) -> str:
    """Random token, standard base64 (may contain '+', '/' and '=')."""
    return base64.b64encode(secrets.token_bytes(num_bytes)).decode("ascii")


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def urlsafe_encode(value: str) -> str:
    """base64url without padding, for embedding tokens in links."""
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")


def urlsafe_decode(value: str) -> str:
    """Inverse of urlsafe_encode. Raises ValueError on malformed input."""
    padding = "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode(value + padding).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError("Malformed token encoding") from exc
