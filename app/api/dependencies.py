from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.responses import ResultFailure
from app.core.results import InvalidToken, Ok, Unauthorized
from app.db.session import SessionAsync
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.credential_store import CredentialStore
from app.services.email import EmailService, get_email_service
from app.services.product_service import ProductService
from app.services.token_service import TokenService, get_token_service

bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Access token devolvido por /api/auth/login ou /api/auth/two-factor"
)


async def get_db():
    async with SessionAsync() as session:
        yield session


def get_credential_store(db: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_auth_service(
        store: CredentialStore = Depends(get_credential_store),
        tokens: TokenService = Depends(get_token_service),
        email: EmailService = Depends(get_email_service),
) -> AuthService:
    return AuthService(store, tokens, email)


def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        tokens: TokenService = Depends(get_token_service),
        store: CredentialStore = Depends(get_credential_store),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise ResultFailure(InvalidToken())

    claims = tokens.decode_access_token(credentials.credentials)
    if not isinstance(claims, Ok) or not claims.value.get("sub"):
        raise ResultFailure(InvalidToken())

    user = await store.find_by_id(claims.value["sub"])
    if user is None:
        raise ResultFailure(InvalidToken())
    if not user.is_active:
        raise ResultFailure(Unauthorized("User account is inactive."))
    return user
