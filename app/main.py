from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.endpoints import auth, products
from app.api.responses import register_exception_handlers
from app.core.config import settings
from app.core.logging import init_sentry, setup_logging
from app.db.base import Base
from app.db.session import engine_internal
from app.helpers.getters import isDebugMode
from app.middleware.logging import AccessLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine_internal.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine_internal.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="""
## 🔐 Autenticação

Esta API usa JWT Bearer (HS256) com refresh token.

1. **Registro**: `POST /api/auth/register`, depois confirme o email pelo link recebido
2. **Login**: `POST /api/auth/login` com `{"email": "...", "password": "..."}`
   - Com 2FA habilitado, o código chega por email: envie em `POST /api/auth/two-factor`
3. **Authorize**: clique no cadeado e cole o `token` retornado
4. **Renovação**: `POST /api/auth/refresh-token` com `{"token": "...", "refreshToken": "..."}`
   - Cada refresh token só pode ser usado uma vez

## 📦 Produtos

CRUD em `/api/products`; exclusão é lógica (o produto fica inativo).
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Initialize logging and error tracking
setup_logging()
init_sentry()

origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,         # Permite apenas as origens definidas na lista
    allow_credentials=True,        # Permite o envio de cookies e credenciais
    allow_methods=["*"],           # Permite todos os métodos (GET, POST, etc.)
    allow_headers=["*"],           # Permite todos os cabeçalhos
)

# In debug mode, access logging is optional
app.add_middleware(AccessLoggingMiddleware, enabled=not isDebugMode())

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(products.router, prefix="/api/products", tags=["products"])


@app.get("/")
def root():
    return {"message": f"Bem-vindo à {settings.APP_NAME}. A documentação OpenAPI está em /docs"}


@app.get("/health")
def health():
    return {"status": "ok"}
