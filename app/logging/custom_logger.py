"""
Custom Logger com contexto estruturado
Níveis: warning, info, request, error, slow, great
"""
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

from app.logging.formatters import get_formatter_for_level
from app.logging.log_levels import LogLevel
from app.helpers.getters import isDebugMode

SENSITIVE_KEYS = {"password", "new_password", "token", "refresh_token", "two_factor_code", "secret"}


class CustomLogger:
    """
    Logger customizado com contexto estruturado

    Uso:
        logger = CustomLogger("auth")
        logger.info("Login successful", user_id="...")
        logger.warning("Login rejected", email="ann@x.com", reason="unconfirmed")
        logger.error("Email dispatch failed", exc_info=True, email="ann@x.com")

    Keyword context is appended to the message as ``key=value`` pairs and is
    also attached to the record as ``custom_data``.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if isDebugMode() else logging.INFO)
        # Já formatamos a mensagem aqui; evita duplicação no root logger
        self.logger.propagate = False

        # Remove handlers existentes para evitar duplicação
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(console_handler)

    @staticmethod
    def _render_context(context: Dict[str, Any]) -> str:
        parts = []
        for key, value in context.items():
            if key in SENSITIVE_KEYS:
                value = "[FILTERED]"
            parts.append(f"{key}={value}")
        return " ".join(parts)

    def _log(
        self,
        level: LogLevel,
        message: str,
        exc_info: bool = False,
        **context: Any
    ) -> None:
        """Método interno de logging"""
        log_data = {
            "level": level.value,
            "module": self.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context
        }

        if exc_info:
            log_data["traceback"] = self._get_clean_traceback()

        rendered = message
        if context:
            rendered = f"{message} | {self._render_context(context)}"

        record = logging.LogRecord(
            name=self.name,
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg=rendered,
            args=(),
            exc_info=None
        )
        formatted_message = get_formatter_for_level(level).format(record)

        self.logger.log(
            level.stdlib_level,
            formatted_message,
            extra={"custom_data": log_data},
            exc_info=exc_info
        )

    def _get_clean_traceback(self) -> str:
        """
        Extrai traceback limpo, removendo duplicações e frames de bibliotecas
        """
        seen = set()
        clean_lines = []
        for line in traceback.format_exc().split('\n'):
            if line.strip() and line not in seen:
                if not any(skip in line for skip in ['/usr/local/lib/python', 'site-packages']):
                    seen.add(line)
                    clean_lines.append(line)
        return '\n'.join(clean_lines)

    # Métodos públicos para cada nível

    def warning(self, message: str, **context: Any) -> None:
        """
        Situações esperadas que merecem atenção (credenciais inválidas, token expirado)

        Exemplo:
            logger.warning("Login rejected", email="ann@x.com")
        """
        self._log(LogLevel.WARNING, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def request(
        self,
        message: str,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        **context: Any
    ) -> None:
        """
        Log de requisição HTTP

        Exemplo:
            logger.request("API request", method="POST", path="/api/auth/login",
                           status_code=200, duration=0.152)
        """
        self._log(
            LogLevel.REQUEST,
            message,
            method=method,
            path=path,
            status_code=status_code,
            duration=duration,
            **context
        )

    def error(
        self,
        message: str,
        exc_info: bool = True,
        **context: Any
    ) -> None:
        self._log(LogLevel.ERROR, message, exc_info=exc_info, **context)

    def slow(
        self,
        message: str,
        duration: float,
        threshold: float = 1.0,
        **context: Any
    ) -> None:
        self._log(LogLevel.SLOW, message, duration=duration, threshold=threshold, **context)

    def great(self, message: str, **context: Any) -> None:
        """
        Log de sucesso - eventos positivos importantes

        Exemplo:
            logger.great("Email confirmed", user_id="...")
        """
        self._log(LogLevel.GREAT, message, **context)


_loggers: Dict[str, CustomLogger] = {}


def get_logger(name: str) -> CustomLogger:
    """
    Obtém uma instância do logger customizado

    Uso:
        from app.logging import get_logger
        logger = get_logger(__name__)
    """
    if name not in _loggers:
        _loggers[name] = CustomLogger(name)
    return _loggers[name]
