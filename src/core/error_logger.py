"""
Модуль для логирования ошибок в отдельные файлы.
Предоставляет структурированное логирование ошибок проксирования.
"""

import logging
import json
import traceback
from typing import Any, Dict, Optional
from datetime import datetime


class ErrorReporter:
    """Класс для структурированного логирования ошибок"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def log_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        message: str = "",
        include_traceback: bool = True
    ) -> None:
        """
        Логирует ошибку с детальной информацией

        Args:
            error: Исключение для логирования
            context: Дополнительный контекст ошибки (target_url, status_code, etc.)
            message: Дополнительное сообщение об ошибке
            include_traceback: Включать ли traceback в лог
        """
        error_info = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "timestamp": datetime.now().isoformat(),
            "context": context or {},
            "custom_message": message
        }

        if include_traceback:
            error_info["traceback"] = traceback.format_exc()

        log_message = f"Error: {error_info['error_type']} - {error_info['error_message']}"
        if message:
            log_message = f"{message} | {log_message}"
        if context:
            log_message += f" | Context: {json.dumps(context, ensure_ascii=False, default=str)}"

        self.logger.error(log_message, exc_info=include_traceback, extra={
            "error_info": error_info
        })

    def log_upstream_error(
        self,
        error: Exception,
        target_url: str,
        status_code: Optional[int] = None
    ) -> None:
        """Логирует ошибки обращения к upstream"""
        context = {
            "target_url": target_url,
            "status_code": status_code,
        }

        # Для ответов с кодом ошибки traceback бесполезен
        self.log_error(
            error,
            context,
            "Upstream fetch error",
            include_traceback=status_code is None,
        )

    def log_stream_error(
        self,
        error: Exception,
        target_url: str,
        bytes_sent: int
    ) -> None:
        """Логирует обрыв потока после отправки заголовков клиенту"""
        context = {
            "target_url": target_url,
            "bytes_sent": bytes_sent,
        }

        self.log_error(error, context, "Stream aborted after headers were sent")


# Глобальный экземпляр ErrorReporter (инициализируется при создании приложения)
error_reporter: Optional[ErrorReporter] = None


def get_error_reporter() -> ErrorReporter:
    """Получить глобальный экземпляр ErrorReporter"""
    if error_reporter is None:
        raise RuntimeError("Error reporter not initialized. Call setup_error_reporting() first.")
    return error_reporter


def setup_error_reporting(error_logger: logging.Logger) -> None:
    """Инициализировать глобальный ErrorReporter"""
    global error_reporter
    error_reporter = ErrorReporter(error_logger)
