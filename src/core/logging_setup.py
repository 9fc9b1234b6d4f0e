import logging
import logging.handlers
from pathlib import Path

from core.config import LoggingSettings


def setup_logging(log_settings: LoggingSettings) -> logging.Logger:
	"""Настраивает корневое логирование и отдельный логгер для error отчетов.

	Возвращает логгер error_reports, который передается в setup_error_reporting.
	"""
	level = getattr(logging, log_settings.level.upper(), logging.DEBUG)

	console_handler = logging.StreamHandler()
	console_handler.setLevel(level)
	handlers: list[logging.Handler] = [console_handler]

	error_logger = logging.getLogger("error_reports")
	error_logger.setLevel(logging.ERROR)
	# Отключаем propagation чтобы избежать дублирования
	error_logger.propagate = False

	if log_settings.to_files:
		logs_dir = Path(log_settings.dir)
		logs_dir.mkdir(parents=True, exist_ok=True)

		file_handler = logging.handlers.RotatingFileHandler(
			logs_dir / "app.log",
			maxBytes=10*1024*1024,  # 10MB
			backupCount=5,
			encoding='utf-8'
		)
		file_handler.setLevel(logging.WARNING)  # Файлы пишут только WARNING+
		handlers.append(file_handler)

		error_formatter = logging.Formatter(
			fmt="""%(asctime)s - ERROR REPORT
=====================================
Logger: %(name)s
Level: %(levelname)s
Message: %(message)s
Module: %(module)s
Function: %(funcName)s
Line: %(lineno)d
Process: %(process)d

--- END ERROR REPORT ---
""",
			datefmt="%Y-%m-%d %H:%M:%S"
		)

		# Ротация по дням, храним 30 дней
		error_file_handler = logging.handlers.TimedRotatingFileHandler(
			logs_dir / "errors.log",
			when="midnight",
			interval=1,
			backupCount=30,
			encoding='utf-8'
		)
		error_file_handler.setFormatter(error_formatter)
		error_file_handler.setLevel(logging.ERROR)
		error_logger.addHandler(error_file_handler)
	else:
		error_logger.addHandler(console_handler)

	logging.basicConfig(
		level=level,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
		handlers=handlers,
	)

	logging.getLogger("media_proxy").setLevel(logging.DEBUG)
	logging.getLogger("upstream").setLevel(logging.DEBUG)
	logging.getLogger("access").setLevel(logging.INFO)
	# httpx логирует каждый запрос на INFO, это дублирует наш access лог
	logging.getLogger("httpx").setLevel(logging.WARNING)

	return error_logger
