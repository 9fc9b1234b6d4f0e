import uvicorn
from core.config import settings
from core.error_logger import setup_error_reporting
from core.logging_setup import setup_logging
from presentation.app import create_app

error_logger = setup_logging(settings.logging)
setup_error_reporting(error_logger)

app = create_app(settings)

if __name__ == "__main__":
	print(f"Media proxy running on http://{settings.server.host}:{settings.server.port}")
	uvicorn.run(
		"main:app",
		host=settings.server.host,
		port=settings.server.port,
		log_level=settings.server.log_level,
	)
