from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv, find_dotenv

# Ensure .env is loaded regardless of current working directory
load_dotenv(find_dotenv(), override=False)


class ServerSettings(BaseSettings):
	model_config = SettingsConfigDict(env_prefix="SERVER_")
	host: str = "127.0.0.1"
	port: int = 3000
	log_level: str = "info"


class UpstreamSettings(BaseSettings):
	model_config = SettingsConfigDict(env_prefix="UPSTREAM_")
	# None - без таймаута
	timeout: Optional[float] = None
	follow_redirects: bool = True
	max_redirects: int = 10
	verify_tls: bool = True
	user_agent: Optional[str] = None


class ProxySettings(BaseSettings):
	model_config = SettingsConfigDict(env_prefix="PROXY_")
	cache_control: str = "public, max-age=31536000"
	default_content_type: str = "application/octet-stream"

	# PROXY_BLOCK_PRIVATE_NETWORKS - резолвить DNS и отсекать приватные сети
	block_private_networks: bool = False


class LoggingSettings(BaseSettings):
	model_config = SettingsConfigDict(env_prefix="LOG_")
	dir: str = "logs"
	to_files: bool = True
	level: str = "DEBUG"


class Settings(BaseSettings):
	server: ServerSettings = ServerSettings()
	upstream: UpstreamSettings = UpstreamSettings()
	proxy: ProxySettings = ProxySettings()
	logging: LoggingSettings = LoggingSettings()


settings = Settings()
