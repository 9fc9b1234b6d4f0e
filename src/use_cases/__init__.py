from .proxy_media import ProxyMediaUseCase, ALLOWED_SCHEMES
from .resolve_target import decode_target_url, parse_target_url
from .target_policies import DomainPresencePolicy, PrivateNetworkPolicy

__all__ = [
	"ProxyMediaUseCase",
	"ALLOWED_SCHEMES",
	"decode_target_url",
	"parse_target_url",
	"DomainPresencePolicy",
	"PrivateNetworkPolicy",
]
