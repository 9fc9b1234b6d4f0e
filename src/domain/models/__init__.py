from .proxy import ProxyRequest, ResolvedTarget, UpstreamResponse, ProxyResponse

__all__ = [
	"ProxyRequest",
	"ResolvedTarget",
	"UpstreamResponse",
	"ProxyResponse",
]
