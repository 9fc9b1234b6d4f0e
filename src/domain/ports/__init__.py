from .target_policy import TargetPolicy
from .upstream_client import UpstreamClient

__all__ = [
	"TargetPolicy",
	"UpstreamClient",
]
