"""Public package exports for CRPT API client."""

from .async_client import AsyncCrptClient
from .client import CrptClient
from .config import CrptClientConfig, RateLimitConfig
from .core.async_dispatcher import AsyncDispatcher
from .core.dispatcher import Dispatcher
from .core.models import RequestEnvelope
from .documents.models import Document, Product

__all__ = [
    "CrptClient",
    "AsyncCrptClient",
    "CrptClientConfig",
    "RateLimitConfig",
    "Dispatcher",
    "AsyncDispatcher",
    "RequestEnvelope",
    "Document",
    "Product",
]
