from providers.base import BaseProvider
from providers.openrouter_provider import OpenRouterProvider


__all__ = [
    "BaseProvider",
    "OpenRouterProvider",
]
