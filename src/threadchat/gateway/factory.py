"""Factory for creating messaging gateways."""

from typing import Any

from .base import ChatGateway


def create_gateway(backend: str = "memory", **config: Any) -> ChatGateway:
    """Create a messaging gateway.

    Args:
        backend: Backend type ("memory" or "http")
        **config: Backend-specific configuration

    Returns:
        ChatGateway instance (not yet connected)

    Raises:
        ValueError: If backend type is not supported

    Example:
        >>> gateway = create_gateway("http", base_url="https://chat.example.com/api")
        >>> await gateway.connect()
    """
    if backend == "memory":
        from .in_memory import InMemoryGateway
        return InMemoryGateway(**config)

    elif backend == "http":
        from .http import HttpChatGateway
        return HttpChatGateway(**config)

    raise ValueError(
        f"Unsupported gateway backend: {backend}. "
        f"Supported backends: memory, http"
    )
