"""Protocolos e contratos do core da aplicação."""

from .connection_provider import (
    PROVIDER_EVENT_TYPES,
    ConnectionProviderFactory,
    ConnectionProviderProtocol,
    ProviderError,
    ProviderEvent,
    ProviderEventHandler,
    ProviderNotConnectedError,
)

__all__ = [
    "PROVIDER_EVENT_TYPES",
    "ConnectionProviderFactory",
    "ConnectionProviderProtocol",
    "ProviderError",
    "ProviderEvent",
    "ProviderEventHandler",
    "ProviderNotConnectedError",
]
