"""Implementações de ConnectionProviderProtocol."""

from .stub import StubConnectionProvider

__all__ = ["StubConnectionProvider"]
