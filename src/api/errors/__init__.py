"""Tradução de exceções para respostas HTTP."""

from api.errors.handlers import error_response, register_exception_handlers

__all__ = ["error_response", "register_exception_handlers"]
