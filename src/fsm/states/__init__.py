"""
Exports públicos do módulo fsm/states.

Estados de conexão de uma instância.
"""

from fsm.states.connection import (
    ACTIVE_STATES,
    DEFAULT_INITIAL_STATE,
    ConnectionState,
    is_active,
)

__all__ = [
    "ACTIVE_STATES",
    "DEFAULT_INITIAL_STATE",
    "ConnectionState",
    "is_active",
]
