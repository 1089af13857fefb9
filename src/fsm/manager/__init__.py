"""
Exports públicos do módulo fsm/manager.

Máquina de estados de conexão de instâncias.
"""

from fsm.manager.machine import (
    DEFAULT_HISTORY_LIMIT,
    ConnectionStateMachine,
    create_fsm,
)

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "ConnectionStateMachine",
    "create_fsm",
]
