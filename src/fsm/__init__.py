"""
Módulo FSM — Máquina de Estados de conexão das instâncias.

Implementa a FSM determinística que governa o ciclo de vida de
conexão de cada instância (disconnected → connecting → connected).

Estrutura:
    - states/: Definições dos estados (ConnectionState enum)
    - transitions/: Regras de transição (VALID_TRANSITIONS)
    - rules/: Guards e invariantes
    - manager/: Máquina de estados (ConnectionStateMachine)
    - types/: Tipos de dados (StateTransition, TransitionResult)
"""

# Manager
from fsm.manager import (
    ConnectionStateMachine,
    create_fsm,
)

# Guards/Rules
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)

# Estados
from fsm.states import (
    ACTIVE_STATES,
    DEFAULT_INITIAL_STATE,
    ConnectionState,
    is_active,
)

# Transições
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)

# Types
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "ACTIVE_STATES",
    "DEFAULT_INITIAL_STATE",
    "VALID_TRANSITIONS",
    "ConnectionState",
    "ConnectionStateMachine",
    "GuardResult",
    "StateTransition",
    "TransitionResult",
    "create_fsm",
    "evaluate_guards",
    "get_valid_targets",
    "is_active",
    "is_transition_valid",
    "validate_transition_map",
]
