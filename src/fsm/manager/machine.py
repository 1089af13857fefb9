"""
Máquina de estados de conexão (ConnectionStateMachine).

Controla o estado atual de uma instância, valida transições contra o
grafo e os guards, e mantém histórico recente para observabilidade.
A máquina é puramente síncrona e não faz IO.
"""

from collections import deque
from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.connection import DEFAULT_INITIAL_STATE, ConnectionState
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult

# Histórico mantido por instância (as mais recentes)
DEFAULT_HISTORY_LIMIT = 50


class ConnectionStateMachine:
    """
    Máquina de estados de conexão de uma instância.

    Attributes:
        current_state: Estado atual da máquina
        history: Transições recentes (limitadas a history_limit)
    """

    __slots__ = ("_current_state", "_history", "_instance_id")

    def __init__(
        self,
        instance_id: str = "",
        initial_state: ConnectionState | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: deque[StateTransition] = deque(maxlen=history_limit)
        self._instance_id = instance_id

    @property
    def current_state(self) -> ConnectionState:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def instance_id(self) -> str:
        return self._instance_id

    def can_transition_to(self, target: ConnectionState) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        if not is_transition_valid(self._current_state, target):
            return False
        return evaluate_guards(self._current_state, target).allowed

    def get_valid_targets(self) -> frozenset[ConnectionState]:
        """Retorna estados de destino válidos a partir do estado atual."""
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: ConnectionState,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho (ex: 'connect_requested')
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        guard_result: GuardResult = evaluate_guards(self._current_state, target)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        if not is_transition_valid(self._current_state, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current_state.name} → {target.name}"
                ),
            )

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )

        self._current_state = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """
        Retorna resumo do estado atual para observability.

        Returns:
            Dict com informações do estado (seguro para logs)
        """
        return {
            "instance_id": self._instance_id,
            "current_state": self._current_state.value,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.value for s in self.get_valid_targets()),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Retorna histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]


def create_fsm(
    instance_id: str,
    initial_state: ConnectionState | None = None,
) -> ConnectionStateMachine:
    """
    Factory function para criar uma FSM de conexão.

    Args:
        instance_id: Identificador da instância
        initial_state: Estado inicial (opcional)

    Returns:
        ConnectionStateMachine configurada
    """
    return ConnectionStateMachine(
        instance_id=instance_id,
        initial_state=initial_state,
    )
