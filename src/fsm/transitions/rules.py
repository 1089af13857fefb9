"""
Regras de transição válidas entre estados de conexão.

Define o grafo de transições: conectar, concluir conexão, perder
conexão, reconectar e desconectar.
"""

from fsm.states.connection import ConnectionState

# Tipagem explícita do mapa de transições
TransitionMap = dict[ConnectionState, frozenset[ConnectionState]]

# Chave: estado de origem
# Valor: conjunto de estados de destino permitidos
VALID_TRANSITIONS: TransitionMap = {
    # DISCONNECTED: só pode iniciar conexão
    ConnectionState.DISCONNECTED: frozenset({
        ConnectionState.CONNECTING,
    }),

    # CONNECTING: provider reporta ready ou falha
    ConnectionState.CONNECTING: frozenset({
        ConnectionState.CONNECTED,
        ConnectionState.DISCONNECTED,
    }),

    # CONNECTED: desconexão explícita/perda, ou reconexão pelo provider
    ConnectionState.CONNECTED: frozenset({
        ConnectionState.DISCONNECTED,
        ConnectionState.CONNECTING,
    }),
}


def get_valid_targets(state: ConnectionState) -> frozenset[ConnectionState]:
    """
    Retorna os estados de destino válidos para um estado de origem.

    Args:
        state: Estado de origem

    Returns:
        Conjunto de estados de destino permitidos
    """
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(from_state: ConnectionState, to_state: ConnectionState) -> bool:
    """
    Verifica se uma transição é válida segundo as regras definidas.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino

    Returns:
        True se a transição é permitida, False caso contrário
    """
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Verifica:
    - Todos os estados do enum estão no mapa
    - Todo estado alcança DISCONNECTED (direta ou indiretamente)
    - Nenhuma transição aponta para estado inexistente

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in ConnectionState:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for from_state, targets in VALID_TRANSITIONS.items():
        for target in targets:
            if not isinstance(target, ConnectionState):
                errors.append(
                    f"Transição {from_state.name} → {target}: destino inválido"
                )

    for state in ConnectionState:
        if state is ConnectionState.DISCONNECTED:
            continue
        if not _reaches(state, ConnectionState.DISCONNECTED):
            errors.append(f"Estado {state.name} não alcança DISCONNECTED")

    return errors


def _reaches(start: ConnectionState, goal: ConnectionState) -> bool:
    seen: set[ConnectionState] = set()
    pending = [start]
    while pending:
        current = pending.pop()
        if current == goal:
            return True
        if current in seen:
            continue
        seen.add(current)
        pending.extend(get_valid_targets(current))
    return False
