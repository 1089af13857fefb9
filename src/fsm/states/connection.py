"""
Estados de conexão de uma instância de mensageria.

Uma instância nasce desconectada, passa por `connecting` enquanto o
provider negocia a sessão (pareamento via QR ou sessão salva) e chega
a `connected` quando o provider reporta `ready`. Qualquer estado pode
voltar para `disconnected`.
"""

from enum import StrEnum


class ConnectionState(StrEnum):
    """
    Estados canônicos de conexão de uma instância.

    Estados:
        - DISCONNECTED: Sem sessão ativa com a rede (estado inicial)
        - CONNECTING: Conexão em andamento (inclui aguardando pareamento)
        - CONNECTED: Sessão ativa; operações de mensageria liberadas
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"

    def __str__(self) -> str:
        return self.value


# Estado inicial de toda instância recém-criada
DEFAULT_INITIAL_STATE: ConnectionState = ConnectionState.DISCONNECTED

# Estados em que o provider mantém (ou tenta manter) uma sessão aberta
ACTIVE_STATES: frozenset[ConnectionState] = frozenset({
    ConnectionState.CONNECTING,
    ConnectionState.CONNECTED,
})


def is_active(state: ConnectionState) -> bool:
    """Verifica se o estado mantém sessão com o provider."""
    return state in ACTIVE_STATES

