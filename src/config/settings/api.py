"""Settings da API HTTP e do provider de conexão.

Porta, host, API key de entrada, CORS e armazenamento de sessões.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Valores padrão que indicam configuração insegura
DEFAULT_API_KEY = "miaw-api-key"
DEFAULT_API_PORT = 3000

SUPPORTED_PROVIDERS = frozenset({"stub"})


@dataclass(frozen=True)
class ApiSettings:
    """Configurações da API.

    Attributes:
        port: Porta HTTP do servidor
        host: Interface de bind
        api_key: Segredo Bearer exigido nas rotas de instância
        cors_origin: Origem permitida (ou "*")
        session_path: Diretório onde o provider persiste sessões
        connection_provider: Implementação do provider (apenas "stub" embarcado)
        stub_auto_pair: Stub conclui o pareamento sozinho após o QR
        stub_pairing_delay_ms: Atraso simulado entre QR e ready
    """

    port: int = DEFAULT_API_PORT
    host: str = "0.0.0.0"
    api_key: str = DEFAULT_API_KEY
    cors_origin: str = "*"
    session_path: str = "./sessions"
    connection_provider: str = "stub"
    stub_auto_pair: bool = False
    stub_pairing_delay_ms: int = 2000

    @property
    def cors_origins(self) -> list[str]:
        """Lista de origens para o CORSMiddleware."""
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    def validate(self) -> list[str]:
        """Valida configurações da API.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not 1 <= self.port <= 65535:
            errors.append(f"API_PORT inválida: {self.port} (esperado 1-65535)")

        if not self.api_key:
            errors.append("API_KEY não pode ser vazia")

        if not self.session_path:
            errors.append("SESSION_PATH não pode ser vazio")

        if self.connection_provider not in SUPPORTED_PROVIDERS:
            errors.append(
                f"CONNECTION_PROVIDER não suportado: {self.connection_provider}"
            )

        if self.stub_pairing_delay_ms < 0:
            errors.append("STUB_PAIRING_DELAY_MS deve ser >= 0")

        return errors

    def security_warnings(self, *, is_production: bool = False) -> dict[str, str]:
        """Alertas de configuração insegura por variável (não bloqueiam o boot)."""
        warnings: dict[str, str] = {}
        if self.api_key == DEFAULT_API_KEY:
            warnings["API_KEY"] = (
                "Using default API key. Set API_KEY environment variable for production."
            )
        if is_production and self.cors_origin == "*":
            warnings["CORS_ORIGIN"] = (
                'CORS origin is set to "*" in production. '
                "Consider restricting to specific origins."
            )
        return warnings


def _load_from_env() -> ApiSettings:
    """Carrega ApiSettings a partir de variáveis de ambiente."""
    return ApiSettings(
        port=int(os.getenv("API_PORT", str(DEFAULT_API_PORT))),
        host=os.getenv("API_HOST", "0.0.0.0"),
        api_key=os.getenv("API_KEY", DEFAULT_API_KEY),
        cors_origin=os.getenv("CORS_ORIGIN", "*"),
        session_path=os.getenv("SESSION_PATH", "./sessions"),
        connection_provider=os.getenv("CONNECTION_PROVIDER", "stub").lower(),
        stub_auto_pair=os.getenv("STUB_AUTO_PAIR", "").lower() in ("true", "1", "yes"),
        stub_pairing_delay_ms=int(os.getenv("STUB_PAIRING_DELAY_MS", "2000")),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> ApiSettings:
    """Retorna instância cacheada de ApiSettings."""
    return _load_from_env()
