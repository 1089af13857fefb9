"""Dependencies FastAPI (auth e serviços)."""

from api.dependencies.auth import require_api_key
from api.dependencies.services import (
    get_controller,
    get_dispatcher,
    get_registry,
    get_services,
)

__all__ = [
    "get_controller",
    "get_dispatcher",
    "get_registry",
    "get_services",
    "require_api_key",
]
