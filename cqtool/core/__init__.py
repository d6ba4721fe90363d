"""
Core: lógica de negocio pura.

ENFORCEMENT:
- Este paquete NO debe importar cqtool.jcr, cqtool.installer ni la CLI.
- Permitido: typing, dataclasses, cqtool.core.* (errors, state, diff, planner).
- La capa jcr y la CLI importan desde core; nunca al revés.
"""

from cqtool.core.errors import (
    CqError,
    ConfigError,
    DecodeError,
    HttpResponseError,
    InstallError,
    NodeNotFoundError,
    TransportError,
    ValidationError,
)

__all__ = [
    "CqError",
    "ConfigError",
    "DecodeError",
    "HttpResponseError",
    "InstallError",
    "NodeNotFoundError",
    "TransportError",
    "ValidationError",
]
