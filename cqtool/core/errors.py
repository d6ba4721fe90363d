"""
Errores de cqtool.

El core solo define excepciones; las capas (CLI) se encargan del formato de salida.
"""

from typing import Optional


class CqError(Exception):
    """Error base de cqtool."""
    pass


class ValidationError(CqError):
    """Error de validación de rutas, propiedades o modelos."""
    pass


class ConfigError(CqError):
    """Error de configuración (archivo faltante, formato inválido)."""
    pass


class TransportError(CqError):
    """Fallo de red/conexión contra la API de contenido."""
    pass


class DecodeError(CqError):
    """El cuerpo remoto no se pudo interpretar como JSON estructurado."""
    pass


class HttpResponseError(CqError):
    """Respuesta HTTP fuera del rango 2xx; conserva código y cuerpo tal cual."""

    def __init__(self, path: str, status_code: int, body: Optional[str] = ""):
        self.path = path
        self.status_code = status_code
        self.body = body or ""
        super().__init__(
            f"Algo falló durante la operación sobre {path}\n"
            f"HTTP response code: {status_code}\n"
            f"HTTP response body: {self.body}\n"
            "Revisa error.log de la instancia para más información."
        )


class NodeNotFoundError(CqError):
    """Se intentó modificar un nodo que no existe (usar create)."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"El nodo {path} no existe; usa la acción create")


class InstallError(CqError):
    """Error durante el aprovisionamiento de una instancia."""
    pass
