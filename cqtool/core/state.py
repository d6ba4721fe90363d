"""
Contratos de estado: valores inmutables que describen un nodo JCR.

DesiredState lo aporta quien invoca; ActualState se lee del sistema remoto al
inicio de cada pasada y nunca se reutiliza entre pasadas.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Protocol, Union

from cqtool.core.errors import ValidationError


PropertyValue = Union[str, List[str]]
PropertySet = Dict[str, PropertyValue]

PRIMARY_TYPE = "jcr:primaryType"


class Policy(str, Enum):
    """Política de reconciliación"""
    MERGE = "merge"
    REPLACE = "replace"


def to_wire_value(value: Any) -> PropertyValue:
    """
    Normaliza un valor escalar (o lista) a su forma de cable.

    Booleanos en minúsculas como los serializa Sling; listas elemento a elemento.
    """
    if isinstance(value, (list, tuple)):
        return [to_wire_value(v) for v in value]  # type: ignore[misc]
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def normalize_properties(properties: Mapping[str, Any]) -> PropertySet:
    """Devuelve una copia del mapa con todos los valores en forma de cable."""
    return {str(k): to_wire_value(v) for k, v in properties.items()}


def validate_node_path(path: str) -> str:
    """Valida que el path sea absoluto y no vacío."""
    if not path or not path.strip():
        raise ValidationError("El path del nodo no puede estar vacío")
    if not path.startswith("/"):
        raise ValidationError(f"El path del nodo debe ser absoluto: {path}")
    return path


@dataclass(frozen=True)
class Credentials:
    """Credenciales básicas, enviadas en cada llamada."""
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class DesiredState:
    """Estado deseado de un nodo para una pasada de reconciliación."""
    path: str
    properties: PropertySet
    policy: Policy

    def __post_init__(self):
        validate_node_path(self.path)
        object.__setattr__(self, "properties", normalize_properties(self.properties))
        object.__setattr__(self, "policy", Policy(self.policy))


@dataclass(frozen=True)
class ActualState:
    """Estado real leído del sistema remoto."""
    path: str
    exists: bool
    properties: PropertySet = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "properties", normalize_properties(self.properties))


class NodeClient(Protocol):
    """Protocolo: quien habla con la API de contenido (p. ej. SlingClient)."""
    def get(self, path: str, auth: Credentials, timeout: Any = None) -> Any:
        ...

    def multipart_post(
        self,
        path: str,
        auth: Credentials,
        payload: Mapping[str, PropertyValue],
        timeout: Any = None
    ) -> Any:
        ...
