"""
Modelos de datos para la declaración de nodos JCR
Usa Pydantic para validación y serialización
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from cqtool.core.state import Credentials, DesiredState, Policy, validate_node_path
from cqtool.core.errors import ValidationError as CqValidationError
from cqtool.jcr.http import DEFAULT_INSTANCE


class NodeAction(str, Enum):
    """Acción a aplicar sobre un nodo"""
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


ScalarValue = Union[str, bool, int, float]


class InstanceConfig(BaseModel):
    """Instancia CQ/AEM destino y credenciales"""
    instance: str = Field(DEFAULT_INSTANCE, description="URL base (ej: http://localhost:4502)")
    username: str = Field("admin", description="Usuario de la instancia")
    password: str = Field("admin", description="Contraseña del usuario", repr=False)
    timeout: Optional[float] = Field(None, description="Plazo por llamada HTTP en segundos")

    def credentials(self) -> Credentials:
        return Credentials(self.username, self.password)


class NodeResource(BaseModel):
    """Declaración de un nodo JCR"""
    path: str = Field(..., description="Path del nodo (ej: /content/site/jcr:content)")
    action: NodeAction = NodeAction.CREATE
    properties: Dict[str, Union[ScalarValue, List[ScalarValue]]] = Field(default_factory=dict)
    policy: Optional[Policy] = Field(None, description="merge | replace")

    @model_validator(mode="before")
    @classmethod
    def legacy_append(cls, data: Any) -> Any:
        """Compatibilidad: 'append: true|false' se mapea a policy merge|replace."""
        if isinstance(data, dict) and "append" in data:
            data = dict(data)
            append = data.pop("append")
            if data.get("policy") is None:
                data["policy"] = Policy.MERGE if append else Policy.REPLACE
        return data

    @field_validator("path")
    @classmethod
    def check_path(cls, v: str) -> str:
        try:
            return validate_node_path(v)
        except CqValidationError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def require_policy(self) -> "NodeResource":
        if self.action != NodeAction.DELETE and self.policy is None:
            raise ValueError(f"{self.path}: 'policy' (merge | replace) es obligatorio para {self.action.value}")
        return self

    def desired_state(self) -> DesiredState:
        if self.policy is None:
            raise CqValidationError(f"{self.path}: sin policy no hay estado deseado")
        return DesiredState(path=self.path, properties=self.properties, policy=self.policy)


class NodesFile(BaseModel):
    """Archivo de nodos (nodes.yaml)"""
    instance: Optional[InstanceConfig] = None
    nodes: List[NodeResource] = Field(default_factory=list)
