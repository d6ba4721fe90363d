"""
Loader de declaraciones de nodos
Carga YAML y los convierte a modelos Pydantic
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from cqtool.core.errors import ConfigError
from cqtool.jcr.models import InstanceConfig, NodesFile


# Variables de entorno que sobrescriben la instancia declarada
ENV_OVERRIDES = {
    "instance": "CQ_INSTANCE",
    "username": "CQ_USERNAME",
    "password": "CQ_PASSWORD",
    "timeout": "CQ_TIMEOUT",
}


def read_yaml(path: Path) -> Dict[str, Any]:
    """Lee un archivo YAML que debe contener un mapa"""
    if not path.exists():
        raise ConfigError(f"Archivo no encontrado: {path}")
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error al parsear YAML {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} debe contener un mapa YAML en la raíz")
    return data


def load_nodes_file(path: Path) -> NodesFile:
    """Carga un archivo de nodos (instance + nodes)"""
    data = read_yaml(path)
    try:
        return NodesFile(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Declaración inválida en {path}:\n{e}") from e


def resolve_instance(
    declared: Optional[InstanceConfig] = None,
    **overrides: Any
) -> InstanceConfig:
    """
    Resuelve la configuración de instancia.

    Prioridad: opciones explícitas (CLI) > variables de entorno > archivo > defaults.
    """
    values: Dict[str, Any] = declared.model_dump() if declared else {}
    for key, env_var in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_var, "").strip()
        if env_value:
            values[key] = env_value
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return InstanceConfig(**values)
    except PydanticValidationError as e:
        raise ConfigError(f"Configuración de instancia inválida:\n{e}") from e
