"""
Planificación: traduce un delta a acciones legibles (para mostrar en CLI).

Lógica pura; no ejecuta nada.
"""

from typing import List, Mapping

from cqtool.core.diff import DELETE_SUFFIX, property_name
from cqtool.core.state import PropertyValue


def _fmt(value: PropertyValue) -> str:
    if isinstance(value, list):
        return "[" + ", ".join(value) + "]"
    return value


def plan_from_delta(
    path: str,
    delta: Mapping[str, PropertyValue],
    current: Mapping[str, PropertyValue]
) -> List[str]:
    """Convierte un delta en acciones legibles, una por propiedad."""
    actions: List[str] = []
    for key, value in delta.items():
        name = property_name(key)
        if key.endswith(DELETE_SUFFIX):
            actions.append(f"Eliminar {path}/{name}")
        elif name in current:
            actions.append(f"Actualizar {path}/{name}: {_fmt(current[name])} → {_fmt(value)}")
        else:
            actions.append(f"Crear {path}/{name} = {_fmt(value)}")
    return actions
