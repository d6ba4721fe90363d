"""
Motor de diff: calcula el delta entre estado deseado y real.

Lógica pura; sin I/O. Quien llama aporta el conjunto de propiedades protegidas
ya resuelto (ver cqtool.jcr.schema).
"""

from typing import AbstractSet, Dict, Mapping, Optional

from cqtool.core.state import (
    PRIMARY_TYPE,
    ActualState,
    DesiredState,
    Policy,
    PropertySet,
    PropertyValue,
)


DELETE_SUFFIX = "@Delete"

# Sling documenta jcr:lastModified/jcr:lastModifiedBy como automáticas, pero
# CQ/AEM crea cq:lastModified/cq:lastModifiedBy. Se excluyen ambas familias.
AUTO_PROPERTIES = frozenset({
    "jcr:created",
    "jcr:createdBy",
    "jcr:lastModified",
    "jcr:lastModifiedBy",
    "cq:lastModified",
    "cq:lastModifiedBy",
})

Delta = Dict[str, PropertyValue]


def values_equal(current: Optional[PropertyValue], desired: PropertyValue) -> bool:
    """
    Compara valores en forma de cable. Un escalar equivale a una lista de un
    solo elemento con ese valor (Sling no distingue ambos en todas las versiones).
    """
    if current == desired:
        return True
    if isinstance(desired, list) and isinstance(current, str):
        return desired == [current]
    if isinstance(current, list) and isinstance(desired, str):
        return current == [desired]
    return False


def regular_diff(desired: Mapping[str, PropertyValue], current: Mapping[str, PropertyValue]) -> Delta:
    """
    Diff de mezcla: las propiedades deseadas ganan sobre las actuales y solo
    entran al delta las que cambian. Nunca borra.
    """
    merged = {**current, **desired}
    return {k: v for k, v in merged.items() if not values_equal(current.get(k), v)}


def force_replace_diff(desired: Mapping[str, PropertyValue], current: Mapping[str, PropertyValue]) -> Delta:
    """
    Diff de reemplazo: tras aplicarlo, las propiedades del nodo son exactamente
    las deseadas. Lo que sobra se marca con ``<nombre>@Delete``.
    """
    diff: Delta = {}

    for k, v in desired.items():
        if not values_equal(current.get(k), v):
            diff[k] = v

    for k in current:
        if k not in desired:
            diff[f"{k}{DELETE_SUFFIX}"] = ""

    return diff


def property_name(delta_key: str) -> str:
    """Nombre de la propiedad afectada por una clave del delta."""
    if delta_key.endswith(DELETE_SUFFIX):
        return delta_key[: -len(DELETE_SUFFIX)]
    return delta_key


def is_editable(name: str, protected: AbstractSet[str]) -> bool:
    """Una propiedad es editable si no es automática ni protegida."""
    return name not in AUTO_PROPERTIES and name not in protected


def filter_delta(delta: Mapping[str, PropertyValue], protected: AbstractSet[str]) -> Delta:
    """Elimina del delta las claves automáticas o protegidas (incluidos sus @Delete)."""
    return {k: v for k, v in delta.items() if is_editable(property_name(k), protected)}


def best_primary_type(desired: Mapping[str, PropertyValue], current: Mapping[str, PropertyValue]) -> Optional[str]:
    """
    jcr:primaryType en orden de preferencia:
    * estado deseado (si lo define)
    * estado actual (actualización de un nodo existente)

    None si ninguno lo tiene.
    """
    for candidate in (desired.get(PRIMARY_TYPE), current.get(PRIMARY_TYPE)):
        if candidate:
            return candidate if isinstance(candidate, str) else None
    return None


def raw_diff(desired: DesiredState, actual: ActualState) -> Delta:
    """Delta sin filtrar según la política del estado deseado."""
    if desired.policy == Policy.REPLACE:
        return force_replace_diff(desired.properties, actual.properties)
    return regular_diff(desired.properties, actual.properties)


def properties_diff(desired: DesiredState, actual: ActualState, protected: AbstractSet[str] = frozenset()) -> Delta:
    """Delta final: diff según política y luego filtrado."""
    return filter_delta(raw_diff(desired, actual), protected)


def apply_delta(current: Mapping[str, PropertyValue], delta: Mapping[str, PropertyValue]) -> PropertySet:
    """Simula el efecto de un delta sobre un mapa de propiedades (como haría Sling)."""
    result: PropertySet = dict(current)
    for k, v in delta.items():
        if k.endswith(DELETE_SUFFIX):
            result.pop(property_name(k), None)
        else:
            result[k] = v
    return result
