"""
Lectura del estado real de un nodo (GET {path}.json)
"""

import json
from typing import Any, Dict, Optional

from cqtool.core.errors import DecodeError
from cqtool.core.state import ActualState, Credentials, NodeClient


def decode_json_object(body: str, source: str) -> Dict[str, Any]:
    """Decodifica un cuerpo JSON que debe ser un objeto; si no, DecodeError."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Respuesta no es JSON válido ({source}): {e}") from e
    if not isinstance(data, dict):
        raise DecodeError(f"Se esperaba un objeto JSON ({source}), se recibió {type(data).__name__}")
    return data


def fetch_node(
    client: NodeClient,
    path: str,
    auth: Credentials,
    timeout: Optional[float] = None
) -> ActualState:
    """
    Obtiene el estado actual de un nodo.

    exists = (código 200). Los objetos anidados son nodos hijos, no propiedades,
    y se descartan.
    """
    resp = client.get(f"{path}.json", auth, timeout=timeout)
    if resp.status_code != 200:
        return ActualState(path=path, exists=False)

    data = decode_json_object(resp.body, f"{path}.json")
    properties = {k: v for k, v in data.items() if not isinstance(v, dict)}
    return ActualState(path=path, exists=True, properties=properties)
