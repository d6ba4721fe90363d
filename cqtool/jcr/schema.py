"""
Introspección de tipos de nodo: propiedades protegidas por tipo primario
"""

from typing import FrozenSet, Optional

from cqtool.core.errors import DecodeError, HttpResponseError
from cqtool.core.state import PRIMARY_TYPE, Credentials, NodeClient
from cqtool.jcr.reader import decode_json_object


NODE_TYPES_ROOT = "/jcr:system/jcr:nodeTypes"
PROTECTED_FIELD = "rep:protectedProperties"


def node_type_path(primary_type: str) -> str:
    return f"{NODE_TYPES_ROOT}/{primary_type}.json"


def fetch_protected_properties(
    client: NodeClient,
    primary_type: Optional[str],
    auth: Credentials,
    timeout: Optional[float] = None
) -> FrozenSet[str]:
    """
    Propiedades protegidas de un tipo de nodo JCR.

    Tipo vacío o desconocido (404) → conjunto vacío.
    """
    if not primary_type:
        return frozenset()

    req_path = node_type_path(primary_type)
    resp = client.get(req_path, auth, timeout=timeout)
    if resp.status_code == 404:
        return frozenset()
    if resp.status_code != 200:
        raise HttpResponseError(req_path, resp.status_code, resp.body)

    protected = decode_json_object(resp.body, req_path).get(PROTECTED_FIELD)

    # CQ 5.6.1 no publica rep:protectedProperties
    if not protected:
        return frozenset()
    if isinstance(protected, str):
        protected = [protected]
    if not isinstance(protected, (list, dict)):
        raise DecodeError(f"{PROTECTED_FIELD} con formato inesperado en {req_path}")

    # jcr:primaryType figura como protegida, pero se puede cambiar sin problemas
    return frozenset(str(name) for name in protected if name != PRIMARY_TYPE)
