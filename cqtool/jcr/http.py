"""
Módulo HTTP - Cliente para la API de contenido Sling (CQ/AEM)

Transporte puramente mecánico: no interpreta códigos de estado ni reintenta.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

import requests
from requests.auth import HTTPBasicAuth

from cqtool.core.errors import TransportError
from cqtool.core.state import Credentials, PropertyValue


DEFAULT_INSTANCE = "http://localhost:4502"


@dataclass(frozen=True)
class HttpResponse:
    """Código de estado y cuerpo de una respuesta"""
    status_code: int
    body: str

    @property
    def code(self) -> str:
        return str(self.status_code)


MULTI_VALUE_HINT = "String[]"


def multipart_fields(payload: Mapping[str, PropertyValue]) -> List[Tuple[str, Tuple[None, str]]]:
    """
    Campos multipart/form-data: uno por propiedad.

    Las multivaluadas repiten el campo una vez por valor y llevan
    ``<nombre>@TypeHint=String[]`` para que Sling las guarde como array aun con
    cero o un valor. Una lista vacía se envía como un valor en blanco con
    ``@IgnoreBlanks``, que Sling descarta dejando el array vacío.
    """
    fields: List[Tuple[str, Tuple[None, str]]] = []
    for name, value in payload.items():
        if not isinstance(value, list):
            fields.append((name, (None, value)))
            continue
        fields.append((f"{name}@TypeHint", (None, MULTI_VALUE_HINT)))
        if not value:
            fields.append((f"{name}@IgnoreBlanks", (None, "true")))
            fields.append((name, (None, "")))
        for v in value:
            fields.append((name, (None, v)))
    return fields


class SlingClient:
    """Cliente para la API HTTP de Sling"""

    def __init__(self, instance: str = DEFAULT_INSTANCE, session: Optional[requests.Session] = None):
        """
        Inicializa el cliente

        Args:
            instance: URL base de la instancia (ej: http://localhost:4502)
            session: Sesión de requests a reutilizar (por defecto una nueva)
        """
        self.instance = instance.rstrip("/")
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.instance}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        auth: Credentials,
        files: Optional[list] = None,
        timeout: Optional[float] = None
    ) -> HttpResponse:
        """
        Realiza una petición con autenticación básica

        Args:
            method: Método HTTP (GET o POST)
            path: Path en el repositorio (ej: /content/site.json)
            auth: Credenciales de la llamada
            files: Campos multipart (solo POST)
            timeout: Plazo de la llamada en segundos (None = sin plazo)

        Returns:
            HttpResponse con código y cuerpo
        """
        try:
            response = self.session.request(
                method,
                self.url(path),
                auth=HTTPBasicAuth(auth.username, auth.password),
                files=files,
                timeout=timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Timeout al conectar con {self.instance}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Error de conexión con {self.instance}: {e}") from e

        return HttpResponse(status_code=response.status_code, body=response.text)

    def get(self, path: str, auth: Credentials, timeout: Optional[float] = None) -> HttpResponse:
        """GET autenticado sobre un path del repositorio"""
        return self._request("GET", path, auth, timeout=timeout)

    def multipart_post(
        self,
        path: str,
        auth: Credentials,
        payload: Mapping[str, PropertyValue],
        timeout: Optional[float] = None
    ) -> HttpResponse:
        """POST multipart con un campo por propiedad"""
        return self._request("POST", path, auth, files=multipart_fields(payload), timeout=timeout)
