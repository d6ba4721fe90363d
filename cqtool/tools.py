"""
Módulo Tools - Utilidades compartidas de aprovisionamiento
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional

import requests

from cqtool.core.errors import InstallError


def ensure_directory(path: Path, mode: Optional[int] = None) -> bool:
    """
    Asegura que un directorio existe, creándolo si es necesario

    Args:
        path: Ruta del directorio
        mode: Permisos a aplicar (ej: 0o750)

    Returns:
        True si el directorio se creó, False si ya existía
    """
    created = not path.exists()
    try:
        path.mkdir(parents=True, exist_ok=True)
        if mode is not None:
            os.chmod(path, mode)
    except OSError as e:
        raise InstallError(f"No se pudo crear el directorio {path}: {e}") from e
    return created


def chown(path: Path, user: Optional[str] = None, group: Optional[str] = None) -> None:
    """Asigna dueño/grupo si se especifican (requiere privilegios)"""
    if not user and not group:
        return
    try:
        shutil.chown(path, user=user, group=group)
    except (LookupError, OSError) as e:
        raise InstallError(f"No se pudo asignar dueño a {path}: {e}") from e


def download_file(url: str, dest: Path, timeout: Optional[float] = None) -> None:
    """
    Descarga una URL a disco en bloques. Escribe primero a un temporal para no
    dejar archivos a medias; si algo falla, el temporal se elimina.
    """
    tmp = dest.with_name(dest.name + ".part")
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            if not response.ok:
                raise InstallError(f"Error {response.status_code} al descargar {url}")
            with open(tmp, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)
        tmp.replace(dest)
    except requests.exceptions.RequestException as e:
        raise InstallError(f"Error de conexión al descargar {url}: {e}") from e
    finally:
        tmp.unlink(missing_ok=True)


def run_command(
    command: list,
    cwd: Optional[Path] = None,
    timeout: Optional[int] = None,
    user: Optional[str] = None,
    group: Optional[str] = None
) -> tuple[bool, str, str]:
    """
    Ejecuta un comando del sistema de forma segura

    Args:
        command: Lista con comando y argumentos
        cwd: Directorio de trabajo
        timeout: Timeout en segundos
        user: Usuario con el que ejecutar (requiere privilegios)
        group: Grupo con el que ejecutar (requiere privilegios)

    Returns:
        Tuple (success, stdout, stderr)
    """
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
            user=user,
            group=group,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return False, "", "Timeout"
    except FileNotFoundError:
        return False, "", f"Comando no encontrado: {command[0]}"
