"""
Instalador de instancias CQ/AEM

Deja el JAR desempaquetado y la licencia en {home_dir}/{mode}. Idempotente:
cada paso se omite si su resultado ya está presente.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape

from cqtool.core.errors import ConfigError, InstallError
from cqtool.jcr.loader import read_yaml
from cqtool.tools import chown, download_file, ensure_directory, run_command


QUICKSTART_DIR = "crx-quickstart"
LICENSE_FILE = "license.properties"


class InstanceMode(str, Enum):
    """Rol de la instancia"""
    AUTHOR = "author"
    PUBLISH = "publish"


class InstallerConfig(BaseModel):
    """Configuración del instalador (installer.yaml)"""
    home_dir: Path = Field(Path("/opt/cq"), description="Directorio raíz de instancias")
    mode: InstanceMode = InstanceMode.AUTHOR
    user: Optional[str] = Field(None, description="Dueño de los archivos")
    group: Optional[str] = Field(None, description="Grupo de los archivos")
    jar_url: str = Field(..., description="URL del JAR de CQ/AEM")
    license_url: str = Field(..., description="URL del license.properties")
    java: str = Field("java", description="Ejecutable de Java")
    timeout: Optional[float] = Field(None, description="Plazo de descarga en segundos")

    @property
    def instance_home(self) -> Path:
        return self.home_dir / self.mode.value

    @property
    def jar_name(self) -> str:
        name = PurePosixPath(urlparse(self.jar_url).path).name
        if not name:
            raise InstallError(f"No se puede deducir el nombre del JAR desde {self.jar_url}")
        return name


@dataclass
class InstallReport:
    """Pasos ejecutados y omitidos"""
    performed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def load_installer_config(path: Path) -> InstallerConfig:
    data = read_yaml(path)
    try:
        return InstallerConfig(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Configuración de instalador inválida en {path}:\n{e}") from e


def _fetch(url: str, dest: Path, config: InstallerConfig, report: InstallReport, dry_run: bool) -> None:
    step = f"Descargar {url} → {dest}"
    if dest.exists():
        report.skipped.append(step)
        return
    report.performed.append(step)
    if dry_run:
        return
    download_file(url, dest, timeout=config.timeout)
    dest.chmod(0o644)
    chown(dest, config.user, config.group)


def install_instance(
    config: InstallerConfig,
    console: Optional[Console] = None,
    dry_run: bool = False
) -> InstallReport:
    """
    Aprovisiona una instancia

    Args:
        config: Configuración del instalador
        console: Console de Rich para salida
        dry_run: Si True, solo reporta los pasos

    Returns:
        InstallReport con los pasos realizados y omitidos
    """
    report = InstallReport()
    home = config.instance_home
    jar = home / config.jar_name

    step = f"Crear directorio {home}"
    if home.is_dir():
        report.skipped.append(step)
    else:
        report.performed.append(step)
        if not dry_run:
            ensure_directory(home, mode=0o750)
            chown(home, config.user, config.group)

    _fetch(config.jar_url, jar, config, report, dry_run)

    # No desempaquetar si ya existe crx-quickstart
    step = f"Desempaquetar {jar.name}"
    if (home / QUICKSTART_DIR).exists():
        report.skipped.append(step)
    else:
        report.performed.append(step)
        if not dry_run:
            ok, _, stderr = run_command(
                [config.java, "-jar", jar.name, "-unpack"],
                cwd=home,
                user=config.user,
                group=config.group,
            )
            if not ok:
                raise InstallError(f"Error al desempaquetar {jar}: {stderr.strip()}")

    _fetch(config.license_url, home / LICENSE_FILE, config, report, dry_run)

    if console:
        for s in report.performed:
            console.print(f"[green]✔ {escape(s)}[/green]" if not dry_run else f"[yellow]🔍 {escape(s)}[/yellow]")
        for s in report.skipped:
            console.print(f"[dim]— {escape(s)} (ya presente)[/dim]")
    return report
