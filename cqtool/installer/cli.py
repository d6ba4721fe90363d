"""
Módulo Install - cqtool
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from cqtool.core.errors import CqError
from cqtool.installer.installer import install_instance, load_installer_config

console = Console()


def install(
    file: Path = typer.Argument(..., help="Archivo YAML del instalador"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Modo simulación, no ejecuta acciones reales"),
):
    """
    Instala una instancia CQ/AEM (JAR desempaquetado + licencia)

    Ejemplo: cqtool install installer.yaml --dry-run
    """
    try:
        config = load_installer_config(file)
        console.print(Panel.fit(
            f"[bold cyan]Install - {config.mode.value}[/bold cyan]\n[dim]{config.instance_home}[/dim]",
            border_style="cyan"
        ))
        if dry_run:
            console.print("[yellow]🔍 Modo DRY-RUN: Solo simulación, no se ejecutarán cambios[/yellow]")
        report = install_instance(config, console, dry_run=dry_run)
    except CqError as e:
        console.print(f"[red]✘ {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    if not report.performed:
        console.print("[green]✅ La instancia ya estaba instalada[/green]")
    elif not dry_run:
        console.print("[bold green]✅ Instalación completada[/bold green]")
