"""
Módulo JCR - cqtool
Declaración y reconciliación de nodos JCR vía Sling
"""

from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cqtool.core.errors import CqError, ValidationError
from cqtool.core.state import DesiredState, Policy, PropertySet
from cqtool.jcr.http import SlingClient
from cqtool.jcr.loader import load_nodes_file, resolve_instance
from cqtool.jcr.models import InstanceConfig
from cqtool.jcr.reconciler import Reconciler, ReconcileResult, display_results

app = typer.Typer(
    name="jcr",
    help="Reconciliación de nodos JCR (create, modify, delete)",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

InstanceOpt = typer.Option(None, "--instance", "-i", help="URL de la instancia (ej: http://localhost:4502)")
UsernameOpt = typer.Option(None, "--username", "-u", help="Usuario")
PasswordOpt = typer.Option(None, "--password", help="Contraseña")
DryRunOpt = typer.Option(False, "--dry-run", help="Modo simulación, no escribe en la instancia")


def parse_properties(items: List[str]) -> PropertySet:
    """
    Convierte ``clave=valor`` en un PropertySet. Una clave repetida se vuelve
    propiedad multivaluada.
    """
    props: Dict[str, object] = {}
    for item in items:
        if "=" not in item:
            raise ValidationError(f"Propiedad inválida (se espera clave=valor): {item}")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ValidationError(f"Propiedad sin nombre: {item}")
        if key in props:
            prev = props[key]
            props[key] = (prev if isinstance(prev, list) else [prev]) + [value]
        else:
            props[key] = value
    return props  # type: ignore[return-value]


def build_reconciler(config: InstanceConfig, dry_run: bool) -> Reconciler:
    return Reconciler(
        SlingClient(config.instance),
        config.credentials(),
        console=console,
        dry_run=dry_run,
        timeout=config.timeout,
    )


def _fail(error: CqError) -> None:
    console.print(f"[red]✘ {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


def _header(title: str, config: InstanceConfig, dry_run: bool) -> None:
    console.print(Panel.fit(f"[bold cyan]{title}[/bold cyan]\n[dim]{config.instance}[/dim]", border_style="cyan"))
    if dry_run:
        console.print("[yellow]🔍 Modo DRY-RUN: Solo simulación, no se ejecutarán cambios[/yellow]")


def _single(result: ReconcileResult) -> None:
    display_results([result], console)


@app.command()
def apply(
    file: Path = typer.Argument(..., help="Archivo YAML con la declaración de nodos"),
    instance: Optional[str] = InstanceOpt,
    username: Optional[str] = UsernameOpt,
    password: Optional[str] = PasswordOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Reconcilia todos los nodos declarados en un archivo

    Ejemplo: cqtool jcr apply nodes.yaml --dry-run
    """
    try:
        nodes_file = load_nodes_file(file)
        config = resolve_instance(nodes_file.instance, instance=instance, username=username, password=password)
        _header(f"Apply - {file.name}", config, dry_run)
        results = build_reconciler(config, dry_run).apply_all(nodes_file.nodes)
    except CqError as e:
        _fail(e)
    display_results(results, console)


@app.command()
def create(
    path: str = typer.Argument(..., help="Path del nodo"),
    prop: List[str] = typer.Option([], "--property", "-p", help="Propiedad clave=valor (repetible)"),
    policy: Policy = typer.Option(..., "--policy", help="merge | replace (si el nodo ya existe)"),
    instance: Optional[str] = InstanceOpt,
    username: Optional[str] = UsernameOpt,
    password: Optional[str] = PasswordOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Crea un nodo (o lo converge si ya existe)

    Ejemplo: cqtool jcr create /content/site -p jcr:primaryType=nt:unstructured --policy merge
    """
    try:
        config = resolve_instance(instance=instance, username=username, password=password)
        _header(f"Create - {path}", config, dry_run)
        desired = DesiredState(path=path, properties=parse_properties(prop), policy=policy)
        result = build_reconciler(config, dry_run).create(desired)
    except CqError as e:
        _fail(e)
    _single(result)


@app.command()
def modify(
    path: str = typer.Argument(..., help="Path del nodo"),
    prop: List[str] = typer.Option([], "--property", "-p", help="Propiedad clave=valor (repetible)"),
    policy: Policy = typer.Option(..., "--policy", help="merge | replace"),
    instance: Optional[str] = InstanceOpt,
    username: Optional[str] = UsernameOpt,
    password: Optional[str] = PasswordOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Modifica un nodo existente

    Ejemplo: cqtool jcr modify /content/site -p title=Hola --policy replace
    """
    try:
        config = resolve_instance(instance=instance, username=username, password=password)
        _header(f"Modify - {path}", config, dry_run)
        desired = DesiredState(path=path, properties=parse_properties(prop), policy=policy)
        result = build_reconciler(config, dry_run).modify(desired)
    except CqError as e:
        _fail(e)
    _single(result)


@app.command()
def delete(
    path: str = typer.Argument(..., help="Path del nodo"),
    instance: Optional[str] = InstanceOpt,
    username: Optional[str] = UsernameOpt,
    password: Optional[str] = PasswordOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Elimina un nodo (sin error si no existe)

    Ejemplo: cqtool jcr delete /content/site/old
    """
    try:
        config = resolve_instance(instance=instance, username=username, password=password)
        _header(f"Delete - {path}", config, dry_run)
        result = build_reconciler(config, dry_run).delete(path)
    except CqError as e:
        _fail(e)
    _single(result)


@app.command()
def show(
    path: str = typer.Argument(..., help="Path del nodo"),
    instance: Optional[str] = InstanceOpt,
    username: Optional[str] = UsernameOpt,
    password: Optional[str] = PasswordOpt,
):
    """Muestra las propiedades actuales de un nodo"""
    try:
        config = resolve_instance(instance=instance, username=username, password=password)
        actual = build_reconciler(config, dry_run=True).read(path)
    except CqError as e:
        _fail(e)

    if not actual.exists:
        console.print(f"[yellow]⚠️ El nodo {path} no existe[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=path, show_header=True, header_style="bold cyan")
    table.add_column("Propiedad", style="cyan")
    table.add_column("Valor", style="green")
    for name in sorted(actual.properties):
        value = actual.properties[name]
        table.add_row(escape(name), escape(", ".join(value) if isinstance(value, list) else value))
    console.print(table)
