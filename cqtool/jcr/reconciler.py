"""
Reconciliador: compara estado deseado vs real de un nodo JCR y aplica el delta.

Cada pasada es síncrona y secuencial: leer estado real → (consultar tipo) →
calcular delta → (escribir) → validar respuesta. Las pasadas no comparten
estado mutable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cqtool.core.diff import Delta, best_primary_type, filter_delta, raw_diff
from cqtool.core.errors import HttpResponseError, NodeNotFoundError
from cqtool.core.planner import plan_from_delta
from cqtool.core.state import ActualState, Credentials, DesiredState, NodeClient, validate_node_path
from cqtool.jcr.http import HttpResponse
from cqtool.jcr.models import NodeAction, NodeResource
from cqtool.jcr.reader import fetch_node
from cqtool.jcr.schema import fetch_protected_properties


DELETE_OPERATION = {":operation": "delete"}


class ResultStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    NOOP = "noop"
    PLANNED = "planned"


@dataclass(frozen=True)
class ReconcilePass:
    """Contexto de una pasada: estados leídos y delta ya filtrado."""
    desired: DesiredState
    actual: ActualState
    protected: FrozenSet[str] = frozenset()
    delta: Delta = field(default_factory=dict)


@dataclass(frozen=True)
class ReconcileResult:
    """Resultado de una acción sobre un nodo"""
    path: str
    action: NodeAction
    status: ResultStatus
    delta: Delta = field(default_factory=dict)
    message: str = ""

    @property
    def changed(self) -> bool:
        return self.status in (ResultStatus.CREATED, ResultStatus.UPDATED, ResultStatus.DELETED)


def validate_response(path: str, resp: HttpResponse) -> HttpResponse:
    """Cualquier código que no empiece por "20" es fatal."""
    if not resp.code.startswith("20"):
        raise HttpResponseError(path, resp.status_code, resp.body)
    return resp


class Reconciler:
    """Despachador de acciones create/modify/delete sobre nodos JCR"""

    def __init__(
        self,
        client: NodeClient,
        credentials: Credentials,
        console: Optional[Console] = None,
        dry_run: bool = False,
        timeout: Optional[float] = None
    ):
        self.client = client
        self.credentials = credentials
        self.console = console
        self.dry_run = dry_run
        self.timeout = timeout

    def _notice(self, message: str, style: str = "dim") -> None:
        if self.console:
            self.console.print(f"[{style}]{escape(message)}[/{style}]")

    def _write(self, path: str, payload: Delta) -> HttpResponse:
        resp = self.client.multipart_post(path, self.credentials, payload, timeout=self.timeout)
        return validate_response(path, resp)

    def read(self, path: str) -> ActualState:
        return fetch_node(self.client, validate_node_path(path), self.credentials, timeout=self.timeout)

    def plan(self, desired: DesiredState, actual: Optional[ActualState] = None) -> ReconcilePass:
        """
        Calcula el delta filtrado para un nodo existente.

        Las propiedades protegidas se consultan una sola vez y solo si el diff
        sin filtrar no está vacío.
        """
        if actual is None:
            actual = self.read(desired.path)

        delta = raw_diff(desired, actual)
        if not delta:
            return ReconcilePass(desired=desired, actual=actual)

        primary_type = best_primary_type(desired.properties, actual.properties)
        protected = fetch_protected_properties(self.client, primary_type, self.credentials, timeout=self.timeout)
        return ReconcilePass(
            desired=desired,
            actual=actual,
            protected=protected,
            delta=filter_delta(delta, protected),
        )

    def _apply_update(self, ctx: ReconcilePass, action: NodeAction) -> ReconcileResult:
        path = ctx.desired.path
        if not ctx.delta:
            message = f"{path} ya está configurado según lo definido"
            self._notice(message)
            return ReconcileResult(path, action, ResultStatus.NOOP, message=message)

        for line in plan_from_delta(path, ctx.delta, ctx.actual.properties):
            self._notice(f"  {line}", "cyan")

        if self.dry_run:
            return ReconcileResult(path, action, ResultStatus.PLANNED, ctx.delta, f"Actualizar {path}")

        self._write(path, ctx.delta)
        self._notice(f"✔ Nodo actualizado: {path}", "green")
        return ReconcileResult(path, action, ResultStatus.UPDATED, ctx.delta, f"Actualizado {path}")

    def create(self, desired: DesiredState) -> ReconcileResult:
        """Crea el nodo con todas las propiedades deseadas; si ya existe, lo modifica."""
        actual = self.read(desired.path)
        if actual.exists:
            return self._apply_update(self.plan(desired, actual), NodeAction.CREATE)

        payload = dict(desired.properties)
        for line in plan_from_delta(desired.path, payload, {}):
            self._notice(f"  {line}", "cyan")

        if self.dry_run:
            return ReconcileResult(desired.path, NodeAction.CREATE, ResultStatus.PLANNED, payload, f"Crear {desired.path}")

        self._write(desired.path, payload)
        self._notice(f"✔ Nodo creado: {desired.path}", "green")
        return ReconcileResult(desired.path, NodeAction.CREATE, ResultStatus.CREATED, payload, f"Creado {desired.path}")

    def modify(self, desired: DesiredState) -> ReconcileResult:
        """Actualiza un nodo existente; modificar un nodo inexistente es un error."""
        actual = self.read(desired.path)
        if not actual.exists:
            raise NodeNotFoundError(desired.path)
        return self._apply_update(self.plan(desired, actual), NodeAction.MODIFY)

    def delete(self, path: str) -> ReconcileResult:
        """Elimina el nodo; si no existe no hay nada que hacer."""
        actual = self.read(path)
        if not actual.exists:
            message = f"El nodo {path} no existe; nada que eliminar"
            self._notice(message, "yellow")
            return ReconcileResult(path, NodeAction.DELETE, ResultStatus.NOOP, message=message)

        if self.dry_run:
            return ReconcileResult(path, NodeAction.DELETE, ResultStatus.PLANNED, dict(DELETE_OPERATION), f"Eliminar {path}")

        self._write(path, dict(DELETE_OPERATION))
        self._notice(f"✔ Nodo eliminado: {path}", "green")
        return ReconcileResult(path, NodeAction.DELETE, ResultStatus.DELETED, dict(DELETE_OPERATION), f"Eliminado {path}")

    def apply(self, resource: NodeResource) -> ReconcileResult:
        """Aplica la acción declarada en un recurso"""
        if resource.action == NodeAction.DELETE:
            return self.delete(resource.path)
        if resource.action == NodeAction.MODIFY:
            return self.modify(resource.desired_state())
        return self.create(resource.desired_state())

    def apply_all(self, resources: List[NodeResource]) -> List[ReconcileResult]:
        """Aplica recursos en orden; el primer error fatal aborta el resto."""
        return [self.apply(r) for r in resources]


def display_results(results: List[ReconcileResult], console: Console) -> None:
    """Muestra resultados en formato legible"""
    if not results:
        console.print("[yellow]⚠️ No hay nodos declarados[/yellow]")
        return

    table = Table(title="Reconciliación de nodos JCR", show_header=True, header_style="bold cyan")
    table.add_column("Path", style="cyan")
    table.add_column("Acción", style="green")
    table.add_column("Resultado", style="yellow")
    table.add_column("Cambios", justify="right")

    for result in results:
        status_style = {
            ResultStatus.CREATED: "[green]CREADO[/green]",
            ResultStatus.UPDATED: "[green]ACTUALIZADO[/green]",
            ResultStatus.DELETED: "[green]ELIMINADO[/green]",
            ResultStatus.NOOP: "[dim]SIN CAMBIOS[/dim]",
            ResultStatus.PLANNED: "[yellow]PLANIFICADO[/yellow]",
        }.get(result.status, result.status.value)
        table.add_row(result.path, result.action.value, status_style, str(len(result.delta)))

    console.print(table)
