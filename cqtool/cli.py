"""
Aplicación CLI de cqtool.

Solo compone submódulos y comandos; la lógica vive en core, jcr e installer.
"""

from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from cqtool import __version__
from cqtool.installer.cli import install
from cqtool.jcr.cli import app as jcr_app

# .env del directorio de trabajo (CQ_INSTANCE, CQ_USERNAME, CQ_PASSWORD)
_env = Path.cwd() / ".env"
if _env.exists():
    load_dotenv(_env)

app = typer.Typer(
    name="cqtool",
    help="cqtool - Instalación y configuración de contenido CQ/AEM",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

app.add_typer(jcr_app, name="jcr", help="Reconciliación de nodos JCR")
app.command("install")(install)


@app.command()
def version():
    """Muestra la versión de cqtool"""
    console.print(Panel.fit(
        "[bold cyan]cqtool[/bold cyan]\n"
        "[dim]Instalación y configuración de contenido CQ/AEM[/dim]\n\n"
        f"[bold]Versión:[/bold] {__version__}",
        border_style="cyan"
    ))


def main():
    app()
