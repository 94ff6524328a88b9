from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from apigw_auth.annotator.annotate import annotate_template, plan_annotations
from apigw_auth.annotator.events import iter_endpoints
from apigw_auth.config import get_settings
from apigw_auth.errors import ApiGatewayAuthError
from apigw_auth.naming.logical_ids import method_logical_id, resource_logical_id
from apigw_auth.service.loader import load_service, load_template, write_template


app = typer.Typer(no_args_is_help=True, add_completion=False)

endpoints_app = typer.Typer(no_args_is_help=True)
app.add_typer(endpoints_app, name="endpoints")

console = Console()
logger = logging.getLogger("apigw_auth.cli")


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every planned/skipped event"),
) -> None:
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(exc: ApiGatewayAuthError) -> None:
    logger.error("%s", exc)
    console.print(f"[bold red]error:[/bold red] {exc}")
    raise typer.Exit(code=1)


@app.command()
def annotate(
    service: str = typer.Argument(..., help="Service JSON with a 'functions' mapping"),
    template: str = typer.Argument(..., help="Compiled template JSON with 'Resources'"),
    out: Optional[str] = typer.Option(None, help="Output path (default: overwrite TEMPLATE)"),
    dry_run: bool = typer.Option(False, help="Resolve and print, do not write"),
) -> None:
    try:
        functions = load_service(Path(service))
        doc = load_template(Path(template))
        if dry_run:
            annotations = plan_annotations(functions, doc["Resources"])
        else:
            annotations = annotate_template(functions, doc["Resources"])
    except ApiGatewayAuthError as exc:
        _fail(exc)
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("LOGICAL ID")
    table.add_column("AUTH", no_wrap=True)
    table.add_column("CREDENTIALS", no_wrap=True)
    for a in annotations:
        table.add_row(
            a.endpoint.method.upper(),
            a.endpoint.path,
            a.logical_id,
            a.authorization_type or "-",
            a.credentials or "-",
        )

    console.print(f"[bold]Annotations:[/bold] {len(annotations)}")
    console.print(table)

    if dry_run:
        console.print("Dry run: template not written.")
        return

    out_path = write_template(doc, Path(out) if out else Path(template))
    console.print(f"[bold green]Wrote[/bold green] annotated template to: {out_path}")


@endpoints_app.command("list")
def endpoints_list(
    service: str = typer.Argument(..., help="Service JSON with a 'functions' mapping"),
    flagged_only: bool = typer.Option(False, help="Only endpoints with an auth flag set"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    try:
        endpoints = list(iter_endpoints(load_service(Path(service))))
    except ApiGatewayAuthError as exc:
        _fail(exc)
        return

    if flagged_only:
        endpoints = [e for e in endpoints if e.flagged]

    rows = [
        {
            "function": e.function_name,
            "method": e.method.upper(),
            "path": e.path,
            "logical_id": method_logical_id(e.path, e.method),
            "useIAMAuth": e.use_iam_auth,
            "invokeWithCallerCredentials": e.invoke_with_caller_credentials,
        }
        for e in endpoints
    ]

    if fmt == "json":
        console.print(json.dumps(rows, indent=2), markup=False, emoji=False, highlight=False, soft_wrap=True)
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("FUNCTION")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("LOGICAL ID")
    table.add_column("IAM", no_wrap=True)
    table.add_column("CALLER", no_wrap=True)
    for r in rows:
        table.add_row(
            r["function"],
            r["method"],
            r["path"],
            r["logical_id"],
            "yes" if r["useIAMAuth"] else "",
            "yes" if r["invokeWithCallerCredentials"] else "",
        )

    console.print(f"[bold]Endpoints:[/bold] {len(rows)}")
    console.print(table)


@app.command("logical-id")
def logical_id(
    method: str = typer.Argument(..., help="HTTP method (GET/POST/...)"),
    path: str = typer.Argument(..., help="HTTP path, e.g. /items/{id}"),
) -> None:
    if not method.strip() or not path.strip():
        raise typer.BadParameter("method and path must not be empty")
    console.print(method_logical_id(path, method))
    console.print(resource_logical_id(path))


@app.command()
def ping() -> None:
    console.print("pong")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
