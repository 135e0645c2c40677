# === NAVMAP v1 ===
# {
#   "module": "CrptKit.DocumentSubmit.cli",
#   "purpose": "Typer CLI for encoding and submitting introduce-goods documents.",
#   "sections": [
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"},
#     {"id": "submit", "name": "submit", "anchor": "function-submit", "kind": "function"},
#     {"id": "encode", "name": "encode", "anchor": "function-encode", "kind": "function"},
#     {"id": "show-settings", "name": "show_settings", "anchor": "function-show-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Typer CLI for encoding and submitting introduce-goods documents.

Typical flow:

    crpt-submit encode document.json > product_document.txt
    # sign product_document.txt with an external CAdES tool -> signature.b64
    crpt-submit submit document.json --signature-file signature.b64 --pg milk

Connection and quota settings come from ``CRPT_*`` environment variables (see
``crpt-submit settings``); the bearer token from ``--token`` or ``CRPT_TOKEN``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from CrptKit.DocumentSubmit import __version__
from CrptKit.DocumentSubmit.api import CrptApi
from CrptKit.DocumentSubmit.documents import IntroduceGoodsDocument
from CrptKit.DocumentSubmit.encoding import JsonDocumentEncoder
from CrptKit.DocumentSubmit.errors import AdmissionCancelled, DocumentSubmitError
from CrptKit.DocumentSubmit.logging_utils import setup_logging
from CrptKit.DocumentSubmit.settings import SubmitSettings, get_settings

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130

app = typer.Typer(
    name="crpt-submit",
    help="Submit introduce-goods documents to the product-marking registry",
    no_args_is_help=True,
)

_console = Console()
_err_console = Console(stderr=True)


def _load_document(path: Path) -> IntroduceGoodsDocument:
    try:
        return IntroduceGoodsDocument.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        _err_console.print(f"[red]Cannot load document {path}: {escape(str(exc))}[/red]")
        raise typer.Exit(EXIT_USAGE) from exc


def _build_api(settings: SubmitSettings) -> CrptApi:
    return CrptApi.from_settings(settings)


def _version_callback(value: bool) -> None:
    if value:
        _console.print(f"crpt-submit {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbosity: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Registry client CLI.  Global options go before the subcommand."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        _err_console.print(f"[red]Invalid CRPT_* settings: {escape(str(exc))}[/red]")
        raise typer.Exit(EXIT_USAGE) from exc
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity == 1:
        level = "INFO"
    else:
        level = settings.log_level.value
    setup_logging(level=level, log_dir=settings.log_dir)


@app.command()
def submit(
    document_path: Path = typer.Argument(..., help="JSON file with the source document"),
    product_group: str = typer.Option(..., "--pg", help="Product group (pg query parameter)"),
    token: str = typer.Option(..., "--token", envvar="CRPT_TOKEN", help="Bearer token"),
    signature: Optional[str] = typer.Option(None, "--signature", help="Base64 detached signature"),
    signature_file: Optional[Path] = typer.Option(
        None, "--signature-file", help="File holding the Base64 detached signature"
    ),
) -> None:
    """Create an introduce-goods document and print the registry response."""
    if (signature is None) == (signature_file is None):
        _err_console.print("[red]Pass exactly one of --signature or --signature-file[/red]")
        raise typer.Exit(EXIT_USAGE)
    if signature_file is not None:
        try:
            signature = signature_file.read_text(encoding="utf-8").strip()
        except OSError as exc:
            message = escape(str(exc))
            _err_console.print(f"[red]Cannot read signature file {signature_file}: {message}[/red]")
            raise typer.Exit(EXIT_USAGE) from exc

    document = _load_document(document_path)

    try:
        with _build_api(get_settings()) as api:
            outcome = api.submit(token, product_group, document, signature)
    except AdmissionCancelled as exc:
        _err_console.print(f"[yellow]Cancelled: {escape(str(exc))}[/yellow]")
        raise typer.Exit(EXIT_CANCELLED) from exc
    except KeyboardInterrupt:
        _err_console.print("[yellow]Interrupted while waiting for the rate limit[/yellow]")
        raise typer.Exit(EXIT_CANCELLED)
    except DocumentSubmitError as exc:
        _err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(EXIT_USAGE) from exc

    if outcome.ok:
        typer.echo(outcome.payload)
        return

    status = f" (HTTP {outcome.status_code})" if outcome.status_code is not None else ""
    message = escape(outcome.message or "")
    _err_console.print(f"[red]Submission failed{status}:[/red] {message}", highlight=False)
    raise typer.Exit(EXIT_FAILURE)


@app.command()
def encode(
    document_path: Path = typer.Argument(..., help="JSON file with the source document"),
) -> None:
    """Print the Base64 product_document text that must be signed."""
    document = _load_document(document_path)
    encoder = JsonDocumentEncoder()
    try:
        text = encoder.to_base64(encoder.encode(document))
    except DocumentSubmitError as exc:
        _err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(EXIT_FAILURE) from exc
    typer.echo(text)


@app.command("settings")
def show_settings() -> None:
    """Show effective settings (token masked) as JSON."""
    typer.echo(json.dumps(get_settings().masked_dump(), indent=2, sort_keys=True))


if __name__ == "__main__":  # pragma: no cover
    app()
