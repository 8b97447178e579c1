from __future__ import annotations

import asyncio
from pathlib import Path

import questionary
from rich.console import Console
from rich.table import Table

from filefield.errors import FileFieldError
from filefield.fields.types import FileFieldInput
from filefield.models.upload import PendingUpload
from filefield.services.document_service import DocumentService
from filefield.storage.base import FileStorage

console = Console()


def _format_size(filesize: int) -> str:
    if filesize < 1024:
        return f"{filesize} B"
    size = filesize / 1024
    for unit in ("KB", "MB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def list_documents_menu(service: DocumentService, storage: FileStorage) -> None:
    documents = service.list_documents()
    if not documents:
        console.print("[yellow]No documents yet.[/yellow]")
        return

    table = Table(title="Documents")
    table.add_column("Title", style="bold")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Ref", style="dim")
    table.add_column("Src")

    for document in documents:
        attachment = service.get_attachment(document)
        if attachment is None:
            table.add_row(document.title, "-", "-", "-", "-")
            continue
        try:
            src = attachment.src(storage)
        except FileFieldError as exc:
            src = f"[red]{exc.message}[/red]"
        table.add_row(document.title, attachment.filename, _format_size(attachment.filesize), attachment.ref, src)

    console.print(table)


def upload_document_menu(service: DocumentService, storage: FileStorage) -> None:
    console.print()
    console.print("[bold]New document[/bold]", style="cyan")

    title = questionary.text("Title:").ask()
    if not title:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    path_str = questionary.path("File to upload:").ask()
    if not path_str:
        console.print("[yellow]Cancelled.[/yellow]")
        return
    path = Path(path_str).expanduser()
    if not path.is_file():
        console.print(f"[red]Not a file: {path}[/red]")
        return

    attachment = FileFieldInput(upload=PendingUpload.from_path(path))
    try:
        document = asyncio.run(service.create_document(title, attachment, storage))
    except FileFieldError as exc:
        console.print(f"[red]{exc.message}[/red]")
        return

    console.print(f"[green bold]Document '{document.title}' created ({document.attachment_filename}).[/green bold]")


def attach_by_ref_menu(service: DocumentService, storage: FileStorage) -> None:
    console.print()
    console.print("[bold]Attach existing file[/bold]", style="cyan")

    title = questionary.text("Title:").ask()
    if not title:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    ref = questionary.text("File ref (e.g. local:file:report-01J....pdf):").ask()
    if not ref:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    try:
        document = asyncio.run(service.create_document(title, FileFieldInput(ref=ref), storage))
    except FileFieldError as exc:
        console.print(f"[red]{exc.message}[/red]")
        return

    console.print(f"[green bold]Document '{document.title}' attached to {ref}.[/green bold]")
