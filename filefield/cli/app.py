import questionary
from rich.console import Console

from filefield.cli.document_menu import attach_by_ref_menu, list_documents_menu, upload_document_menu
from filefield.repositories.factory import get_document_repository
from filefield.services.document_service import DocumentService
from filefield.storage.base import FileStorage
from filefield.storage.factory import get_storage

console = Console()


def _build_services() -> tuple[DocumentService, FileStorage]:
    return DocumentService(get_document_repository()), get_storage()


def main_menu() -> None:
    service, storage = _build_services()

    console.print()
    console.print("[bold]File fields[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Main menu",
            choices=[
                "List documents",
                "Upload document",
                "Attach file by ref",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Bye![/bold]")
            break
        elif choice == "List documents":
            list_documents_menu(service, storage)
        elif choice == "Upload document":
            upload_document_menu(service, storage)
        elif choice == "Attach file by ref":
            attach_by_ref_menu(service, storage)
