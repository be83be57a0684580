"""Command-line interface for inspecting content structures and smart content queries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ContentKitConfig, ensure_config
from .content.structure import Structure
from .local.repository import LocalContentRepository, TemplateRegistry
from .media.client import MediaApiClient, create_client
from .smart_content.media import MediaDataProvider
from .smart_content.models import DataProviderResult, DatasourceItem

app = typer.Typer(help="Inspect content structures and run smart content queries.")
media_app = typer.Typer(help="Query the media catalogue through the smart content provider.")
app.add_typer(media_app, name="media")
console = Console()

TEMPLATES_DIRECTORY = "templates"


def _build_repository(workspace: Path, templates: Optional[Path]) -> LocalContentRepository:
    workspace = workspace.resolve()
    templates_dir = (templates or workspace / TEMPLATES_DIRECTORY).resolve()
    if not templates_dir.is_dir():
        raise typer.BadParameter(f"Template directory {templates_dir} does not exist")
    return LocalContentRepository(workspace, templates=TemplateRegistry.from_directory(templates_dir))


def _build_client(config: ContentKitConfig) -> MediaApiClient:
    credentials = config.media_api
    return create_client(
        base_url=str(credentials.base_url),
        username=credentials.username,
        api_token=credentials.api_token,
    )


def _format_structure(structure: Structure, *, complete: bool, locale: Optional[str]) -> None:
    table = Table(title=f"{structure.get_title(locale)} ({structure.path})")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in structure.to_dict(complete=complete).items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)
    console.print(f"Resource locator: {structure.get_resource_locator()}")


def _format_result(result: DataProviderResult, datasource: Optional[DatasourceItem]) -> None:
    label = datasource.title if datasource else "no datasource"
    table = Table(title=f"Media in {label}")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Image")
    for item in result.items:
        table.add_row(item.id, item.title, item.image or "")
    console.print(table)
    if result.has_next_page:
        console.print("More results are available on the next page.")


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a configuration TOML file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    ctx.obj = {"config_path": config_path}


@app.command()
def show(
    ctx: typer.Context,
    document: Path = typer.Argument(..., help="Document directory or page.md file, relative to the workspace"),
    workspace: Optional[Path] = typer.Option(
        None,
        "--workspace",
        "-w",
        help="Root directory of the content workspace",
    ),
    templates: Optional[Path] = typer.Option(
        None,
        "--templates",
        "-t",
        help="Directory containing template definitions (defaults to <workspace>/templates)",
    ),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale used for the title"),
    summary: bool = typer.Option(False, "--summary", help="Only show the reduced summary fields"),
    as_json: bool = typer.Option(False, "--json", help="Print the complete snapshot as JSON"),
) -> None:
    """Show the snapshot of a local document."""

    config = ensure_config(locale=locale, workspace=workspace, config_path=ctx.obj.get("config_path"))
    repository = _build_repository(config.defaults.workspace or Path.cwd(), templates)
    structure = repository.load_structure(document)

    if as_json:
        console.print_json(structure.to_json())
        return
    _format_structure(structure, complete=not summary, locale=config.defaults.locale)


@app.command()
def init(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", help="Title of the new document"),
    template: str = typer.Option("default", "--template", help="Template key of the new document"),
    parent: Optional[Path] = typer.Option(
        None,
        "--parent",
        "-p",
        help="Directory of the parent document (defaults to the workspace root)",
    ),
    workspace: Optional[Path] = typer.Option(
        None,
        "--workspace",
        "-w",
        help="Root directory of the content workspace",
    ),
    templates: Optional[Path] = typer.Option(None, "--templates", "-t", help="Template directory"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Language of the document"),
    webspace: Optional[str] = typer.Option(None, "--webspace", help="Webspace of the document"),
) -> None:
    """Create a new document from a template."""

    config = ensure_config(
        locale=locale,
        webspace_key=webspace,
        workspace=workspace,
        config_path=ctx.obj.get("config_path"),
    )
    root = (config.defaults.workspace or Path.cwd()).resolve()
    repository = _build_repository(root, templates)
    parent_directory = (parent or root).resolve()
    if not parent_directory.is_dir():
        raise typer.BadParameter(f"Parent directory {parent_directory} does not exist")

    document = repository.create_document(
        parent_directory,
        title=title,
        template=template,
        language=config.defaults.locale,
        webspace=config.defaults.webspace_key,
    )
    console.print(f"Created document [bold]{document.path}[/bold].")


@media_app.command("list")
def list_media(
    ctx: typer.Context,
    datasource: Optional[str] = typer.Option(None, "--datasource", "-d", help="Collection id or 'root'"),
    include_sub_folders: bool = typer.Option(False, "--include-sub-folders", help="Include nested collections"),
    tags: Optional[list[str]] = typer.Option(None, "--tag", help="Tag filter (repeatable)"),
    tag_operator: str = typer.Option("or", "--tag-operator", help="Combine tags with 'and' or 'or'"),
    categories: Optional[list[str]] = typer.Option(None, "--category", help="Category filter (repeatable)"),
    category_operator: str = typer.Option("or", "--category-operator", help="Combine categories with 'and' or 'or'"),
    target_group: Optional[str] = typer.Option(None, "--target-group", help="Audience target group id"),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="Sort column"),
    sort_method: str = typer.Option("asc", "--sort-method", help="'asc' or 'desc'"),
    mimetype: Optional[str] = typer.Option(None, "--mimetype", help="Only list media of this mime type"),
    media_type: Optional[str] = typer.Option(None, "--type", help="Only list media of this type"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum number of results over all pages"),
    page: int = typer.Option(1, "--page", help="Page to show"),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Results per page"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale of the media metadata"),
    base_url: Optional[str] = typer.Option(None, help="Base URL of the content management instance"),
    username: Optional[str] = typer.Option(None, help="Account used for authentication"),
    api_token: Optional[str] = typer.Option(None, help="API token"),
) -> None:
    """List media of a collection with paging."""

    config = ensure_config(
        base_url=base_url,
        username=username,
        api_token=api_token,
        locale=locale,
        config_path=ctx.obj.get("config_path"),
        require_media_api=True,
    )
    filters = {
        "dataSource": datasource,
        "includeSubFolders": include_sub_folders,
        "tags": tags or [],
        "tagOperator": tag_operator,
        "categories": categories or [],
        "categoryOperator": category_operator,
        "targetGroupId": target_group,
        "sortBy": sort_by,
        "sortMethod": sort_method,
    }
    options = {"locale": config.defaults.locale}
    request = {"mimetype": mimetype, "type": media_type}

    with _build_client(config) as client:
        provider = MediaDataProvider(client, client, request_query=lambda: request)
        parameters = provider.get_default_property_parameter()
        resolved = provider.resolve_datasource(datasource, parameters, options)
        result = provider.resolve_data_items(
            filters,
            parameters,
            options,
            limit=limit,
            page=page,
            page_size=page_size,
        )

    _format_result(result, resolved)


@media_app.command("collections")
def list_collections(
    ctx: typer.Context,
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale of the collection titles"),
    base_url: Optional[str] = typer.Option(None, help="Base URL of the content management instance"),
    username: Optional[str] = typer.Option(None, help="Account used for authentication"),
    api_token: Optional[str] = typer.Option(None, help="API token"),
) -> None:
    """List the collections usable as datasource."""

    config = ensure_config(
        base_url=base_url,
        username=username,
        api_token=api_token,
        locale=locale,
        config_path=ctx.obj.get("config_path"),
        require_media_api=True,
    )
    table = Table(title="Collections")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Parent")
    with _build_client(config) as client:
        for collection in client.iter_collections(locale=config.defaults.locale):
            table.add_row(collection.id, collection.title, collection.parent_id or "")
    console.print(table)


def run() -> None:
    """Entry point for console scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    run()
