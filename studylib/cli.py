"""[Layer: Presentation] Typer CLI Commands."""

import logging
from contextlib import contextmanager
from importlib.metadata import PackageNotFoundError, version as get_package_version
from pathlib import Path
from typing import Iterator, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from studylib.config import get_settings
from studylib.core.describe import describe_item, item_details, item_icon
from studylib.core.library import Library
from studylib.core.sample_data import seed_sample_data
from studylib.core.tagging import parse_user_tags, unresolved_tag_numbers
from studylib.database.storage import LibraryStorage
from studylib.errors import StorageError
from studylib.models import (
    DEFAULT_CATEGORY_COLOR,
    Category,
    ItemType,
    LibraryItem,
    MediaLink,
    MediaType,
    Note,
    PdfDocument,
    SearchCriteria,
    TextSnippet,
)

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

# Listings show this many leading characters of each id
_SHORT_ID = 8


def _get_version() -> str:
    """Get version from package metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("study-library")
    except PackageNotFoundError:
        return "0.0.0-dev"


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"study-library {_get_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="studylib",
    help="Personal study library: notes, PDFs, media links and text snippets.",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Manage a personal library of study material."""


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    """Report storage failures as one line and exit non-zero."""
    try:
        yield
    except (StorageError, OSError) as e:
        logger.error("%s failed: %s", action, e)
        _fail(f"{action} failed: {e}")


def _open_library() -> Library:
    settings = get_settings()
    storage = LibraryStorage(
        settings.data_dir,
        items_file=settings.items_file,
        categories_file=settings.categories_file,
    )
    with _storage_errors("Loading library"):
        return Library(storage, search_workers=settings.search_workers)


def _find_item(library: Library, item_id: str) -> LibraryItem:
    """Resolve a full id or an unambiguous id prefix."""
    item = library.get_item(item_id)
    if item is not None:
        return item
    matches = [i for i in library.get_all_items() if i.id and i.id.startswith(item_id)]
    if not matches:
        _fail(f"No item with id '{item_id}'")
    if len(matches) > 1:
        _fail(f"Ambiguous id prefix '{item_id}' ({len(matches)} items)")
    return matches[0]


def _find_category(library: Library, name_or_id: str) -> Optional[Category]:
    return library.get_category(name_or_id) or library.get_category_by_name(name_or_id)


def _resolve_category(library: Library, name: Optional[str]) -> Optional[Category]:
    if not name:
        return None
    category = _find_category(library, name)
    if category is None:
        _fail(f"Unknown category '{name}'. Create it with 'studylib category-add'.")
    return category


def _add(library: Library, item: LibraryItem, tags: Optional[str]) -> None:
    if tags:
        for tag in parse_user_tags(tags):
            item.add_tag(tag)
    with _storage_errors("Saving item"):
        library.add_item(item)
    typer.echo(f"Added {item.item_type.display_name}: {item} ({item.id})")


def _print_items(items: list[LibraryItem], empty_message: str) -> None:
    if not items:
        typer.echo(empty_message)
        return
    table = Table(show_lines=False)
    table.add_column("ID", no_wrap=True)
    table.add_column("")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Tags")
    table.add_column("Details")
    for item in items:
        table.add_row(
            (item.id or "")[:_SHORT_ID],
            item_icon(item),
            escape(str(item)),
            escape(str(item.category)) if item.category is not None else "",
            escape(", ".join(sorted(item.tags))),
            escape(describe_item(item)),
        )
    console.print(table)
    typer.echo(f"{len(items)} item(s)")


# ---- Adding items ----

_DESCRIPTION_OPT = typer.Option(None, "--description", "-d", help="Short description")
_CATEGORY_OPT = typer.Option(None, "--category", "-c", help="Category name or id")
_TAGS_OPT = typer.Option(None, "--tags", "-t", help="Comma-separated tags")


@app.command("add-note")
def add_note(
    title: str = typer.Argument(..., help="Note title"),
    content: str = typer.Option("", "--content", help="Note body"),
    markdown: bool = typer.Option(False, "--markdown", "-m", help="Body is markdown"),
    description: Optional[str] = _DESCRIPTION_OPT,
    category: Optional[str] = _CATEGORY_OPT,
    tags: Optional[str] = _TAGS_OPT,
) -> None:
    """Add a note."""
    library = _open_library()
    item = Note(
        title=title,
        description=description,
        category=_resolve_category(library, category),
        content=content,
        is_markdown=markdown,
    )
    _add(library, item, tags)


@app.command("add-pdf")
def add_pdf(
    path: Path = typer.Argument(..., help="Path to the PDF file"),
    title: Optional[str] = typer.Option(None, "--title", help="Defaults to the file name"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    pages: int = typer.Option(0, "--pages", min=0, help="Page count"),
    description: Optional[str] = _DESCRIPTION_OPT,
    category: Optional[str] = _CATEGORY_OPT,
    tags: Optional[str] = _TAGS_OPT,
) -> None:
    """Add a reference to a PDF document."""
    library = _open_library()
    file_size = 0
    try:
        if path.is_file():
            file_size = path.stat().st_size
    except OSError as e:
        logger.debug("Could not stat %s: %s", path, e)
    item = PdfDocument(
        title=title or path.stem,
        description=description,
        category=_resolve_category(library, category),
        file_path=str(path),
        file_size=file_size,
        page_count=pages,
        author=author,
    )
    _add(library, item, tags)


@app.command("add-media")
def add_media(
    title: str = typer.Argument(..., help="Media title"),
    url: str = typer.Argument(..., help="Link to the media"),
    media_type: MediaType = typer.Option(
        MediaType.VIDEO, "--type", case_sensitive=False, help="Kind of media"
    ),
    duration: int = typer.Option(0, "--duration", min=0, help="Duration in minutes"),
    source: Optional[str] = typer.Option(None, "--source", "-s", help="e.g. YouTube"),
    description: Optional[str] = _DESCRIPTION_OPT,
    category: Optional[str] = _CATEGORY_OPT,
    tags: Optional[str] = _TAGS_OPT,
) -> None:
    """Add a link to a video, podcast, lecture or other media."""
    library = _open_library()
    item = MediaLink(
        title=title,
        description=description,
        category=_resolve_category(library, category),
        url=url,
        media_type=media_type,
        duration_minutes=duration,
        source=source,
    )
    if not item.is_valid_url():
        typer.echo("Warning: URL does not start with http:// or https://")
    _add(library, item, tags)


@app.command("add-snippet")
def add_snippet(
    title: str = typer.Argument(..., help="Snippet title"),
    content: str = typer.Argument(..., help="Snippet text"),
    language: str = typer.Option("text", "--language", "-l", help="e.g. python, sql"),
    source_url: Optional[str] = typer.Option(None, "--source-url"),
    description: Optional[str] = _DESCRIPTION_OPT,
    category: Optional[str] = _CATEGORY_OPT,
    tags: Optional[str] = _TAGS_OPT,
) -> None:
    """Add a text or code snippet."""
    library = _open_library()
    item = TextSnippet(
        title=title,
        description=description,
        category=_resolve_category(library, category),
        content=content,
        language=language,
        source_url=source_url,
    )
    _add(library, item, tags)


# ---- Browsing ----

_TYPE_OPT = typer.Option(None, "--type", case_sensitive=False, help="Only this item type")
_TAG_FILTER_OPT = typer.Option(
    None, "--tag", "-t", help="Only items with any of these comma-separated tags"
)


def _criteria(
    library: Library,
    query: str,
    item_type: Optional[ItemType],
    category: Optional[str],
    tags: Optional[str],
) -> SearchCriteria:
    return SearchCriteria(
        query=query,
        category=_resolve_category(library, category),
        item_type=item_type,
        tags=parse_user_tags(tags or ""),
    )


@app.command(name="list")
def list_items(
    item_type: Optional[ItemType] = _TYPE_OPT,
    category: Optional[str] = _CATEGORY_OPT,
    tags: Optional[str] = _TAG_FILTER_OPT,
) -> None:
    """List items, optionally filtered by type, category or tags."""
    library = _open_library()
    criteria = _criteria(library, "", item_type, category, tags)
    _print_items(
        library.find_items(criteria),
        "No items yet. Use 'studylib add-note' or 'studylib seed' to add some.",
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to look for (case-insensitive)"),
    item_type: Optional[ItemType] = _TYPE_OPT,
    category: Optional[str] = _CATEGORY_OPT,
    tags: Optional[str] = _TAG_FILTER_OPT,
) -> None:
    """Search titles, descriptions, tags, categories and content."""
    library = _open_library()
    criteria = _criteria(library, query, item_type, category, tags)
    _print_items(library.find_items(criteria), f"No items match '{query}'.")


@app.command()
def show(item_id: str = typer.Argument(..., help="Item id or id prefix")) -> None:
    """Show every field of one item."""
    library = _open_library()
    item = _find_item(library, item_id)
    table = Table(show_header=False, title=f"{item_icon(item)} {escape(str(item))}")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for label, value in item_details(item):
        table.add_row(label, escape(value))
    console.print(table)


@app.command()
def delete(item_id: str = typer.Argument(..., help="Item id or id prefix")) -> None:
    """Delete an item."""
    library = _open_library()
    item = _find_item(library, item_id)
    with _storage_errors("Deleting item"):
        library.delete_item(item.id)
    typer.echo(f"Deleted: {item}")


@app.command()
def tag(
    item_id: str = typer.Argument(..., help="Item id or id prefix"),
    tags: str = typer.Argument(..., help="Comma-separated tags (numbers pick from 'studylib tags')"),
) -> None:
    """Add tags to an item."""
    library = _open_library()
    item = _find_item(library, item_id)
    vocabulary = library.get_all_tags()
    for number in unresolved_tag_numbers(tags, vocabulary):
        err_console.print(
            f"[yellow]Ignored tag number {number}: 'studylib tags' lists {len(vocabulary)}[/yellow]"
        )
    new_tags = parse_user_tags(tags, vocabulary)
    if not new_tags:
        _fail("No tags given.")
    for name in new_tags:
        item.add_tag(name)
    with _storage_errors("Saving item"):
        library.update_item(item)
    typer.echo(f"Tags: {', '.join(sorted(item.tags))}")


@app.command()
def untag(
    item_id: str = typer.Argument(..., help="Item id or id prefix"),
    tag_name: str = typer.Argument(..., help="Tag to remove"),
) -> None:
    """Remove a tag from an item."""
    library = _open_library()
    item = _find_item(library, item_id)
    if not item.has_tag(tag_name):
        typer.echo(f"'{item}' has no tag '{tag_name}'.")
        return
    item.remove_tag(tag_name)
    with _storage_errors("Saving item"):
        library.update_item(item)
    typer.echo(f"Tags: {', '.join(sorted(item.tags)) or '(none)'}")


@app.command(name="tags")
def list_tags() -> None:
    """List all tags with usage counts."""
    library = _open_library()
    all_tags = library.get_all_tags()
    if not all_tags:
        typer.echo("No tags yet. Use 'studylib tag <id> <tags>' to add some.")
        return
    typer.echo(f"\nTags ({len(all_tags)}):\n")
    for i, name in enumerate(all_tags, 1):
        typer.echo(f"  {i}. {name} ({len(library.get_items_by_tag(name))} items)")


# ---- Categories ----


@app.command()
def categories() -> None:
    """List categories with item counts."""
    library = _open_library()
    all_categories = library.get_all_categories()
    if not all_categories:
        typer.echo("No categories yet. Use 'studylib category-add <name>' to add one.")
        return
    table = Table()
    table.add_column("Name")
    table.add_column("Color")
    table.add_column("Items", justify="right")
    table.add_column("Description")
    for category in all_categories:
        table.add_row(
            escape(str(category)),
            escape(category.color),
            str(len(library.get_items_by_category(category))),
            escape(category.description or ""),
        )
    console.print(table)


@app.command("category-add")
def category_add(
    name: str = typer.Argument(..., help="Category name"),
    color: str = typer.Option(DEFAULT_CATEGORY_COLOR, "--color", help="Hex color"),
    description: Optional[str] = _DESCRIPTION_OPT,
) -> None:
    """Create a category."""
    library = _open_library()
    if library.get_category_by_name(name) is not None:
        _fail(f"Category '{name}' already exists.")
    category = Category(name=name.strip(), color=color, description=description)
    with _storage_errors("Saving category"):
        library.add_category(category)
    typer.echo(f"Added category: {category}")


@app.command("category-delete")
def category_delete(
    name_or_id: str = typer.Argument(..., help="Category name or id"),
) -> None:
    """Delete a category; its items become uncategorized."""
    library = _open_library()
    category = _find_category(library, name_or_id)
    if category is None:
        _fail(f"Unknown category '{name_or_id}'.")
    affected = len(library.get_items_by_category(category))
    with _storage_errors("Deleting category"):
        library.delete_category(category.id)
    typer.echo(f"Deleted category: {category} ({affected} items uncategorized)")


# ---- Maintenance ----


@app.command()
def stats() -> None:
    """Show item counts by type."""
    library = _open_library()
    typer.echo(f"Items: {library.get_item_count()}")
    for item_type in ItemType:
        typer.echo(f"  {item_type.display_name}: {library.get_item_count_by_type(item_type)}")
    typer.echo(f"Categories: {len(library.get_all_categories())}")
    typer.echo(f"Tags: {len(library.get_all_tags())}")


@app.command()
def seed() -> None:
    """Fill an empty library with sample content."""
    library = _open_library()
    with _storage_errors("Seeding library"):
        added = seed_sample_data(library)
    if added:
        typer.echo(f"Added {added} sample items.")
    else:
        typer.echo("Library already contains data; nothing added.")


@app.command()
def version() -> None:
    """Show version."""
    typer.echo(f"study-library {_get_version()}")
