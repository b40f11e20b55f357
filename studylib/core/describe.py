"""Human-readable summaries of library items for listings and detail views."""

from datetime import datetime
from typing import Optional, assert_never

from studylib.models import AnyItem, MediaLink, Note, PdfDocument, TextSnippet

_DISPLAY_FORMAT = "%b %d, %Y %H:%M"
_SHORT_DATE_FORMAT = "%b %d, %Y"

# Above these sizes an item gets the "long" icon
_LONG_PDF_PAGES = 100
_LONG_MEDIA_MINUTES = 60
_LONG_NOTE_CHARS = 1000


def format_file_size(size: int) -> str:
    """Format a byte count, e.g. 1536 -> '1.50 KB'."""
    if size < 1024:
        return f"{size} B"
    if size < 1024**2:
        return f"{size / 1024:.2f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.2f} MB"
    return f"{size / 1024**3:.2f} GB"


def format_duration(minutes: int) -> str:
    """Format a duration in minutes, e.g. 95 -> '1h 35m'."""
    if minutes <= 0:
        return "Unknown"
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h {minutes % 60}m"


def format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return value.strftime(_DISPLAY_FORMAT)


def relative_time(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Describe how long ago value was ("Just now", "3 hours ago", ...).

    Anything a week or older falls back to the short date.
    """
    if value is None:
        return "N/A"
    now = now or datetime.now()
    minutes = int((now - value).total_seconds() // 60)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    if minutes < 24 * 60:
        hours = minutes // 60
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if minutes < 7 * 24 * 60:
        days = minutes // (24 * 60)
        return f"{days} day{'s' if days > 1 else ''} ago"
    return value.strftime(_SHORT_DATE_FORMAT)


def item_icon(item: AnyItem) -> str:
    """Icon for an item, varying with its size or format."""
    match item:
        case Note():
            return "📝✨" if item.is_markdown else "📝"
        case PdfDocument():
            return "📚" if item.page_count > _LONG_PDF_PAGES else "📄"
        case MediaLink():
            return "🎬" if item.duration_minutes > _LONG_MEDIA_MINUTES else "🎵"
        case TextSnippet():
            return "💻"
        case _:
            assert_never(item)


def describe_item(item: AnyItem) -> str:
    """One-line description with the most useful metadata of each variant."""
    match item:
        case Note():
            if len(item.content) > _LONG_NOTE_CHARS:
                return f"Long note ({item.content_preview})"
            return f"Note: {item.content_preview}"
        case PdfDocument():
            if item.page_count > 0:
                return f"PDF: {item.file_name} ({item.page_count} pages)"
            return f"PDF: {item.file_name}"
        case MediaLink():
            label = item.media_type.display_name
            if item.duration_minutes > 0:
                return f"Media: {label} ({format_duration(item.duration_minutes)})"
            return f"Media: {label}"
        case TextSnippet():
            if item.language and item.language != "text":
                return f"Snippet ({item.language}): {item.content_preview}"
            return f"Snippet: {item.content_preview}"
        case _:
            assert_never(item)


def item_details(item: AnyItem) -> list[tuple[str, str]]:
    """Label/value rows for a detail view of one item."""
    rows = [
        ("ID", item.id or ""),
        ("Type", item.item_type.display_name),
        ("Title", str(item)),
        ("Description", item.description or ""),
        ("Category", str(item.category) if item.category is not None else ""),
        ("Tags", ", ".join(sorted(item.tags))),
        ("Added", format_datetime(item.date_added)),
        ("Modified", relative_time(item.last_modified)),
    ]
    match item:
        case Note():
            rows.append(("Format", "Markdown" if item.is_markdown else "Plain text"))
            rows.append(("Content", item.content))
        case PdfDocument():
            rows.append(("File", item.file_path or ""))
            rows.append(("Size", format_file_size(item.file_size)))
            rows.append(("Pages", str(item.page_count)))
            rows.append(("Author", item.author or ""))
        case MediaLink():
            rows.append(("URL", item.url or ""))
            rows.append(("Media", item.media_type.display_name))
            rows.append(("Duration", format_duration(item.duration_minutes)))
            rows.append(("Source", item.source or ""))
        case TextSnippet():
            rows.append(("Language", item.language))
            rows.append(("Lines", str(item.line_count)))
            rows.append(("Source URL", item.source_url or ""))
            rows.append(("Content", item.content))
        case _:
            assert_never(item)
    return rows
