"""Formatting helpers for showing images and directories to people."""

from datetime import datetime

from mediatree.models import DirectoryNode
from mediatree.namespace.resolver import sorted_directories, sorted_objects

SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_file_size(size_bytes: int | None) -> str:
    """Human readable size, e.g. 512 B, 1.5 KB, 2.0 MB. Empty if unknown."""
    if size_bytes is None:
        return ""
    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    if unit == 0:
        return f"{int(size)} {SIZE_UNITS[0]}"
    return f"{size:.1f} {SIZE_UNITS[unit]}"


def format_upload_date(value: str | None) -> str:
    """Format an ISO 8601 timestamp as e.g. 'Jan 15, 2025'. Empty if missing or not a date."""
    if not value:
        return ""
    try:
        date = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return ""
    return f"{date:%b} {date.day}, {date.year}"


def render_tree(root: DirectoryNode, show_objects: bool = True) -> str:
    """Render the tree like the `tree` command does."""
    lines = [root.path or "."]

    def render(node: DirectoryNode, prefix: str):
        entries: list[tuple[str, DirectoryNode | None]] = [(f"{d.name}/", d) for d in sorted_directories(node)]
        if show_objects:
            for obj in sorted_objects(node):
                size = format_file_size(obj.size_bytes)
                entries.append((f"{obj.filename} ({size})" if size else obj.filename, None))
        for i, (label, child) in enumerate(entries):
            last = i == len(entries) - 1
            lines.append(f"{prefix}{'└── ' if last else '├── '}{label}")
            if child is not None:
                render(child, prefix + ("    " if last else "│   "))

    render(root, "")
    return "\n".join(lines)
