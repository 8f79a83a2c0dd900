"""Access to the per-category folders of plain-text documents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Sequence

from docqa.errors import DocQAError, ErrorKind
from docqa.metrics.observability import get_logger
from docqa.models import Document

DEFAULT_CATEGORY = "invoices"

DEFAULT_CATEGORY_DIRS: Mapping[str, str] = {
    "invoices": "invoices",
    "contracts": "employment-contracts",
    "employment-contracts": "employment-contracts",
    "support": "customer-support",
    "customer-support": "customer-support",
    "knowledge": "knowledge-base",
    "knowledge-base": "knowledge-base",
}

_logger = get_logger("documents")


class CategoryNotFound(DocQAError):
    """Raised when the folder configured for a category does not exist."""

    kind = ErrorKind.CLIENT


class DocumentReadFailure(DocQAError):
    """Raised when a selected document cannot be read."""

    kind = ErrorKind.SERVER


@dataclass(frozen=True)
class CategoryLocation:
    """A resolved category and the folder that holds its documents."""

    name: str
    directory: Path


def resolve_category(
    name: str | None,
    *,
    data_dir: Path,
    categories: Mapping[str, str] = DEFAULT_CATEGORY_DIRS,
    default_category: str = DEFAULT_CATEGORY,
) -> CategoryLocation:
    """Map a category name to its folder, falling back to the default category."""

    table = {alias.strip().lower(): folder for alias, folder in categories.items()}
    key = (name or "").strip().lower()
    if key not in table:
        key = default_category.strip().lower()
    folder = table.get(key, key)
    return CategoryLocation(name=key, directory=Path(data_dir) / folder)


def ensure_category_directory(location: CategoryLocation) -> Path:
    if not location.directory.is_dir():
        raise CategoryNotFound(f"Category folder not found: {location.directory}")
    return location.directory


def list_text_files(directory: Path, extension: str = ".txt") -> List[Path]:
    """Return the text files directly inside ``directory``, sorted by name.

    Enumeration errors are logged and reported as an empty listing.
    """

    suffix = extension.lower()
    try:
        entries = [entry for entry in Path(directory).iterdir() if entry.is_file()]
    except OSError as exc:
        _logger.warning("documents.list_failed", directory=str(directory), detail=str(exc))
        return []
    files = [entry for entry in entries if entry.suffix.lower() == suffix]
    return sorted(files, key=lambda path: path.name)


def load_documents(paths: Sequence[Path], *, encoding: str = "utf-8") -> List[Document]:
    documents: List[Document] = []
    for path in paths:
        try:
            content = Path(path).read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadFailure(f"Failed to read {Path(path).name}: {exc}") from exc
        documents.append(Document(filename=Path(path).name, path=Path(path), content=content))
    return documents
