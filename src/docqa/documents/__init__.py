"""Document store access."""

from .store import (
    DEFAULT_CATEGORY,
    DEFAULT_CATEGORY_DIRS,
    CategoryLocation,
    CategoryNotFound,
    DocumentReadFailure,
    ensure_category_directory,
    list_text_files,
    load_documents,
    resolve_category,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_CATEGORY_DIRS",
    "CategoryLocation",
    "CategoryNotFound",
    "DocumentReadFailure",
    "ensure_category_directory",
    "list_text_files",
    "load_documents",
    "resolve_category",
]
