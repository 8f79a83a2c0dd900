"""Tests for category resolution and document loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from docqa.documents import (
    CategoryNotFound,
    DocumentReadFailure,
    ensure_category_directory,
    list_text_files,
    load_documents,
    resolve_category,
)
from docqa.errors import ErrorKind


@pytest.mark.parametrize(
    ("name", "folder"),
    [
        ("invoices", "invoices"),
        ("Contracts", "employment-contracts"),
        ("employment-contracts", "employment-contracts"),
        (" support ", "customer-support"),
        ("knowledge", "knowledge-base"),
        ("unknown-category", "invoices"),
        (None, "invoices"),
        ("", "invoices"),
    ],
)
def test_resolve_category_maps_names_to_folders(tmp_path: Path, name, folder) -> None:
    location = resolve_category(name, data_dir=tmp_path)
    assert location.directory == tmp_path / folder


def test_resolve_category_uses_explicit_table(tmp_path: Path) -> None:
    location = resolve_category(
        "hr",
        data_dir=tmp_path,
        categories={"hr": "people", "misc": "misc"},
        default_category="misc",
    )
    assert location.name == "hr"
    assert location.directory == tmp_path / "people"
    fallback = resolve_category("other", data_dir=tmp_path, categories={"misc": "misc"}, default_category="misc")
    assert fallback.directory == tmp_path / "misc"


def test_resolve_category_ignores_case_of_table_keys(tmp_path: Path) -> None:
    location = resolve_category("hr", data_dir=tmp_path, categories={"HR": "people"}, default_category="HR")
    assert location.name == "hr"
    assert location.directory == tmp_path / "people"


def test_missing_category_directory_is_client_error(tmp_path: Path) -> None:
    location = resolve_category("support", data_dir=tmp_path)
    with pytest.raises(CategoryNotFound) as info:
        ensure_category_directory(location)
    assert info.value.kind is ErrorKind.CLIENT
    assert "customer-support" in str(info.value)


def test_list_text_files_is_flat_sorted_and_filtered(tmp_path: Path) -> None:
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a.TXT").write_text("a")
    (tmp_path / "notes.md").write_text("md")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "c.txt").write_text("c")

    names = [path.name for path in list_text_files(tmp_path)]
    assert names == ["a.TXT", "b.txt"]


def test_list_text_files_treats_missing_directory_as_empty(tmp_path: Path) -> None:
    assert list_text_files(tmp_path / "does-not-exist") == []


def test_load_documents_reads_full_content(invoice_dir: Path) -> None:
    documents = load_documents([invoice_dir / "inv_002.txt"])
    assert documents[0].filename == "inv_002.txt"
    assert documents[0].content == "Invoice INV-002\nTotal: 980.50 EUR\n"


def test_load_documents_raises_on_unreadable_file(invoice_dir: Path) -> None:
    with pytest.raises(DocumentReadFailure) as info:
        load_documents([invoice_dir / "inv_001.txt", invoice_dir / "gone.txt"])
    assert info.value.kind is ErrorKind.SERVER
    assert "gone.txt" in str(info.value)
