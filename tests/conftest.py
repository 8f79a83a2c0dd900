from __future__ import annotations

import os
from pathlib import Path

import pytest

os.environ.setdefault("DOCQA_ENVIRONMENT", "test")


@pytest.fixture
def invoice_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "invoices"
    directory.mkdir()
    (directory / "inv_001.txt").write_text("Invoice INV-001\nTotal: 1,250.00 EUR\n", encoding="utf-8")
    (directory / "inv_002.txt").write_text("Invoice INV-002\nTotal: 980.50 EUR\n", encoding="utf-8")
    return directory
