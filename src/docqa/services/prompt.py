"""Prompt construction for the generation backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from docqa.models import Document


@dataclass(frozen=True)
class PromptTemplate:
    """Versioned instruction preamble plus the label used for each document."""

    name: str
    version: str
    preamble: str
    document_label: str = "Document"


INVOICE_QA = PromptTemplate(
    name="invoice_qa",
    version="1",
    document_label="Invoice",
    preamble=(
        "You are a precise invoice processor. Answer using ONLY the provided data.\n"
        "Be concise. Cite sources (file names) when possible. Never invent values that are not in the documents.\n"
        "\n"
        "For extraction/summary questions return JSON like:\n"
        "{\n"
        '  "answer": "brief summary or extracted value",\n'
        '  "sources": ["inv_001.txt", ...],\n'
        '  "details": { ... optional fields ... }\n'
        "}"
    ),
)

INVOICE_CALCULATOR = PromptTemplate(
    name="invoice_calculator",
    version="1",
    document_label="Invoice",
    preamble=(
        "You are an invoice calculator. Use ONLY the amounts, quantities and rates found in the provided data.\n"
        "Show the arithmetic you performed. Cite the file name of every figure you use.\n"
        "If a required value is missing, say so instead of guessing.\n"
        "\n"
        "Return JSON like:\n"
        "{\n"
        '  "answer": "final computed value with currency",\n'
        '  "calculation": "step-by-step arithmetic",\n'
        '  "sources": ["inv_001.txt", ...]\n'
        "}"
    ),
)

GENERAL_QA = PromptTemplate(
    name="general_qa",
    version="1",
    document_label="Document",
    preamble=(
        "You are a careful document assistant. Answer using ONLY the provided documents.\n"
        "Be concise. Cite the file names you relied on. Do not invent facts, names or figures.\n"
        "\n"
        "Return JSON like:\n"
        "{\n"
        '  "answer": "direct answer to the question",\n'
        '  "sources": ["file.txt", ...]\n'
        "}"
    ),
)

PROMPT_TEMPLATES: Mapping[str, PromptTemplate] = {
    template.name: template for template in (INVOICE_QA, INVOICE_CALCULATOR, GENERAL_QA)
}


class PromptBuilder:
    """Builds prompts for the generation backend."""

    def __init__(self, template: PromptTemplate | None = None) -> None:
        self._template = template or INVOICE_QA

    @property
    def template(self) -> PromptTemplate:
        return self._template

    def render_documents(self, documents: Sequence[Document]) -> str:
        label = self._template.document_label
        return "".join(f"\n--- {label}: {document.filename} ---\n{document.content}\n" for document in documents)

    def build(self, documents: Sequence[Document], query: str) -> str:
        return (
            f"{self._template.preamble}\n"
            "\n"
            "Documents:\n"
            f"{self.render_documents(documents)}\n"
            f"Question: {query}\n"
            "\n"
            "Respond with JSON only."
        )


def get_template(name: str) -> PromptTemplate:
    try:
        return PROMPT_TEMPLATES[name]
    except KeyError as exc:
        raise ValueError(f"Unknown prompt template: {name}") from exc
