"""CLI for evaluating DocQA document selection against labeled queries."""

from __future__ import annotations

import argparse
import json
import statistics
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from docqa.config import Settings, get_settings
from docqa.selection import RelevanceSelector, SelectionConfig, build_strategy


@dataclass(frozen=True)
class DocumentFixture:
    filename: str
    content: str


@dataclass(frozen=True)
class QueryFixture:
    query: str
    expected_files: Sequence[str]


@dataclass(frozen=True)
class EvaluationResult:
    total_queries: int
    exact_matches: int
    mean_precision: float
    mean_recall: float
    details: List[dict]

    def to_dict(self) -> dict:
        return {
            "total_queries": self.total_queries,
            "exact_matches": self.exact_matches,
            "mean_precision": self.mean_precision,
            "mean_recall": self.mean_recall,
            "details": self.details,
        }


def load_dataset(path: Path) -> tuple[list[DocumentFixture], list[QueryFixture]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    documents = [DocumentFixture(filename=item["filename"], content=item["content"]) for item in data["documents"]]
    queries = [
        QueryFixture(query=item["query"], expected_files=item.get("expected_files", []))
        for item in data["queries"]
    ]
    return documents, queries


def _write_documents(temp_dir: Path, fixtures: Sequence[DocumentFixture]) -> list[Path]:
    paths: list[Path] = []
    for fixture in fixtures:
        path = temp_dir / fixture.filename
        path.write_text(fixture.content, encoding="utf-8")
        paths.append(path)
    return paths


def _score(selected: Sequence[str], expected: Sequence[str]) -> tuple[float, float]:
    selected_set, expected_set = set(selected), set(expected)
    hits = len(selected_set & expected_set)
    precision = hits / len(selected_set) if selected_set else float(not expected_set)
    recall = hits / len(expected_set) if expected_set else 1.0
    return precision, recall


def build_selector(settings: Settings) -> RelevanceSelector:
    return RelevanceSelector(
        SelectionConfig(
            extension=settings.document_extension,
            broadening_tokens=settings.broadening_tokens_tuple,
            fallback_limit=settings.selection_fallback_limit,
        ),
        strategy=build_strategy(settings.selection_strategy),
    )


def run_evaluation(
    dataset_path: Path,
    *,
    settings: Settings | None = None,
    strategy: str | None = None,
    json_out: Path | None = None,
    markdown_out: Path | None = None,
) -> EvaluationResult:
    settings = settings or get_settings()
    if strategy:
        settings = settings.model_copy(update={"selection_strategy": strategy})
    documents, queries = load_dataset(dataset_path)
    selector = build_selector(settings)

    precisions: list[float] = []
    recalls: list[float] = []
    exact = 0
    details: list[dict] = []
    with tempfile.TemporaryDirectory() as tmpdir_str:
        tmpdir = Path(tmpdir_str)
        _write_documents(tmpdir, documents)
        for query in queries:
            selected = [path.name for path in selector.select(tmpdir, query.query)]
            precision, recall = _score(selected, query.expected_files)
            precisions.append(precision)
            recalls.append(recall)
            if set(selected) == set(query.expected_files):
                exact += 1
            details.append(
                {
                    "query": query.query,
                    "selected": selected,
                    "expected": list(query.expected_files),
                    "precision": precision,
                    "recall": recall,
                },
            )

    result = EvaluationResult(
        total_queries=len(queries),
        exact_matches=exact,
        mean_precision=statistics.fmean(precisions) if precisions else 0.0,
        mean_recall=statistics.fmean(recalls) if recalls else 0.0,
        details=details,
    )
    if json_out:
        json_out.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
    if markdown_out:
        markdown_out.write_text(_format_markdown(result), encoding="utf-8")
    return result


def _format_markdown(result: EvaluationResult) -> str:
    lines = [
        "# DocQA Selection Report",
        "",
        f"- Total queries: {result.total_queries}",
        f"- Exact matches: {result.exact_matches}",
        f"- Mean precision: {result.mean_precision:.2f}",
        f"- Mean recall: {result.mean_recall:.2f}",
        "",
        "| Query | Selected | Expected |",
        "| --- | --- | --- |",
    ]
    for item in result.details:
        selected = ", ".join(item["selected"]) if item["selected"] else "-"
        expected = ", ".join(item["expected"]) if item["expected"] else "-"
        lines.append(f"| {item['query']} | {selected} | {expected} |")
    return "\n".join(lines)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate DocQA document selection.")
    parser.add_argument(
        "--dataset",
        type=Path,
        default=Path("evaluations/fixtures/selection.json"),
        help="Path to evaluation dataset JSON file.",
    )
    parser.add_argument(
        "--strategy",
        choices=("substring", "token"),
        default=None,
        help="Override the configured match strategy",
    )
    parser.add_argument("--json-out", type=Path, default=None, help="Optional path to write JSON report")
    parser.add_argument("--markdown-out", type=Path, default=None, help="Optional path to write Markdown report")
    parser.add_argument("--min-recall", type=float, default=None, help="Override recall threshold")
    parser.add_argument("--min-precision", type=float, default=None, help="Override precision threshold")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = get_settings()
    min_recall = args.min_recall if args.min_recall is not None else settings.evaluation_min_recall
    min_precision = args.min_precision if args.min_precision is not None else settings.evaluation_min_precision

    result = run_evaluation(
        args.dataset,
        settings=settings,
        strategy=args.strategy,
        json_out=args.json_out,
        markdown_out=args.markdown_out,
    )
    print(json.dumps(result.to_dict(), indent=2))

    if result.mean_recall < min_recall or result.mean_precision < min_precision:
        print(
            f"Evaluation failed thresholds (recall {result.mean_recall:.2f} vs {min_recall}, "
            f"precision {result.mean_precision:.2f} vs {min_precision})",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
