"""
CLI for clusterbench: compare and topics subcommands.
Run with: python3 -m clusterbench <subcommand> ...
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path


def _read_lines(path: Path | None) -> list[str]:
    if path is None or str(path) == "-":
        return [line.rstrip("\n") for line in sys.stdin]
    return path.read_text(encoding="utf-8").strip().splitlines()


def _write_text(path: Path | None, text: str) -> None:
    if not text.endswith("\n"):
        text += "\n"
    if path is None or str(path) == "-":
        sys.stdout.write(text)
    else:
        path.write_text(text, encoding="utf-8")


def _read_documents(path: Path | None) -> list[str]:
    docs = _read_lines(path)
    if not docs:
        raise SystemExit("No documents (empty input).")
    return docs


def _read_labels(path: Path, expected_len: int) -> list[int]:
    lines = [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    if len(lines) != expected_len:
        raise SystemExit(
            f"Labels file has {len(lines)} lines but there are {expected_len} documents."
        )
    try:
        return [int(line) for line in lines]
    except ValueError as e:
        raise SystemExit(f"Labels must be integers (0/1): {e}")


def _build_config(args: argparse.Namespace):
    from .config import PipelineConfig
    from .config_loader import load_config, validate_config

    try:
        cfg = load_config(args.config) if args.config else PipelineConfig()
    except (FileNotFoundError, ValueError) as e:
        raise SystemExit(str(e))
    overrides = {}
    if getattr(args, "k", None):
        overrides["cluster_counts"] = tuple(args.k)
    if getattr(args, "methods", None):
        overrides["methods"] = tuple(args.methods)
    if getattr(args, "seed", None) is not None:
        overrides["seed"] = args.seed
    if getattr(args, "jobs", None) is not None:
        overrides["n_jobs"] = args.jobs
    cfg = replace(cfg, **overrides)
    try:
        validate_config(cfg)
    except ValueError as e:
        raise SystemExit(str(e))
    return cfg


def cmd_compare(args: argparse.Namespace) -> None:
    from .pipeline import run_comparison

    docs = _read_documents(args.input)
    labels = _read_labels(args.labels, len(docs)) if args.labels else None
    cfg = _build_config(args)
    try:
        result = run_comparison(docs, labels, cfg)
    except ValueError as e:
        raise SystemExit(str(e))

    if args.format == "json":
        _write_text(args.output, result.table.to_json())
    else:
        _write_text(args.output, result.table.format_text())


def _topics_config(args: argparse.Namespace):
    """Config for the topics subcommand; --seed overrides the config file only when given."""
    from .config import PipelineConfig

    if args.config:
        cfg = _build_config(args)
    elif args.seed is not None:
        cfg = PipelineConfig(seed=args.seed)
    else:
        cfg = PipelineConfig()
    return replace(cfg, top_n_terms=args.n)


def cmd_topics(args: argparse.Namespace) -> None:
    import json

    from .errors import PipelineError
    from .strategies import LDAStrategy
    from .tdm_builder import build_tdm

    docs = _read_documents(args.input)
    cfg = _topics_config(args)
    try:
        counts = build_tdm(
            docs,
            min_term_length=cfg.min_term_length,
            min_doc_fraction=cfg.min_doc_fraction,
        )
        strategy = LDAStrategy(cfg, vocabulary=counts.vocabulary)
        assignment, terms = strategy.fit_topics(counts.matrix, args.topics, cfg.seed)
    except PipelineError as e:
        raise SystemExit(f"{e.reason}: {e}")

    out = {
        "k": args.topics,
        "top_terms": {str(t): words for t, words in terms.items()},
        "assignment": [int(i) for i in assignment.labels],
    }
    _write_text(args.output, json.dumps(out, ensure_ascii=False, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="clusterbench",
        description="Cluster cleaned documents five ways and compare Silhouette / Davies-Bouldin scores.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # compare
    p_cmp = subparsers.add_parser("compare", help="Run every method at every k and print the comparison table")
    p_cmp.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="Input file: one cleaned document per line (default: stdin)",
    )
    p_cmp.add_argument(
        "--labels",
        type=Path,
        default=None,
        help="Optional file with one binary label (0/1) per document line",
    )
    p_cmp.add_argument(
        "-k",
        type=int,
        nargs="+",
        default=None,
        metavar="K",
        help="Cluster counts to evaluate (default: 5 10)",
    )
    p_cmp.add_argument(
        "--methods",
        nargs="+",
        default=None,
        choices=("kmeans", "pam", "gmm", "hierarchical", "lda"),
        help="Methods to run (default: all)",
    )
    p_cmp.add_argument("--config", type=Path, default=None, help="Optional .config or .yaml options file")
    p_cmp.add_argument("--seed", type=int, default=None, help="Random seed (default: 42)")
    p_cmp.add_argument(
        "-j", "--jobs",
        type=int,
        default=None,
        metavar="N",
        help="Worker threads for (method, k) cells (default: 1)",
    )
    p_cmp.add_argument(
        "--format",
        choices=("json", "text"),
        default="text",
        help="Output format (default: text)",
    )
    p_cmp.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout). Use - for stdout.",
    )
    p_cmp.set_defaults(func=cmd_compare)

    # topics
    p_top = subparsers.add_parser("topics", help="Fit LDA and print the top terms of each topic")
    p_top.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="Input file: one cleaned document per line (default: stdin)",
    )
    p_top.add_argument(
        "-k",
        dest="topics",
        type=int,
        required=True,
        metavar="K",
        help="Number of topics",
    )
    p_top.add_argument(
        "-n",
        type=int,
        default=10,
        metavar="N",
        help="Terms per topic (default: 10)",
    )
    p_top.add_argument("--config", type=Path, default=None, help="Optional .config or .yaml options file")
    p_top.add_argument("--seed", type=int, default=None, help="Random seed (default: config file, else 42)")
    p_top.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output JSON file (default: stdout). Use - for stdout.",
    )
    p_top.set_defaults(func=cmd_topics)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
