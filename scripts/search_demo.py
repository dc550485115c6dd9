#!/usr/bin/env python3
"""
Compare retrieval strategies over the sample corpus.

Runs the same query through boolean matching, BM25, vector and hybrid search
and prints each ranking with the reason a document was found.
Embeddings are not computed here: pass the nearest-neighbour ranking from
your vector store with --vector-ranking.

Usage:
    python scripts/search_demo.py "database pooling"
    python scripts/search_demo.py "secure my postgres" --vector-ranking 10,9,11,1
    python scripts/search_demo.py "performance" --mode bm25 --threshold 1.0
"""

import argparse
import sys
from pathlib import Path

# Allow running from a checkout without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from search_lab import MatchSource, QueryEngine, SearchMode, load_config, sample_documents  # noqa: E402
from search_lab.errors import SearchLabError  # noqa: E402
from search_lab.logging_config import setup_logging  # noqa: E402


def parse_ranking(value: str):
    """Parse "3,1,5" into [3, 1, 5] (non-numeric ids are kept as strings)."""
    ids = []
    for part in value.split(","):
        part = part.strip()
        if part:
            ids.append(int(part) if part.isdigit() else part)
    return ids


def print_response(response) -> None:
    print(f"\n=== {response.mode.value.upper()} ({response.total} results) ===")
    for result in response.results:
        title = result.document.title if result.document else "(not indexed)"
        print(f"  {result.rank:>2}. [{result.doc_id}] {title}  score={result.score:.4f}")

        if result.source is MatchSource.BOTH:
            reason = f"Found by BOTH: vector #{result.vector_rank} + keyword #{result.keyword_rank}"
        elif result.vector_rank is not None:
            reason = f"Found by VECTOR only: #{result.vector_rank}"
        else:
            reason = f"Found by KEYWORD: #{result.keyword_rank}"
        print(f"      {reason}; matched {len(result.matched_terms)}/{len(response.query_terms)} terms")

        for contribution in result.contributions:
            print(
                f"      - {contribution.term}: tf={contribution.term_frequency} "
                f"df={contribution.document_frequency} idf={contribution.idf:.2f} "
                f"({contribution.level.value})"
            )
        if result.length_factor is not None:
            print(f"      length: {result.length_factor.value}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("query", help="Search query")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SearchMode],
        action="append",
        help="Strategy to run (repeatable; default: all that apply)",
    )
    parser.add_argument("--vector-ranking", type=parse_ranking, help="Comma-separated doc ids, best first")
    parser.add_argument("--keyword-weight", type=float, help="RRF weight of the BM25 ranking")
    parser.add_argument("--vector-weight", type=float, help="RRF weight of the vector ranking")
    parser.add_argument("--threshold", type=float, help="Minimum score to keep")
    parser.add_argument("--top-k", type=int, default=10, help="Maximum results per strategy")
    parser.add_argument("--log-file", default=None, help="Also log to this file (rotated per session)")
    args = parser.parse_args()

    setup_logging(log_file=args.log_file)

    try:
        engine = QueryEngine(config=load_config())
        engine.rebuild(sample_documents())

        modes = [SearchMode(mode) for mode in args.mode] if args.mode else [SearchMode.BOOLEAN, SearchMode.BM25]
        if not args.mode and args.vector_ranking:
            modes += [SearchMode.VECTOR, SearchMode.HYBRID]

        overrides = {
            "keyword_weight": args.keyword_weight,
            "vector_weight": args.vector_weight,
            "score_threshold": args.threshold,
            "top_k": args.top_k,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}

        for mode in modes:
            response = engine.query(args.query, vector_ranking=args.vector_ranking, mode=mode, **overrides)
            print_response(response)

    except SearchLabError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
