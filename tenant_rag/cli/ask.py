"""Ask a question against one tenant's documents from the command line.

Usage::

    python -m tenant_rag.cli.ask acme "What did the Q3 report say about churn?"
    python -m tenant_rag.cli.ask acme "Who wrote it?" --json --top-k 5

Without ``--json`` the answer is printed as a readable summary: the
question, the retrieved documents (previewed, with similarity scores) and
the generated answer.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from tenant_rag.config.settings import Settings
from tenant_rag.utils.errors import RagPipelineError


async def _ask(args: argparse.Namespace, components: dict[str, Any]) -> int:
    answers = components["answer_service"]
    if args.json or args.top_k is not None:
        result = await answers.answer(args.tenant, args.question, top_k=args.top_k)
        if args.json:
            print(result.model_dump_json(indent=2))
        else:
            print(result.format_summary())
        return 0

    await answers.ask(args.tenant, args.question)
    return 0


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    from tenant_rag.config.loader import load_config
    from tenant_rag.main import build_components

    components = build_components(app_settings, load_config(settings=app_settings))
    try:
        return await _ask(args, components)
    finally:
        await components["http_client"].aclose()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m tenant_rag.cli.ask",
        description="Answer a question from one tenant's documents.",
    )
    parser.add_argument("tenant", help="Tenant ID")
    parser.add_argument("question", help="Question to answer")
    parser.add_argument("--json", action="store_true", help="Print the structured result as JSON")
    parser.add_argument("--top-k", type=int, default=None, dest="top_k", help="Context documents to use")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ask tool."""
    args = _build_parser().parse_args(argv)
    try:
        exit_code = asyncio.run(_run(args, Settings()))
    except RagPipelineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
