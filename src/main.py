# src/main.py — v2
"""CLI entry point: ask, status, config commands.

Usage:
    lexassist [--provider NAME] ask "<question>" [-a FILE ...] [--history FILE]
    lexassist [--provider NAME] status
    lexassist [--provider NAME] config
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from lexassist.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        print(f"error: {exc}", file=sys.stderr)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lexassist",
        description=f"lexassist v{__version__}: multimodal legal assistant",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--provider", default=None,
        help="Model provider override (ollama-local, gemini, mock)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- ask ---
    p_ask = subparsers.add_parser("ask", help="Ask a legal question")
    p_ask.add_argument("question", help="Question or drafting request")
    p_ask.add_argument(
        "-a", "--attach", dest="attachments", type=Path, action="append", default=[],
        help="File to attach (repeatable); images are analyzed by the vision model",
    )
    p_ask.add_argument(
        "--history", type=Path, default=None,
        help="JSON file with prior turns: [{\"role\": ..., \"content\": ...}]",
    )
    p_ask.set_defaults(func=_cmd_ask)

    # --- status ---
    p_status = subparsers.add_parser("status", help="Check model availability")
    p_status.set_defaults(func=_cmd_status)

    # --- config ---
    p_config = subparsers.add_parser("config", help="Show the resolved model configuration")
    p_config.set_defaults(func=_cmd_config)

    return parser


def _load_settings(args: argparse.Namespace):
    from lexassist.config.settings import load_settings

    overrides: dict[str, object] = {}
    if args.provider:
        overrides["model_provider"] = args.provider
    return load_settings(**overrides)


def _setup_logging(settings, verbose: bool) -> None:
    from lexassist.logging.logger import setup_logging_from_settings

    setup_logging_from_settings(settings, verbose=verbose)


async def _cmd_ask(args: argparse.Namespace, settings) -> int:
    from lexassist.api.facade import LegalResponseError, generate_legal_response
    from lexassist.attachments.models import UploadedFile
    from lexassist.orchestration.orchestrator import ModelOrchestrator

    for path in args.attachments:
        if not path.exists():
            logger.error("Attachment not found: %s", path)
            return 1

    history = _read_history(args.history) if args.history else None
    uploads = [UploadedFile.from_path(p) for p in args.attachments]

    try:
        answer = await generate_legal_response(
            args.question,
            attachments=uploads,
            conversation_history=history,
            orchestrator=ModelOrchestrator(settings=settings),
        )
    except LegalResponseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(answer)
    return 0


async def _cmd_status(args: argparse.Namespace, settings) -> int:
    from lexassist.api.facade import get_service_status
    from lexassist.orchestration.orchestrator import ModelOrchestrator

    status = await get_service_status(ModelOrchestrator(settings=settings))
    print(status.model_dump_json(indent=2))
    ready = status.configured and status.availability.text_ready
    return 0 if ready else 3


async def _cmd_config(args: argparse.Namespace, settings) -> int:
    from lexassist.llm.config import get_model_config, is_provider_configured

    config = get_model_config(settings)
    payload = config.model_dump()
    payload["configured"] = is_provider_configured(config)
    print(json.dumps(payload, indent=2))
    return 0


def _read_history(path: Path) -> list[dict[str, str]]:
    """Load prior conversation turns from a JSON array."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"History file must contain a JSON array: {path}")
    return data


if __name__ == "__main__":
    sys.exit(main())
