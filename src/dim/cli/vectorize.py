"""
Vectorize CLI - Score one image or text against a directory of prompts.

Each prompt file contributes one dimension; the JSON document printed on
stdout carries the vector, the run seed and the per-prompt outcomes.

Usage:
    # Vectorize an image with the prompts in ./prompts
    python -m dim.cli.vectorize --prompts-dir prompts --image photo.jpg

    # Vectorize inline text with a specific model
    python -m dim.cli.vectorize --prompts-dir prompts --text "Hello there" --model llama3.2

Exit Codes:
    0: Complete vector
    1: Partial result or configuration error
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.config_loader import DimConfig
from ..core.exceptions import DimConfigError, DimError, PartialVectorError, PromptLoadError
from ..core.logging import configure_logging
from ..core.vector import Vector
from ..prompts.loader import load_prompts
from ..providers.openai_client import OpenAICompatibleClient
from ..runners.dispatcher import ConcurrentDispatcher
from ..subjects.base import Subject, TextSubject
from ..subjects.image import ImageSubject


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the vectorize CLI."""
    parser = argparse.ArgumentParser(
        prog="dim-vectorize",
        description="Turn an image or text into a vector with one LLM prompt per dimension",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m dim.cli.vectorize --prompts-dir prompts --image photo.jpg
  python -m dim.cli.vectorize --prompts-dir prompts --text-file review.txt --max-workers 8
  OLLAMA_API_BASE=http://localhost:11434/v1 python -m dim.cli.vectorize \\
      --prompts-dir prompts --text "Hello there"
        """,
    )

    parser.add_argument(
        "--prompts-dir",
        type=Path,
        required=True,
        help="Directory with one prompt per file",
    )
    subject = parser.add_mutually_exclusive_group(required=True)
    subject.add_argument("--image", type=Path, help="Image file to vectorize")
    subject.add_argument("--text", type=str, help="Inline text to vectorize")
    subject.add_argument("--text-file", type=Path, help="UTF-8 text file to vectorize")

    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    parser.add_argument("--model", type=str, default=None, help="Model id (overrides config)")
    parser.add_argument("--temperature", type=float, default=None, help="Sampling temperature")
    parser.add_argument("--seed", type=int, default=None, help="Seed shared by every prompt")
    parser.add_argument("--max-workers", type=int, default=None, help="Concurrent gateway calls")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Attempts per prompt before giving up",
    )
    parser.add_argument(
        "--deadline-seconds",
        type=float,
        default=None,
        help="Wall-clock budget for the whole run",
    )
    parser.add_argument(
        "--base-url-env",
        type=str,
        default=None,
        help="Read the API base URL from this environment variable instead of the config",
    )
    parser.add_argument(
        "--structured-logs",
        action="store_true",
        help="Emit JSON log lines on stderr",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser


def apply_overrides(config: DimConfig, args: argparse.Namespace) -> None:
    """Copy explicit CLI values over the loaded configuration."""
    overrides = (
        ("model", "name", args.model),
        ("model", "temperature", args.temperature),
        ("model", "seed", args.seed),
        ("dispatcher", "max_workers", args.max_workers),
        ("dispatcher", "deadline_seconds", args.deadline_seconds),
        ("retry", "max_attempts", args.max_attempts),
    )
    for section, key, value in overrides:
        if value is not None:
            config.config.setdefault(section, {})[key] = value


def load_subject(args: argparse.Namespace) -> Subject:
    if args.image is not None:
        return ImageSubject.from_path(args.image)
    if args.text_file is not None:
        return TextSubject.from_path(args.text_file)
    return TextSubject(args.text)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        structured=args.structured_logs,
    )

    try:
        config = DimConfig(args.config)
        apply_overrides(config, args)
        params = config.model_parameters()
        dispatcher_config = config.dispatcher_config()
        if args.base_url_env:
            gateway = OpenAICompatibleClient.from_env(
                args.base_url_env,
                timeout_seconds=int(config.get_gateway_config().get("timeout_seconds", 120)),
            )
        else:
            gateway = config.gateway()
        prompts = load_prompts(args.prompts_dir)
        subject = load_subject(args)
    except (DimConfigError, PromptLoadError, OSError, UnicodeDecodeError) as e:
        logger.error(f"Setup failed: {e}")
        return 1

    vector = Vector(subject)
    dispatcher = ConcurrentDispatcher(gateway, dispatcher_config)

    try:
        result = dispatcher.vectorize(vector, prompts, params)
    except PartialVectorError as e:
        logger.error(str(e))
        print(json.dumps({"vector": None, "run": e.result.to_dict()}, indent=2))
        return 1
    except DimError as e:
        logger.error(f"Vectorization failed: {e}")
        return 1

    print(json.dumps({"vector": vector.to_dict(), "run": result.to_dict()}, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
