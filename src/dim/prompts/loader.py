"""
Prompt loading from a directory of prompt files.

Each file holds one prompt; the sorted file names give the vector's
dimension order, so the order is the same on every platform.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from ..core.exceptions import PromptLoadError


logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".txt", ".md", ".prompt")


def list_prompt_files(
    directory: Union[str, Path],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> List[Path]:
    """
    List prompt files in a directory, sorted by file name.

    Raises:
        PromptLoadError: If the directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise PromptLoadError(f"Prompt directory not found: {directory}")

    wanted = {ext.lower() for ext in extensions}
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in wanted),
        key=lambda p: p.name,
    )


def load_prompts(
    directory: Union[str, Path],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> List[str]:
    """
    Read every prompt file in a directory.

    Args:
        directory: Directory holding one prompt per file
        extensions: File suffixes to include

    Returns:
        Prompt strings in file-name order

    Raises:
        PromptLoadError: If the directory is missing, has no prompt files,
            or a prompt file is empty or not UTF-8
    """
    files = list_prompt_files(directory, extensions)
    if not files:
        raise PromptLoadError(f"No prompt files found in {directory}")

    prompts = []
    for path in files:
        try:
            text = path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError as e:
            raise PromptLoadError(f"Prompt file is not valid UTF-8: {path}: {e}") from e
        if not text:
            raise PromptLoadError(f"Prompt file is empty: {path}")
        prompts.append(text)

    logger.info(f"Loaded {len(prompts)} prompts from {directory}")
    return prompts
