"""
Prompt sources and templates.
"""

from .loader import DEFAULT_EXTENSIONS, list_prompt_files, load_prompts
from .templates import PROMPT_VERSION, build_rating_prompt, build_rating_prompts

__all__ = [
    "DEFAULT_EXTENSIONS",
    "list_prompt_files",
    "load_prompts",
    "PROMPT_VERSION",
    "build_rating_prompt",
    "build_rating_prompts",
]
