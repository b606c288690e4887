"""
Prompt templates for scalar rating.

Every prompt must ask for a JSON object holding exactly one number.
"""

# Version identifier for prompt tracking
PROMPT_VERSION = "v1"

SCORE_MIN = 0.0
SCORE_MAX = 10.0

RATING_TEMPLATE = (
    "output in json. Rate the {subject_noun} based on the guideline provided. "
    "Rate from {score_min} to {score_max}. {{'{key}': your score}}\n"
    "Guideline: {guideline}"
)


def build_rating_prompt(
    attribute_description: str,
    key: str = "score",
    subject_noun: str = "text",
    score_min: float = SCORE_MIN,
    score_max: float = SCORE_MAX,
) -> str:
    """
    Wrap an attribute description into a single-score rating instruction.

    Args:
        attribute_description: Guideline describing the attribute to rate
        key: JSON key the model should use for the score
        subject_noun: What is being rated ("text", "image")
        score_min: Lower bound of the scale
        score_max: Upper bound of the scale

    Returns:
        The formatted prompt

    Raises:
        ValueError: If the description is empty or the scale is inverted
    """
    if not attribute_description or not attribute_description.strip():
        raise ValueError("attribute_description must not be empty")
    if score_min < 0 or score_max <= score_min:
        raise ValueError("scale must satisfy 0 <= score_min < score_max")

    return RATING_TEMPLATE.format(
        subject_noun=subject_noun,
        score_min=score_min,
        score_max=score_max,
        key=key,
        guideline=attribute_description.strip(),
    )


def build_rating_prompts(attribute_descriptions, **kwargs) -> list:
    """Build one rating prompt per description, keeping order."""
    return [build_rating_prompt(d, **kwargs) for d in attribute_descriptions]
