"""Prompt construction for insight narratives.

The model only narrates. Every number it may mention is precomputed by
an analyzer and handed over verbatim in the data block.
"""

from nutrition_insights.core.daily_insights.constants import BANNED_WORDS

PREFERRED_PHRASES: tuple[str, ...] = (
    "consider",
    "you might try",
    "nice work",
    "room to",
    "on track",
)

DAILY_INSIGHT_SYSTEM_PROMPT = """You are a supportive nutrition companion inside a food tracking app. \
You answer one question about the user's day using only the data you are given.

VOICE RULES:
- Answer in 2-3 short sentences.
- Start your answer with exactly one emoji, then a space.
- Use numbers exactly as they appear in the DATA block. Never calculate, round or invent numbers.
- Never use exclamation marks.
- Be warm and non-judgmental. One day never defines progress.
- Never use these words: {banned_words}.
- Prefer gentle phrasing such as: {preferred_phrases}.
- No medical advice and no supplement recommendations.

Example: \U0001F957 Protein is at 67% of your target with two meals left. A protein-rich dinner \
could close most of the gap."""


def build_system_prompt() -> str:
    """System prompt fixing the voice rules for every daily question."""
    return DAILY_INSIGHT_SYSTEM_PROMPT.format(
        banned_words=", ".join(f'"{word}"' for word in BANNED_WORDS),
        preferred_phrases=", ".join(f'"{phrase}"' for phrase in PREFERRED_PHRASES),
    )


def build_question_prompt(question_text: str, data_block: str) -> str:
    """Per-question prompt carrying the question and its data block.

    Args:
        question_text: The question as shown to the user
        data_block: Verbatim analyzer data block

    Returns:
        The user prompt for the model
    """
    lines = [
        f"QUESTION: {question_text}",
        "",
        "DATA:",
        data_block,
        "",
        "Answer the question in 2-3 sentences using only the DATA above.",
    ]
    return "\n".join(lines)


def build_full_prompt(question_text: str, data_block: str) -> str:
    """System prompt and question prompt concatenated into one text."""
    return f"{build_system_prompt()}\n\n{build_question_prompt(question_text, data_block)}"
