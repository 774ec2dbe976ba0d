"""Token usage diagnostics.

Splits a generation's output tokens into a visible part and a reasoning part
so that logs show when a thinking model spent its budget before writing any
text. The numbers are advisory only.
"""

import math
from dataclasses import dataclass, field

from prnote.llm.base import TokenUsage

# Rough characters-per-token ratio for English prose and code
CHARS_PER_TOKEN = 4

# Reasoning share at which a note is added to the summary
HEAVY_REASONING_RATIO = 0.5


@dataclass(frozen=True)
class UsageSummary:
    """Visible/reasoning split of a generation's output tokens."""

    reasoning_ratio: float
    visible_ratio: float
    reasoning_tokens: int
    visible_tokens: int
    notes: list[str] = field(default_factory=list)


def estimate_visible_tokens(text: str) -> int:
    """Estimate the token count of visible output text."""
    return math.ceil(len(text or "") / CHARS_PER_TOKEN)


def _clamp_ratio(value: float) -> float:
    return min(1.0, max(0.0, value))


def summarize(usage: TokenUsage, visible_text: str) -> UsageSummary:
    """Estimate how much of the output budget went to reasoning.

    Precedence:
    1. the reasoning token count reported by the backend;
    2. output tokens minus the visible-text estimate;
    3. zero when the backend reported no output tokens.

    Args:
        usage: Token usage from a GenerationResult.
        visible_text: The text actually returned.

    Returns:
        A UsageSummary with ratios relative to the output token count.
    """
    output_tokens = max(0, usage.output_tokens)
    denominator = max(1, output_tokens)
    visible_estimate = estimate_visible_tokens(visible_text)
    notes = []

    if usage.reasoning_tokens is not None:
        reasoning_tokens = max(0, usage.reasoning_tokens)
        notes.append("reasoning tokens reported by backend")
    elif output_tokens > 0:
        reasoning_tokens = max(0, output_tokens - visible_estimate)
        notes.append(f"reasoning tokens estimated from visible text (~{CHARS_PER_TOKEN} chars/token)")
    else:
        reasoning_tokens = 0
        notes.append("no output token count reported")

    reasoning_ratio = _clamp_ratio(reasoning_tokens / denominator)
    visible_ratio = _clamp_ratio(min(visible_estimate, denominator) / denominator)

    if output_tokens > 0 and reasoning_ratio >= HEAVY_REASONING_RATIO:
        notes.append("most of the output budget went to reasoning")
    if output_tokens > 0 and not visible_text:
        notes.append("no visible text was returned")

    return UsageSummary(
        reasoning_ratio=reasoning_ratio,
        visible_ratio=visible_ratio,
        reasoning_tokens=reasoning_tokens,
        visible_tokens=visible_estimate,
        notes=notes,
    )


def format_usage(usage: TokenUsage, summary: UsageSummary) -> str:
    """Render usage and its summary as a single log line."""
    line = (
        f"prompt={usage.prompt_tokens} output={usage.output_tokens} total={usage.total_tokens} "
        f"reasoning~{summary.reasoning_tokens} ({summary.reasoning_ratio:.0%}) "
        f"visible~{summary.visible_tokens} ({summary.visible_ratio:.0%})"
    )
    if summary.notes:
        line += " | " + "; ".join(summary.notes)
    return line
