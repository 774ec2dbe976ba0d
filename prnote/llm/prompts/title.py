"""Prompt template for the pull request title."""

USER_PROMPT_TEMPLATE_TITLE = """You are helping write a precise, concise Pull Request title.

Rules:
- Output ONLY the title text, nothing else.
- Use imperative mood, present tense.
- 6-12 words, max 72 characters.
- No emojis, no code fences, no quotes, no trailing punctuation.
- Summarize the main changes from the diff. If the current title is already great, improve it slightly.

Current title: {current_title}

Diff:
{diff}"""


def build_title_prompt(diff: str, current_title: str) -> str:
    """Build the title prompt for a diff and the PR's current title."""
    return USER_PROMPT_TEMPLATE_TITLE.format(diff=diff, current_title=current_title or "(none)")
