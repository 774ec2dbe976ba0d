"""LLM prompt templates for pull request generation.

- system: System instructions for description and title calls
- description: Markdown PR description prompt
- title: Single-line PR title prompt
"""

from prnote.llm.prompts.system import SYSTEM_PROMPT, TITLE_SYSTEM_PROMPT
from prnote.llm.prompts.description import (
    USER_PROMPT_TEMPLATE_DESCRIPTION,
    build_description_prompt,
)
from prnote.llm.prompts.title import (
    USER_PROMPT_TEMPLATE_TITLE,
    build_title_prompt,
)


__all__ = [
    "SYSTEM_PROMPT",
    "TITLE_SYSTEM_PROMPT",
    "USER_PROMPT_TEMPLATE_DESCRIPTION",
    "USER_PROMPT_TEMPLATE_TITLE",
    "build_description_prompt",
    "build_title_prompt",
]
