"""Prompt template for the pull request description."""

USER_PROMPT_TEMPLATE_DESCRIPTION = """Instructions:
Please generate a Pull Request description for the provided diff, following these guidelines:
- Start with a subtitle "## What this PR does?".
- Format your response in Markdown.
- Exclude the PR title (e.g., "feat: xxx", "fix: xxx", "Refactor: xxx").
- Do not include the diff in the PR description.
- Provide a simple description of the changes.
- Avoid code snippets or images.
- Add some fun with emojis! Use only the following: 🚀🎉👍👏🔥. List changes using numbers, with a maximum of one emoji per item. Limit the total to 3 emojis. Example:
  1. Added a new feature👍
  2. Fixed a bug👏
  3. Major refactor🚀.
- Thank **{creator}** for the contribution! 🎉

Diff:
{diff}"""


def build_description_prompt(diff: str, creator: str) -> str:
    """Build the description prompt for a diff and its author."""
    return USER_PROMPT_TEMPLATE_DESCRIPTION.format(diff=diff, creator=creator or "the author")
