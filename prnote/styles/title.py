"""Pull request title synthesis.

Turns free-form AI output into a conventional title:

    <type>(<scope>): <subject>

Every step is a pure function; the same inputs always produce the same
title, and feeding a synthesized title back in returns it unchanged.
"""

import re
from dataclasses import dataclass
from typing import Optional

from prnote.config import MAX_TITLE_LENGTH
from prnote.scope import ScopeConfig, infer_scope
from prnote.styles.constants import CONVENTIONAL_TYPES
from prnote.styles.inference import infer_commit_type

_HEADING = re.compile(r"^#+\s*")
_SURROUNDING_QUOTES = re.compile(r"^[`'\"]+|[`'\"]+$")
_WHITESPACE = re.compile(r"\s+")
_TRAILING_PUNCTUATION = re.compile(r"[.!?]+$")
_RESIDUAL_PUNCTUATION = re.compile(r"[\s.,;:!?\-]+$")
_CONVENTIONAL = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^()]*)\))?(?P<breaking>!)?:\s*(?P<subject>.*)$"
)


@dataclass(frozen=True)
class TitleComponents:
    """The parts of a conventional title."""

    type: str
    scope: Optional[str]
    subject: str
    breaking: bool = False

    @property
    def prefix(self) -> str:
        scope = f"({self.scope})" if self.scope else ""
        bang = "!" if self.breaking else ""
        return f"{self.type}{scope}{bang}: "


# ============================================================
# IMPERATIVE MOOD
# ============================================================

_IMPERATIVE_VERBS = [
    "add", "adjust", "allow", "apply", "avoid", "bump", "change", "clean",
    "configure", "convert", "correct", "create", "delete", "deprecate",
    "disable", "document", "enable", "ensure", "expose", "extend", "extract",
    "fix", "generate", "handle", "implement", "improve", "include",
    "increase", "initialize", "integrate", "introduce", "merge", "migrate",
    "move", "optimize", "prevent", "reduce", "refactor", "release", "remove",
    "rename", "replace", "resolve", "restore", "restructure", "revert",
    "rework", "simplify", "support", "switch", "tweak", "update", "upgrade",
    "use", "validate",
]

# Verbs that double their final consonant before -ing/-ed
_DOUBLING_VERBS = {"drop", "format", "plan", "set", "ship", "split", "stop", "strip", "swap", "wrap"}

# Forms the regular rules would get wrong
_IRREGULAR_FORMS = {
    "made": "make", "makes": "make", "making": "make",
    "built": "build", "builds": "build", "building": "build",
    "wrote": "write", "writes": "write", "writing": "write",
    "rewrote": "rewrite", "rewrites": "rewrite", "rewriting": "rewrite",
    "split": "split", "splits": "split", "splitting": "split",
    "set": "set", "sets": "set", "setting": "set",
    "ran": "run", "runs": "run", "running": "run",
}


def _third_person(verb: str) -> str:
    if verb.endswith(("s", "x", "z", "ch", "sh")):
        return verb + "es"
    if verb.endswith("y") and verb[-2:-1] not in "aeiou":
        return verb[:-1] + "ies"
    return verb + "s"


def _gerund(verb: str) -> str:
    if verb in _DOUBLING_VERBS:
        return verb + verb[-1] + "ing"
    if verb.endswith("e") and not verb.endswith("ee"):
        return verb[:-1] + "ing"
    return verb + "ing"


def _past(verb: str) -> str:
    if verb in _DOUBLING_VERBS:
        return verb + verb[-1] + "ed"
    if verb.endswith("e"):
        return verb + "d"
    if verb.endswith("y") and verb[-2:-1] not in "aeiou":
        return verb[:-1] + "ied"
    return verb + "ed"


def _build_lemma_table() -> dict[str, str]:
    table = {}
    for verb in list(_IMPERATIVE_VERBS) + sorted(_DOUBLING_VERBS):
        for form in (_third_person(verb), _gerund(verb), _past(verb)):
            table[form] = verb
    table.update(_IRREGULAR_FORMS)
    return table


VERB_LEMMAS = _build_lemma_table()


def to_imperative(subject: str) -> str:
    """Rewrite the subject's leading verb in imperative mood.

    "Adds caching" -> "add caching", "fixing typo" -> "fix typo". Unknown
    leading words are kept as written, except that a capitalized ordinary
    word is lowercased to match conventional commit style.

    Args:
        subject: The title subject.

    Returns:
        The subject with its first word normalized.
    """
    subject = subject.strip()
    if not subject:
        return subject

    first, _, rest = subject.partition(" ")
    lemma = VERB_LEMMAS.get(first.lower())
    if lemma:
        first = lemma
    elif len(first) > 1 and first[0].isupper() and first[1:].islower():
        first = first.lower()
    elif len(first) == 1:
        first = first.lower()

    return f"{first} {rest}".strip() if rest else first


# ============================================================
# PIPELINE STEPS
# ============================================================


def sanitize_title(raw_title: str) -> str:
    """Clean raw AI output into a single title line.

    Strips heading markers, surrounding quotes and backticks, collapses
    whitespace, strips trailing punctuation and caps the length.

    Args:
        raw_title: Text returned by the model.

    Returns:
        The sanitized title, at most MAX_TITLE_LENGTH characters.
    """
    lines = [line for line in (raw_title or "").strip().splitlines() if line.strip()]
    cleaned = lines[0] if lines else ""
    cleaned = _HEADING.sub("", cleaned.strip())
    cleaned = _SURROUNDING_QUOTES.sub("", cleaned).strip()
    cleaned = _WHITESPACE.sub(" ", cleaned)
    cleaned = _TRAILING_PUNCTUATION.sub("", cleaned)
    if len(cleaned) > MAX_TITLE_LENGTH:
        cleaned = cleaned[:MAX_TITLE_LENGTH].strip()
    return cleaned


def parse_conventional_title(title: str) -> Optional[TitleComponents]:
    """Parse "type(scope): subject" when type is a known conventional type.

    Args:
        title: A sanitized title.

    Returns:
        The parsed components, or None if the title is not conventional.
    """
    match = _CONVENTIONAL.match(title.strip())
    if not match:
        return None

    commit_type = match.group("type").lower()
    if commit_type not in CONVENTIONAL_TYPES:
        return None

    scope = (match.group("scope") or "").strip() or None
    return TitleComponents(
        type=commit_type,
        scope=scope,
        subject=match.group("subject").strip(),
        breaking=bool(match.group("breaking")),
    )


def _truncate_subject(subject: str, budget: int) -> str:
    if len(subject) <= budget:
        return subject
    cut = subject[:budget]
    # Prefer a word boundary when the cut lands inside a word
    if subject[budget] != " " and " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut


def assemble_title(components: TitleComponents) -> str:
    """Render components as a title of at most MAX_TITLE_LENGTH characters.

    Only the subject is truncated, so a long prefix shrinks the subject
    budget. The scope is dropped only when the prefix alone leaves no room
    for a subject.

    Args:
        components: Type, scope and subject.

    Returns:
        The final title.
    """
    if len(components.prefix) >= MAX_TITLE_LENGTH:
        components = TitleComponents(components.type, None, components.subject, components.breaking)

    subject = _RESIDUAL_PUNCTUATION.sub("", components.subject.strip())
    if not subject:
        subject = f"update {components.scope or 'project'}"

    budget = MAX_TITLE_LENGTH - len(components.prefix)
    subject = _RESIDUAL_PUNCTUATION.sub("", _truncate_subject(subject, budget))
    return f"{components.prefix}{subject}"


def synthesize_title(
    raw_title: str,
    diff_text: str,
    changed_files: list[str],
    current_title: str = "",
    scope_config: Optional[ScopeConfig] = None,
) -> str:
    """Build the final conventional title from raw AI output.

    Args:
        raw_title: Title text returned by the model.
        diff_text: The unified diff of the pull request.
        changed_files: Changed file paths.
        current_title: The pull request's current title.
        scope_config: Scope inference configuration.

    Returns:
        A "type(scope): subject" title of at most MAX_TITLE_LENGTH characters.
    """
    sanitized = sanitize_title(raw_title)
    parsed = parse_conventional_title(sanitized)

    commit_type = parsed.type if parsed else None
    scope = parsed.scope if parsed else None
    subject = parsed.subject if parsed else sanitized
    breaking = parsed.breaking if parsed else False

    if commit_type is None:
        commit_type = infer_commit_type(diff_text, changed_files, current_title, subject)
    if scope is None:
        scope = infer_scope(changed_files, scope_config).scope

    return assemble_title(
        TitleComponents(
            type=commit_type,
            scope=scope,
            subject=to_imperative(subject),
            breaking=breaking,
        )
    )
