"""Conventional title synthesis for prnote.

Turns the model's free-form title into `type(scope): subject`.

This package provides:
- constants: CONVENTIONAL_TYPES, TYPE_PRECEDENCE and the scoring tables
- inference: classify_file, score_commit_types, infer_commit_type
- title: sanitize_title, parse_conventional_title, to_imperative,
         assemble_title, synthesize_title
"""

# Constants
from prnote.styles.constants import (
    CONVENTIONAL_TYPES,
    DEFAULT_TYPE,
    TYPE_PRECEDENCE,
)

# Inference utilities
from prnote.styles.inference import (
    classify_file,
    has_workspace_signal,
    infer_commit_type,
    score_commit_types,
)

# Title pipeline
from prnote.styles.title import (
    TitleComponents,
    assemble_title,
    parse_conventional_title,
    sanitize_title,
    synthesize_title,
    to_imperative,
)


__all__ = [
    # Constants
    "CONVENTIONAL_TYPES",
    "DEFAULT_TYPE",
    "TYPE_PRECEDENCE",
    # Inference
    "classify_file",
    "has_workspace_signal",
    "infer_commit_type",
    "score_commit_types",
    # Title
    "TitleComponents",
    "assemble_title",
    "parse_conventional_title",
    "sanitize_title",
    "synthesize_title",
    "to_imperative",
]
