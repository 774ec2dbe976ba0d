"""Shared test fixtures and configuration."""

import logging
import tempfile
from pathlib import Path

import pytest

from prnote.llm.base import GenerationRequest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_repo_root(temp_dir):
    """Create a mock git repository root directory."""
    # Create .git directory to simulate a git repo
    git_dir = temp_dir / ".git"
    git_dir.mkdir()
    return temp_dir


@pytest.fixture
def logger():
    """Logger used by orchestrator and updater tests."""
    return logging.getLogger("prnote.tests")


@pytest.fixture
def sample_request():
    """A plain generation request."""
    return GenerationRequest(
        prompt="Describe this diff",
        temperature=0.8,
        max_output_tokens=2048,
        model_name="model-a",
        system_instruction="You write PR descriptions.",
    )


@pytest.fixture
def sample_diff():
    """Sample pull request diff for testing."""
    return """diff --git a/src/cache/store.ts b/src/cache/store.ts
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/src/cache/store.ts
@@ -0,0 +1,5 @@
+export class Store {
+  get(key: string) {
+    return this.items[key];
+  }
+}
diff --git a/src/cache/index.ts b/src/cache/index.ts
index 1234567..abcdefg 100644
--- a/src/cache/index.ts
+++ b/src/cache/index.ts
@@ -1,2 +1,3 @@
 export * from "./lru";
+export * from "./store";
"""


@pytest.fixture(autouse=True)
def reset_prnote_logger():
    """Undo setup_logging so caplog keeps seeing prnote records."""
    yield
    prnote_logger = logging.getLogger("prnote")
    prnote_logger.handlers = []
    prnote_logger.propagate = True
    prnote_logger.setLevel(logging.NOTSET)
