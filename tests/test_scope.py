"""Tests for prnote.scope module."""

import pytest

from prnote.scope import (
    ScopeConfig,
    infer_scope,
    is_docs_file,
    is_test_file,
    load_scope_config_from_dict,
    normalize_path,
)


class TestNormalizePath:
    """Tests for normalize_path function."""

    def test_backslashes_and_slashes(self):
        """Test Windows separators and surrounding slashes."""
        assert normalize_path("\\src\\cache\\store.ts/") == "src/cache/store.ts"


class TestFileKinds:
    """Tests for is_docs_file and is_test_file."""

    @pytest.mark.parametrize("path", ["README.md", "docs/setup.txt", "guide/intro.rst", "wiki/page.html"])
    def test_docs_files(self, path):
        """Test documentation detection."""
        assert is_docs_file(path)

    @pytest.mark.parametrize("path", ["src/app.py", "docs"])
    def test_not_docs_files(self, path):
        """Test non-documentation paths."""
        assert not is_docs_file(path)

    @pytest.mark.parametrize(
        "path",
        ["tests/test_app.py", "conftest.py", "src/app.test.ts", "pkg/store_test.go", "__tests__/a.js", "e2e/login.ts"],
    )
    def test_test_files(self, path):
        """Test test-file detection."""
        assert is_test_file(path)

    def test_source_is_not_test(self):
        """Test that a plain source file is not a test."""
        assert not is_test_file("src/contest.py")


class TestInferScope:
    """Tests for infer_scope function."""

    def test_single_area(self):
        """Test files under one source directory."""
        result = infer_scope(["src/cache/store.ts", "src/cache/index.ts"])

        assert result.scope == "cache"
        assert result.confidence == 1.0

    def test_plain_top_level_directory(self):
        """Test a top-level directory without a generic root."""
        assert infer_scope(["api/routes.py", "api/models.py"]).scope == "api"

    def test_root_files_use_repo_scope(self):
        """Test that root-level files map to the repo scope."""
        assert infer_scope(["README.md"]).scope == "repo"
        assert infer_scope(["README.md", "LICENSE"]).scope == "repo"

    def test_ci_directory(self):
        """Test CI configuration directories."""
        assert infer_scope([".github/workflows/ci.yml", ".github/actions/setup/action.yml"]).scope == "ci"

    def test_monorepo_children(self):
        """Test that separate apps in one container are too broad."""
        result = infer_scope(["apps/web/page.tsx", "apps/api/server.ts"])

        assert result.scope == "monorepo"
        assert "apps/" in result.reason

    def test_container_children_without_low_dominance(self):
        """Test that two apps are too broad even when one covers most files."""
        result = infer_scope(["apps/web/a.ts", "apps/api/b.ts", "apps/web/c.ts"])

        assert result.scope == "monorepo"
        assert "apps/" in result.reason
        assert result.candidates[0] == ("web", 2)

    @pytest.mark.parametrize(
        "files,config",
        [
            (["README.md", "LICENSE", "src/app.py"], None),
            ([".github/workflows/ci.yml", ".github/dependabot.yml"], None),
            (["apps/web/a.ts", "apps/api/b.ts", "apps/web/c.ts"], None),
            (["a/x.py", "b/x.py", "c/x.py", "d/x.py", "README.md"], None),
            (["src/cache/store.ts", "src/cache/lru.ts"], ScopeConfig(mapping={"src/cache": "caching"})),
        ],
    )
    def test_candidate_counts_cover_every_file(self, files, config):
        """Test that candidate counts add up to the number of files."""
        result = infer_scope(files, config)

        assert sum(count for _, count in result.candidates) == len(files)

    def test_single_monorepo_child(self):
        """Test that a single app names the scope."""
        assert infer_scope(["apps/web/page.tsx", "apps/web/layout.tsx"]).scope == "web"

    @pytest.mark.parametrize(
        "files",
        [
            ["apps/web/page.tsx", "packages/ui/button.tsx"],
            ["backend/server.py", "frontend/app.ts"],
        ],
    )
    def test_conflicting_areas(self, files):
        """Test areas that are never summarized by one scope."""
        result = infer_scope(files)

        assert result.scope == "monorepo"
        assert result.reason.startswith("Both")

    def test_spread_out_change(self):
        """Test that no dominant group yields the monorepo scope."""
        result = infer_scope(["a/x.py", "b/x.py", "c/x.py", "d/x.py"])

        assert result.scope == "monorepo"
        assert "covers only" in result.reason

    def test_too_many_top_level_areas(self):
        """Test that touching many areas is too broad even with a leader."""
        files = ["core/a.py", "core/b.py", "core/c.py", "core/d.py", "web/x.ts", "cli/y.py", "docs/z.md"]
        assert infer_scope(files).scope == "monorepo"

    def test_dominant_group(self):
        """Test that a dominant group wins over a stray file."""
        result = infer_scope(["api/a.py", "api/b.py", "api/c.py", "web/x.ts"])

        assert result.scope == "api"
        assert result.confidence == 0.75
        assert result.candidates[0] == ("api", 3)

    def test_mapping_wins(self):
        """Test explicit mapping when it covers every file."""
        config = ScopeConfig(mapping={"src/cache": "caching"})
        result = infer_scope(["src/cache/store.ts", "src/cache/lru.ts"], config)

        assert result.scope == "caching"
        assert "mapping" in result.reason

    def test_partial_mapping_falls_back(self):
        """Test that a mapping covering only some files is ignored."""
        config = ScopeConfig(mapping={"src/cache": "caching"})
        assert infer_scope(["src/cache/store.ts", "src/cache/lru.ts", "src/cache/a.ts", "README.md"], config).scope == "cache"

    def test_empty_files(self):
        """Test that no files gives no scope."""
        result = infer_scope([])

        assert result.scope is None
        assert result.reason == "No files to analyze"

    def test_disabled(self):
        """Test that disabled inference gives no scope."""
        assert infer_scope(["src/cache/store.ts"], ScopeConfig(enabled=False)).scope is None


class TestLoadScopeConfig:
    """Tests for load_scope_config_from_dict function."""

    def test_defaults(self):
        """Test that a missing section gives the defaults."""
        config = load_scope_config_from_dict({})

        assert config.enabled is True
        assert "apps" in config.monorepo_roots
        assert ".github" in config.ci_directories

    def test_overrides(self):
        """Test values read from the scope section."""
        config = load_scope_config_from_dict(
            {"scope": {"enabled": False, "mapping": {"lib/": "core"}, "monorepo_roots": ["crates"]}}
        )

        assert config.enabled is False
        assert config.mapping == {"lib/": "core"}
        assert config.monorepo_roots == ["crates"]
