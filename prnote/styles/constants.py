"""Constants for prnote styles module.

Contains:
- CONVENTIONAL_TYPES: Valid conventional commit types
- TYPE_PRECEDENCE: Order used to break scoring ties
- file classification tables used by type inference
"""

# Valid conventional commit types
CONVENTIONAL_TYPES = [
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
]

# Earlier types win ties in type inference
TYPE_PRECEDENCE = [
    "feat",
    "fix",
    "perf",
    "refactor",
    "docs",
    "test",
    "ci",
    "build",
    "style",
    "chore",
]

DEFAULT_TYPE = "chore"

# Points a single changed file adds to its category
FILE_WEIGHTS = {
    "ci": 3.0,
    "build": 2.0,
    "docs": 1.0,
    "test": 1.0,
    "style": 1.0,
    "feat": 2.0,  # general source code
}

# A keyword in the title or AI subject outweighs the same keyword in the diff
TITLE_KEYWORD_WEIGHT = 3.0
DIFF_KEYWORD_WEIGHT = 0.5
DIFF_KEYWORD_CAP = 2.0

WORKSPACE_BONUS = 6.0
NEW_FILES_FOR_WORKSPACE = 5

KEYWORDS = {
    "fix": ["fix", "fixes", "fixed", "bug", "bugfix", "error", "crash", "hotfix", "patch"],
    "refactor": ["refactor", "refactors", "refactored", "refactoring", "cleanup", "clean up", "rename", "renamed", "restructure"],
    "perf": ["perf", "performance", "optimize", "optimise", "optimized", "optimization", "faster", "speed up", "speedup"],
}

CI_PATTERNS = [
    ".github/workflows/",
    ".github/actions/",
    ".gitlab-ci",
    ".circleci/",
    ".travis",
    ".buildkite/",
    "jenkinsfile",
    "azure-pipelines",
]

BUILD_FILES = {
    "package.json", "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
    "pyproject.toml", "poetry.lock", "setup.py", "setup.cfg", "uv.lock",
    "makefile", "cmakelists.txt", "cargo.toml", "cargo.lock",
    "go.mod", "go.sum", "gemfile", "gemfile.lock",
    "dockerfile", "docker-compose.yml", "docker-compose.yaml",
    "build.gradle", "build.gradle.kts", "pom.xml",
    "tsconfig.json", "webpack.config.js", "vite.config.ts", "vite.config.js",
}

BUILD_PREFIXES = ("requirements", "dockerfile.")

STYLE_EXTENSIONS = {".css", ".scss", ".sass", ".less", ".styl"}

SOURCE_EXTENSIONS = {
    ".py", ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".go", ".rs",
    ".java", ".kt", ".kts", ".scala", ".rb", ".php", ".c", ".h", ".cc",
    ".cpp", ".hpp", ".cs", ".swift", ".m", ".mm", ".dart", ".ex", ".exs",
    ".erl", ".clj", ".lua", ".vue", ".svelte", ".sh", ".sql", ".html",
}

WORKSPACE_MANIFESTS = {
    "pnpm-workspace.yaml",
    "turbo.json",
    "nx.json",
    "lerna.json",
    "rush.json",
    "go.work",
}
