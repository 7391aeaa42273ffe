"""File vocabularies — names, extensions and directories the scorer recognises."""

from __future__ import annotations

ENTRY_POINT_NAMES: frozenset[str] = frozenset(
    {
        "main.go", "main.py", "main.rs", "main.ts", "main.js",
        "app.go", "app.py", "app.ts", "app.js",
        "index.ts", "index.js",
        "server.go", "server.py", "server.ts", "server.js",
        "cmd.go",
    }
)

CONFIG_NAMES: frozenset[str] = frozenset(
    {
        "go.mod", "go.sum",
        "package.json", "tsconfig.json",
        "cargo.toml",
        "requirements.txt", "pyproject.toml", "setup.cfg",
        "pom.xml", "build.gradle", "gemfile",
        "dockerfile", "docker-compose.yml", "docker-compose.yaml",
        "makefile",
        ".env.example",
        "config.yaml", "config.yml", "config.json",
    }
)

# Longest matching name wins when several appear in one path.
IMPORTANT_DIRS: dict[str, int] = {
    "cmd": 85,
    "internal": 80,
    "pkg": 75,
    "src": 75,
    "lib": 70,
    "api": 80,
    "handlers": 85,
    "controllers": 85,
    "services": 80,
    "models": 80,
    "routes": 75,
    "middleware": 75,
    "utils": 60,
    "helpers": 60,
    "core": 80,
}

VENDOR_DIRS: frozenset[str] = frozenset(
    {"vendor", "node_modules", "third_party", "bower_components"}
)

EXTENSION_BOOST: dict[str, int] = {
    ".go": 20,
    ".py": 20,
    ".rs": 20,
    ".ts": 18,
    ".tsx": 18,
    ".java": 18,
    ".js": 15,
    ".jsx": 15,
    ".c": 15,
    ".cpp": 15,
    ".rb": 15,
    ".php": 15,
    ".sql": 12,
    ".h": 10,
}

CODE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".go", ".py", ".js", ".ts", ".jsx", ".tsx",
        ".rs", ".java", ".c", ".cpp", ".h", ".hpp",
        ".rb", ".php", ".swift", ".kt", ".scala",
        ".cs", ".vb", ".fs", ".clj", ".ex", ".exs",
        ".hs", ".ml", ".sql", ".sh", ".bash",
        ".yaml", ".yml", ".json", ".toml", ".xml",
    }
)

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".go": "Go",
    ".py": "Python",
    ".js": "JavaScript",
    ".ts": "TypeScript",
    ".jsx": "React",
    ".tsx": "React TypeScript",
    ".rs": "Rust",
    ".java": "Java",
    ".c": "C",
    ".cpp": "C++",
    ".h": "C/C++ Header",
    ".rb": "Ruby",
    ".php": "PHP",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".sql": "SQL",
    ".sh": "Shell",
    ".yaml": "YAML",
    ".yml": "YAML",
    ".json": "JSON",
}

TEST_MARKERS: tuple[str, ...] = ("_test.", ".test.", ".spec.")


def filename(path: str) -> str:
    return path.rsplit("/", maxsplit=1)[-1]


def directory_segments(path: str) -> list[str]:
    """Return the directory components of *path* (the filename excluded)."""
    return path.split("/")[:-1]


def extension(path: str) -> str:
    """Return the lower-cased extension of *path*, including the dot."""
    name = filename(path)
    dot = name.rfind(".")
    if dot <= 0:
        return ""
    return name[dot:].lower()


def is_vendored(path: str) -> bool:
    """Return *True* if any directory segment is a vendored dependency tree."""
    return any(part.lower() in VENDOR_DIRS for part in directory_segments(path))


def is_test_file(path: str) -> bool:
    name = filename(path).lower()
    return name.startswith("test_") or any(marker in name for marker in TEST_MARKERS)


def is_code_file(path: str) -> bool:
    return extension(path) in CODE_EXTENSIONS


def detect_language(path: str) -> str | None:
    """Map a file extension to a language name, or ``None`` if unknown."""
    return LANGUAGE_BY_EXTENSION.get(extension(path))
