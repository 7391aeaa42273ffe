"""Tests for the structure summary."""

from __future__ import annotations

from repo_analyzer.domain.entities import EntryKind, TreeEntry
from repo_analyzer.services.structure import build_code_structure, important_directories


class TestBuildCodeStructure:
    def test_counts(self, sample_entries):
        structure = build_code_structure(sample_entries)
        assert structure.total_files == 7
        assert structure.total_bytes == 5_620
        assert structure.directories == frozenset(
            {"cmd", "cmd/server", "internal", "internal/models", "vendor"}
        )
        assert "docs/logo.png" in structure.files
        assert dict(structure.language_counts) == {"Go": 4}

    def test_same_input_same_output(self, sample_entries):
        assert build_code_structure(sample_entries) == build_code_structure(
            list(sample_entries)
        )

    def test_empty_tree(self):
        structure = build_code_structure([])
        assert structure.total_files == 0
        assert structure.total_bytes == 0
        assert not structure.directories
        assert not structure.language_counts

    def test_mixed_languages(self):
        entries = [
            TreeEntry(path="app.py", kind=EntryKind.FILE, byte_size=10),
            TreeEntry(path="web/index.ts", kind=EntryKind.FILE, byte_size=20),
            TreeEntry(path="web/util.ts", kind=EntryKind.FILE, byte_size=30),
            TreeEntry(path="LICENSE", kind=EntryKind.FILE, byte_size=40),
        ]
        structure = build_code_structure(entries)
        assert dict(structure.language_counts) == {"Python": 1, "TypeScript": 2}
        assert structure.total_bytes == 100


class TestImportantDirectories:
    def test_filters_by_top_level_name(self):
        dirs = ["docs", "internal/models", "cmd", "vendor/x", "app/views", "assets"]
        assert important_directories(dirs) == ["app/views", "cmd", "internal/models"]

    def test_limit(self):
        dirs = [f"src/pkg{i:02d}" for i in range(20)]
        picked = important_directories(dirs, limit=3)
        assert picked == ["src/pkg00", "src/pkg01", "src/pkg02"]
