"""
Unit tests for FileScanner discovery and reading.
"""

from pathlib import Path

import pytest

from guardian.core.file_scanner import FileScanner
from guardian.core.fingerprint import fingerprint


def write(root: Path, rel_path: str, content: str = "const x = 1;\n") -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def relative_names(scanner: FileScanner, root: Path) -> list[str]:
    return sorted(p.relative_to(root.resolve()).as_posix() for p in scanner.discover(root))


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    write(tmp_path, "index.js")
    write(tmp_path, "src/app.ts")
    write(tmp_path, "src/lib/util.jsx")
    write(tmp_path, "src/vendor.min.js")
    write(tmp_path, "node_modules/pkg/index.js")
    write(tmp_path, "dist/bundle.js")
    write(tmp_path, "README.md", "# readme")
    write(tmp_path, ".env", "API_KEY=abc")
    write(tmp_path, "config/settings.yaml", "debug: true")
    return tmp_path


class TestDiscover:
    def test_default_excludes(self, workspace):
        names = relative_names(FileScanner(), workspace)

        assert "node_modules/pkg/index.js" not in names
        assert "dist/bundle.js" not in names
        assert "src/vendor.min.js" not in names
        assert "README.md" in names

    def test_include_patterns_with_braces(self, workspace):
        scanner = FileScanner(include_patterns=["**/*.{js,ts,jsx}", "**/.env"])

        assert relative_names(scanner, workspace) == [
            ".env",
            "index.js",
            "src/app.ts",
            "src/lib/util.jsx",
        ]

    def test_custom_exclude_replaces_defaults(self, workspace):
        scanner = FileScanner(include_patterns=["**/*.js"], exclude_patterns=["src/"])

        assert relative_names(scanner, workspace) == [
            "dist/bundle.js",
            "index.js",
            "node_modules/pkg/index.js",
        ]

    def test_size_cap(self, tmp_path):
        write(tmp_path, "small.js", "x" * 10)
        write(tmp_path, "large.js", "x" * 100)

        assert relative_names(FileScanner(max_file_size=50), tmp_path) == ["small.js"]

    @pytest.mark.parametrize(
        "depth, expected",
        [
            (0, ["index.js"]),
            (1, ["index.js", "src/app.ts"]),
            (None, ["index.js", "src/app.ts", "src/lib/util.jsx"]),
        ],
    )
    def test_depth_limit(self, workspace, depth, expected):
        scanner = FileScanner(include_patterns=["**/*.{js,ts,jsx}"], scan_depth=depth)

        assert relative_names(scanner, workspace) == expected

    def test_missing_root_yields_nothing(self, tmp_path):
        assert list(FileScanner().discover(tmp_path / "missing")) == []

    def test_pattern_setters(self, workspace):
        scanner = FileScanner()
        scanner.set_include_patterns(["**/*.md"])
        assert relative_names(scanner, workspace) == ["README.md"]

        scanner.set_include_patterns(["**/*.js"])
        scanner.set_exclude_patterns([])
        assert "node_modules/pkg/index.js" in relative_names(scanner, workspace)


class TestReadFile:
    def test_reads_content_and_fingerprint(self, tmp_path):
        path = write(tmp_path, "a.js", "eval(x);")

        scanned = FileScanner().read_file(path)

        assert scanned is not None
        assert scanned.path == path.resolve()
        assert scanned.content == "eval(x);"
        assert scanned.size_bytes == len("eval(x);")
        assert scanned.fingerprint == fingerprint("eval(x);")
        assert not scanned.is_blank

    def test_oversized_file_is_skipped(self, tmp_path):
        path = write(tmp_path, "a.js", "x" * 100)

        assert FileScanner(max_file_size=10).read_file(path) is None

    def test_binary_file_is_skipped(self, tmp_path):
        path = tmp_path / "blob.js"
        path.write_bytes(b"\xff\xfe\x00\x81")

        assert FileScanner().read_file(path) is None

    def test_missing_file_is_skipped(self, tmp_path):
        assert FileScanner().read_file(tmp_path / "gone.js") is None

    def test_blank_file(self, tmp_path):
        path = write(tmp_path, "blank.js", "  \n\t\n")

        scanned = FileScanner().read_file(path)
        assert scanned is not None and scanned.is_blank

    def test_scan_reads_every_eligible_file(self, workspace):
        scanner = FileScanner(include_patterns=["**/*.{js,ts}"])

        scanned = list(scanner.scan(workspace))

        assert {s.path.name for s in scanned} == {"index.js", "app.ts"}


class TestMatchesPatterns:
    def test_deleted_file_still_matches(self, tmp_path):
        scanner = FileScanner(include_patterns=["**/*.js"])

        assert scanner.matches_patterns(tmp_path / "src" / "gone.js", tmp_path)
        assert not scanner.matches_patterns(tmp_path / "src" / "gone.py", tmp_path)

    def test_outside_root(self, tmp_path):
        scanner = FileScanner()

        assert not scanner.matches_patterns(tmp_path.parent / "other.js", tmp_path)
        assert not scanner.matches_patterns(tmp_path, tmp_path)

    def test_excluded_directory(self, tmp_path):
        scanner = FileScanner(include_patterns=["**/*.js"])

        assert not scanner.matches_patterns(tmp_path / "node_modules" / "x" / "a.js", tmp_path)

    def test_depth_applies(self, tmp_path):
        scanner = FileScanner(scan_depth=0)

        assert scanner.matches_patterns(tmp_path / "a.js", tmp_path)
        assert not scanner.matches_patterns(tmp_path / "src" / "a.js", tmp_path)

    def test_is_eligible_checks_disk(self, tmp_path):
        scanner = FileScanner(include_patterns=["**/*.js"], max_file_size=10)
        small = write(tmp_path, "small.js", "x")
        large = write(tmp_path, "large.js", "x" * 50)

        assert scanner.is_eligible(small, tmp_path)
        assert not scanner.is_eligible(large, tmp_path)
        assert not scanner.is_eligible(tmp_path / "missing.js", tmp_path)
