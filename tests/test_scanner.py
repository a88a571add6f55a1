"""Tests for the reference scanner."""

import os

import pytest

from aiscript.scanning import scanner as scanner_module
from aiscript.scanning.scanner import ReferenceScanner, matches_glob, reference_pattern


class TestReferencePattern:
    """Test which references are recognised."""

    def test_extracts_names_in_order(self):
        """Test names are returned left to right with duplicates kept."""
        scanner = ReferenceScanner()
        content = "<AIC.Header /><AIC.Footer title='x' /><AIC.Header />"
        assert scanner.extract_names(content) == ["Header", "Footer", "Header"]

    def test_requires_uppercase_first_letter(self):
        """Test lowercase and bare references are ignored."""
        scanner = ReferenceScanner()
        assert scanner.extract_names("AIC.helper(); AIC. ; AIC.Button2") == ["Button2"]

    def test_ignores_longer_identifiers(self):
        """Test the namespace must not be part of a larger identifier."""
        scanner = ReferenceScanner()
        assert scanner.extract_names("XAIC.Foo MY_AIC.Bar $AIC.Baz") == []

    def test_member_access_is_allowed(self):
        """Test window.AIC.Foo still counts as a reference."""
        assert reference_pattern("AIC").findall("window.AIC.Foo") == ["Foo"]

    def test_custom_namespace(self):
        """Test a configurable namespace."""
        scanner = ReferenceScanner(namespace="Gen")
        assert scanner.extract_names("<Gen.Card /> <AIC.Card />") == ["Card"]


class TestScan:
    """Test scanning a project tree."""

    def test_first_seen_file_wins(self, project):
        """Test the first file in scan order is kept for a component."""
        first = project("src/a.tsx", "// sparse\n<AIC.Foo />")
        project("src/b.tsx", "// much richer usage context\n<AIC.Foo label='x' onClick={go} />")

        usages = ReferenceScanner().scan(project.root)

        assert list(usages) == ["Foo"]
        assert usages["Foo"].source_file == first.resolve()

    def test_discovery_order(self, project):
        """Test map order follows file order, then match order within a file."""
        project("src/a.jsx", "<AIC.Zeta /><AIC.Alpha />")
        project("src/b.jsx", "<AIC.Beta /><AIC.Alpha />")

        usages = ReferenceScanner().scan(project.root)

        assert list(usages) == ["Zeta", "Alpha", "Beta"]

    def test_empty_tree(self, project):
        """Test a tree without references gives an empty map."""
        project("src/App.tsx", "export const App = () => <div />;")
        assert ReferenceScanner().scan(project.root) == {}

    def test_skips_dependency_and_output_dirs(self, project):
        """Test node_modules and the output directory are never scanned."""
        project("node_modules/lib/index.js", "AIC.FromDependency")
        project("src/aiscript/index.ts", "import Old from './Old.tsx';\nexport const AIC = { Old };\nAIC.Old")
        project("src/App.tsx", "<AIC.Real />")

        usages = ReferenceScanner().scan(project.root)

        assert list(usages) == ["Real"]

    def test_output_dir_excluded_by_path(self, project):
        """Test only the configured output directory is skipped, not every directory with its name."""
        project("src/components/App.tsx", "<AIC.Card />")
        project("generated/components/Old.tsx", "export const x = AIC.Old;")

        usages = ReferenceScanner(output_dir=project.root / "generated" / "components").scan(project.root)

        assert list(usages) == ["Card"]

    def test_excluded_dirs_not_walked(self, project, monkeypatch):
        """Test the walk never descends into node_modules or .git."""
        project("node_modules/lib/deep/index.js", "AIC.FromDependency")
        project(".git/hooks/pre-commit.js", "AIC.Hook")
        project("src/App.tsx", "<AIC.Real />")
        visited = []
        real_walk = os.walk

        def recording_walk(top, *args, **kwargs):
            for dirpath, dirnames, filenames in real_walk(top, *args, **kwargs):
                visited.append(dirpath)
                yield dirpath, dirnames, filenames

        monkeypatch.setattr(scanner_module.os, "walk", recording_walk)

        usages = ReferenceScanner().scan(project.root)

        assert list(usages) == ["Real"]
        assert not any("node_modules" in path or ".git" in path for path in visited)

    def test_root_level_files_match_recursive_globs(self, project):
        """Test **/*.tsx also matches a file directly under the root."""
        project("App.tsx", "<AIC.Top />")
        assert list(ReferenceScanner().scan(project.root)) == ["Top"]

    def test_exclude_patterns(self, project):
        """Test user exclude globs on relative paths."""
        project("src/App.tsx", "<AIC.Kept />")
        project("src/stories/App.stories.tsx", "<AIC.Story />")

        usages = ReferenceScanner(exclude_patterns=["src/stories/*"]).scan(project.root)

        assert list(usages) == ["Kept"]

    def test_include_patterns(self, project):
        """Test only files matching include globs are read."""
        project("src/App.tsx", "<AIC.Tsx />")
        project("src/Page.vue", "<AIC.Vue />")

        usages = ReferenceScanner(include_patterns=["**/*.vue"]).scan(project.root)

        assert list(usages) == ["Vue"]

    def test_unreadable_file_is_skipped(self, project):
        """Test a file that is not valid UTF-8 does not abort the scan."""
        bad = project.root / "src" / "a.js"
        bad.write_bytes(b"\xff\xfe\x00AIC.Broken")
        project("src/b.js", "<AIC.Fine />")

        scanner = ReferenceScanner()
        usages = scanner.scan(project.root)

        assert list(usages) == ["Fine"]
        assert len(scanner.errors) == 1
        assert scanner.errors[0]["type"] == "UnicodeDecodeError"

    def test_root_must_be_directory(self, tmp_path):
        """Test scanning a missing directory raises ValueError."""
        with pytest.raises(ValueError):
            ReferenceScanner().scan(tmp_path / "missing")


class TestMatchesGlob:
    """Test include glob matching on relative paths."""

    def test_recursive_pattern(self):
        assert matches_glob("src/deep/App.tsx", "**/*.tsx")
        assert matches_glob("App.tsx", "**/*.tsx")
        assert not matches_glob("src/App.ts", "**/*.tsx")

    def test_anchored_pattern(self):
        assert matches_glob("src/App.vue", "src/*.vue")
        assert not matches_glob("lib/App.vue", "src/*.vue")
