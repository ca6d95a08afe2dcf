import pytest

from depcache.rules import is_exact_version, RangeRule, Pinning, PinningAdvisor
from conftest import manifest


class TestExactVersion:
    """Tests for recognizing a range that names one release."""

    @pytest.mark.parametrize("raw", ["1.2.3", "=1.2.3", "v1.2.3", " 1.2.3 ", "1.0.0-beta.1", "1.0.0+build.5"])
    def test_exact(self, raw):
        assert is_exact_version(raw)

    @pytest.mark.parametrize("raw", ["1.2", "^1.2.3", "01.2.3", "1.2.x", "latest", ""])
    def test_not_exact(self, raw):
        assert not is_exact_version(raw)


class TestRangeRule:
    """Tests for classifying how tightly a range pins a dependency."""

    @pytest.mark.parametrize("range_str, expected", [
        ("1.2.3", Pinning.EXACT),
        ("=1.2.3", Pinning.EXACT),
        ("^1.2.3", Pinning.BOUNDED),
        ("~1.2.3", Pinning.BOUNDED),
        ("1.x", Pinning.BOUNDED),
        ("1.2", Pinning.BOUNDED),
        (">=1.0.0 <2.0.0", Pinning.BOUNDED),
        ("1.0.0 - 2.0.0", Pinning.BOUNDED),
        ("^1.0.0 || ^2.0.0", Pinning.BOUNDED),
        ("*", Pinning.LOOSE),
        ("", Pinning.LOOSE),
        ("latest", Pinning.LOOSE),
        (">=1.0.0", Pinning.LOOSE),
        (">0.10", Pinning.LOOSE),
        ("^1.0.0 || *", Pinning.LOOSE),
        ("github:user/repo", Pinning.EXTERNAL),
        ("user/repo#v1", Pinning.EXTERNAL),
        ("file:../lib", Pinning.EXTERNAL),
        ("npm:other@^1.0.0", Pinning.EXTERNAL),
    ])
    def test_classification(self, range_str, expected):
        assert RangeRule(range_str).pinning is expected

    def test_is_loose(self):
        assert RangeRule(">= 0.8").is_loose
        assert not RangeRule("~0.10.0").is_loose


class TestPinningAdvisor:
    """Tests for manifest advisories."""

    def test_missing_engine_and_loose_dependencies(self, fs, build_dir, report):
        (build_dir / "package.json").write_text(
            manifest({"express": "*", "lodash": "^4.17.0", "left-pad": ">=1.0.0"})
        )
        count = PinningAdvisor(fs).check(build_dir, report)

        assert count == 3
        assert [a.subject for a in report.advisories] == ["engines.node", "express", "left-pad"]

    def test_loose_engine_range(self, fs, build_dir, report):
        (build_dir / "package.json").write_text(manifest({}, engines={"node": ">=0.10"}))
        PinningAdvisor(fs).check(build_dir, report)
        assert len(report.advisories) == 1
        assert "no upper bound" in report.advisories[0].message

    def test_well_pinned_manifest_has_no_advisories(self, fs, build_dir, report):
        (build_dir / "package.json").write_text(manifest({"express": "4.18.2"}, engines={"node": "18.x"}))
        assert PinningAdvisor(fs).check(build_dir, report) == 0

    @pytest.mark.parametrize("content", [None, "{not json", "[]"])
    def test_unreadable_manifest_is_ignored(self, fs, build_dir, report, content):
        if content is not None:
            (build_dir / "package.json").write_text(content)
        assert PinningAdvisor(fs).check(build_dir, report) == 0
        assert report.warnings == []
