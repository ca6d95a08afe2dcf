import os
import signal

import pytest

from depcache.config import Config
from depcache.constants import CacheMode
from depcache.exceptions import InstallError, BuildStepError, DepCacheIOError
from depcache.pipeline import CachePipeline, terminate_on_signals
from depcache.tools import BuildTool
from conftest import FakePackageManager, write_tree, read_tree, manifest


class FakeBuildTool(BuildTool):
    """Records the build step instead of running gulp."""

    def __init__(self, fs, exit_code=0):
        super().__init__(fs, "fake-gulp")
        self.exit_code = exit_code
        self.envs = []

    def run(self, root, env=None):
        if self.detect(root) is None:
            return False
        self.envs.append(dict(env or {}))
        if self.exit_code:
            raise BuildStepError("fake-gulp build failed", exit_code=self.exit_code)
        return True


@pytest.fixture
def make_pipeline(fs, build_dir, cache_dir, tmp_path):
    """Factory for a pipeline wired to fake collaborators."""
    def _make(mode=CacheMode.COPY, pm=None, tool=None, env_file=None, **kwargs):
        config = Config(str(build_dir), str(cache_dir), env_file=env_file, fs=fs, mode=mode.value, environ={})
        return CachePipeline(
            config,
            package_manager=pm or FakePackageManager(),
            build_tool=tool or FakeBuildTool(fs),
            home=tmp_path / "home",
            **kwargs,
        )
    return _make


class TestCachedBuild:
    """End-to-end scenarios against a real temporary filesystem."""

    @pytest.mark.parametrize("mode", [CacheMode.LINK, CacheMode.COPY])
    def test_restore_happens_before_install(self, make_pipeline, build_dir, cache_dir, mode):
        write_tree(cache_dir, {"node_modules/a/index.js": "cached"})
        write_tree(build_dir, {"package.json": manifest({"a": "1.0.0"})})
        seen = {}

        def on_install(cwd):
            seen["content"] = (cwd / "node_modules" / "a" / "index.js").read_text()
            seen["linked"] = (cwd / "node_modules").is_symlink()

        pm = FakePackageManager(on_install=on_install)
        report = make_pipeline(mode, pm=pm).run()

        assert seen == {"content": "cached", "linked": mode is CacheMode.LINK}
        assert pm.ops == ["prune", "install"]
        assert report.restored == ["node_modules"]
        assert report.installed is True
        assert report.mode == mode.value

    def test_committed_directory_is_rebuilt_not_restored(self, make_pipeline, build_dir, cache_dir):
        write_tree(cache_dir, {"node_modules/a/index.js": "stale", "web/node_modules/b/index.js": "b"})
        write_tree(build_dir, {
            "package.json": manifest({"a": "1.0.0"}),
            "node_modules/a/index.js": "committed",
            "web/package.json": manifest({"b": "1.0.0"}),
        })
        pm = FakePackageManager()

        report = make_pipeline(pm=pm).run()

        assert report.rebuilt == ["node_modules"]
        assert report.restored == ["web/node_modules"]
        assert pm.cwds("rebuild") == [build_dir]
        assert pm.cwds("prune") == [build_dir / "web"]
        assert (build_dir / "node_modules" / "a" / "index.js").read_text() == "committed"
        assert (cache_dir / "node_modules" / "a" / "index.js").read_text() == "committed"

    def test_copy_mode_round_trip_is_identical(self, make_pipeline, fs, build_dir, cache_dir, tmp_path):
        def install(cwd):
            write_tree(cwd, {"node_modules/a/index.js": "a", "node_modules/a/lib/util.js": "u"})

        write_tree(build_dir, {"package.json": manifest({"a": "1.0.0"})})
        make_pipeline(pm=FakePackageManager(on_install=install)).run()

        second = tmp_path / "second"
        write_tree(second, {"package.json": manifest({"a": "1.0.0"})})
        seen = {}
        config = Config(str(second), str(cache_dir), fs=fs, mode="copy", environ={})
        pm = FakePackageManager(on_install=lambda cwd: seen.update(read_tree(cwd / "node_modules")))
        CachePipeline(config, package_manager=pm, build_tool=FakeBuildTool(fs), home=tmp_path / "home").run()

        assert seen == read_tree(build_dir / "node_modules")

    def test_new_directories_created_by_install_are_cached(self, make_pipeline, build_dir, cache_dir):
        write_tree(build_dir, {"package.json": manifest(), "web/package.json": manifest()})
        pm = FakePackageManager(on_install=lambda cwd: write_tree(cwd, {"web/node_modules/x/i.js": "x"}))

        report = make_pipeline(pm=pm).run()

        assert [(o.path, o.action) for o in report.synced] == [("web/node_modules", "mirrored")]
        assert read_tree(cache_dir / "web" / "node_modules") == {"x/i.js": "x"}

    def test_temp_dir_is_exported_and_removed(self, make_pipeline, build_dir):
        write_tree(build_dir, {"package.json": manifest()})
        pm = FakePackageManager(on_install=lambda cwd: None)

        pipeline = make_pipeline(pm=pm)
        pipeline.run()

        _, _, env = pm.calls[-1]
        assert env["TMPDIR"] == str(pipeline.temp_dir)
        assert not pipeline.temp_dir.exists()

    def test_install_failure_removes_temp_dir_and_skips_sync(self, make_pipeline, build_dir, cache_dir):
        write_tree(build_dir, {"package.json": manifest()})
        pm = FakePackageManager(
            install_code=7,
            on_install=lambda cwd: write_tree(cwd, {"node_modules/x/i.js": "x"}),
        )
        pipeline = make_pipeline(pm=pm)

        with pytest.raises(InstallError) as excinfo:
            pipeline.run()

        assert excinfo.value.exit_code == 7
        assert not pipeline.temp_dir.exists()
        assert not (cache_dir / "node_modules").exists()

    def test_temp_dir_cleanup_failure_keeps_install_exit_code(self, make_pipeline, fs, build_dir, monkeypatch):
        write_tree(build_dir, {"package.json": manifest()})
        real_remove = fs.remove

        def remove(path):
            if path.name.startswith("depcache-"):
                raise DepCacheIOError("device busy")
            real_remove(path)

        monkeypatch.setattr(fs, "remove", remove)
        pipeline = make_pipeline(pm=FakePackageManager(install_code=9))

        with pytest.raises(InstallError) as excinfo:
            pipeline.run()

        assert excinfo.value.exit_code == 9
        real_remove(pipeline.temp_dir)

    def test_env_file_reaches_install_only(self, make_pipeline, build_dir, tmp_path, monkeypatch):
        monkeypatch.delenv("SECRET", raising=False)
        env_file = tmp_path / "app.env"
        env_file.write_text("SECRET=hunter2\nPATH=/evil\n")
        write_tree(build_dir, {"package.json": manifest(), "gulpfile.js": ""})
        pm = FakePackageManager()

        pipeline = make_pipeline(pm=pm, env_file=str(env_file))
        tool = pipeline.build_tool
        report = pipeline.run()

        _, _, env = pm.calls[-1]
        assert env["SECRET"] == "hunter2"
        assert env.get("PATH") == os.environ.get("PATH")
        assert "SECRET" not in os.environ
        assert report.build_tool_ran is True
        assert "SECRET" not in tool.envs[0]

    def test_build_tool_failure_is_fatal(self, make_pipeline, fs, build_dir, cache_dir):
        write_tree(build_dir, {"package.json": manifest(), "gulpfile.js": ""})
        pipeline = make_pipeline(tool=FakeBuildTool(fs, exit_code=2))

        with pytest.raises(BuildStepError) as excinfo:
            pipeline.run()

        assert excinfo.value.exit_code == 2
        assert not pipeline.temp_dir.exists()

    def test_build_tool_can_be_disabled(self, make_pipeline, fs, build_dir):
        write_tree(build_dir, {"package.json": manifest(), "gulpfile.js": ""})
        tool = FakeBuildTool(fs)

        report = make_pipeline(tool=tool, run_build_tool=False).run()

        assert report.build_tool_ran is False
        assert tool.envs == []

    def test_vendored_runtime_is_never_cached(self, make_pipeline, build_dir, cache_dir):
        write_tree(build_dir, {
            "package.json": manifest(),
            ".heroku/node/lib/node_modules/npm/package.json": "{}",
        })

        make_pipeline().run()

        assert not (cache_dir / ".heroku").exists()

    def test_auxiliary_cache_is_saved(self, make_pipeline, build_dir, cache_dir, tmp_path):
        write_tree(build_dir, {"package.json": manifest()})
        write_tree(tmp_path / "home" / ".npm", {"_cacache/index": "i"})

        report = make_pipeline().run()

        assert read_tree(cache_dir / ".aux" / "npm") == {"_cacache/index": "i"}
        assert (".aux/npm", "mirrored") in [(o.path, o.action) for o in report.synced]

    def test_auxiliary_cache_is_not_restored_as_dependency_dir(self, make_pipeline, build_dir, cache_dir):
        write_tree(cache_dir, {".aux/npm/node_modules/x/i.js": "x"})
        write_tree(build_dir, {"package.json": manifest()})

        report = make_pipeline().run()

        assert report.restored == []


class TestTerminateOnSignals:
    """Tests for the scoped termination handler."""

    def test_previous_handlers_are_restored(self):
        before = signal.getsignal(signal.SIGTERM)
        with terminate_on_signals():
            assert signal.getsignal(signal.SIGTERM) != before
        assert signal.getsignal(signal.SIGTERM) == before

    def test_signal_becomes_system_exit(self):
        with pytest.raises(SystemExit) as excinfo:
            with terminate_on_signals():
                os.kill(os.getpid(), signal.SIGTERM)
        assert excinfo.value.code == 128 + signal.SIGTERM
