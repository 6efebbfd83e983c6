"""
Tests for single-file and directory documentation runs.

The external compiler is replaced by a context manager that hands back the
main.json sitting next to each main.bicep.
"""

import shutil
import threading
from contextlib import contextmanager
from pathlib import Path

import pytest

from bicepdocs.cli import process
from bicepdocs.config import BicepDocsConfig
from bicepdocs.errors import ExternalToolError, InputError
from bicepdocs.markdown import SyncStatus


@contextmanager
def _precompiled(bicep_file):
    yield str(Path(bicep_file).with_suffix(".json"))


@pytest.fixture
def fake_compiler(monkeypatch):
    monkeypatch.setattr(process, "compiled_template", _precompiled)


@pytest.fixture
def config():
    return BicepDocsConfig(max_workers=2)


def _copy_fixture(source: Path, target: Path) -> Path:
    target.mkdir(parents=True, exist_ok=True)
    for name in ("main.bicep", "main.json"):
        shutil.copy(source / name, target / name)
    return target / "main.bicep"


class TestSingleFile:
    """A single Bicep file as input."""

    def test_default_output_next_to_input(self, tmp_path, basic_dir, fake_compiler, config):
        bicep_file = _copy_fixture(basic_dir, tmp_path / "module")

        results = process.generate_docs(bicep_file, config=config)

        readme = tmp_path / "module" / "README.md"
        assert results == [(str(readme), SyncStatus.CREATED)]
        expected = (basic_dir / "README.expected.md").read_text(encoding="utf-8")
        assert readme.read_text(encoding="utf-8") == expected

    def test_explicit_output_and_idempotence(self, tmp_path, basic_dir, fake_compiler, config):
        bicep_file = _copy_fixture(basic_dir, tmp_path)
        output = tmp_path / "docs.md"

        first = process.generate_docs(bicep_file, output, config)
        second = process.generate_docs(bicep_file, output, config)

        assert first[0][1] is SyncStatus.CREATED
        assert second[0][1] is SyncStatus.UNCHANGED

    def test_nonexistent_input(self, tmp_path, config):
        with pytest.raises(InputError, match="no such file or directory"):
            process.generate_docs(tmp_path / "nope.bicep", config=config)

    def test_error_mentions_file(self, tmp_path, config, monkeypatch):
        bicep_file = tmp_path / "main.bicep"
        bicep_file.write_text("", encoding="utf-8")

        @contextmanager
        def _broken(path):
            raise ExternalToolError("neither 'bicep' nor 'az' commands were found")
            yield

        monkeypatch.setattr(process, "compiled_template", _broken)
        with pytest.raises(ExternalToolError) as exc_info:
            process.generate_docs(bicep_file, config=config)

        assert str(exc_info.value) == (
            f"error processing {bicep_file}: neither 'bicep' nor 'az' commands were found"
        )


class TestDirectory:
    """Directory fan-out."""

    def test_every_trigger_file_documented(self, tmp_path, basic_dir, extended_dir, fake_compiler, config):
        _copy_fixture(basic_dir, tmp_path / "a")
        _copy_fixture(extended_dir, tmp_path / "b" / "nested")
        (tmp_path / "c").mkdir()
        (tmp_path / "c" / "other.bicep").write_text("", encoding="utf-8")
        reported = []

        results = process.generate_docs(
            tmp_path, config=config, on_result=lambda path, status: reported.append(path)
        )

        expected_paths = [
            str(tmp_path / "a" / "README.md"),
            str(tmp_path / "b" / "nested" / "README.md"),
        ]
        assert [path for path, _ in results] == expected_paths
        assert all(status is SyncStatus.CREATED for _, status in results)
        assert sorted(reported) == expected_paths
        assert not (tmp_path / "c" / "README.md").exists()

    def test_output_option_ignored(self, tmp_path, basic_dir, fake_compiler, config):
        _copy_fixture(basic_dir, tmp_path / "a")

        process.generate_docs(tmp_path, tmp_path / "ignored.md", config)

        assert not (tmp_path / "ignored.md").exists()
        assert (tmp_path / "a" / "README.md").exists()

    def test_no_trigger_files(self, tmp_path, fake_compiler, config):
        (tmp_path / "a").mkdir()
        assert process.generate_docs(tmp_path, config=config) == []
        assert list(tmp_path.rglob("README.md")) == []

    def test_custom_trigger_and_output_names(self, tmp_path, basic_dir, fake_compiler):
        target = tmp_path / "a"
        target.mkdir()
        shutil.copy(basic_dir / "main.bicep", target / "root.bicep")
        shutil.copy(basic_dir / "main.json", target / "root.json")
        config = BicepDocsConfig(trigger_filename="root.bicep", output_filename="DOCS.md", max_workers=1)

        results = process.generate_docs(tmp_path, config=config)

        assert results == [(str(target / "DOCS.md"), SyncStatus.CREATED)]

    def test_first_error_is_raised(self, tmp_path, basic_dir, config, monkeypatch):
        for name in ("a", "b", "c"):
            _copy_fixture(basic_dir, tmp_path / name)

        @contextmanager
        def _fail_on_b(bicep_file):
            if Path(bicep_file).parent.name == "b":
                raise ExternalToolError("build failed")
            yield str(Path(bicep_file).with_suffix(".json"))

        monkeypatch.setattr(process, "compiled_template", _fail_on_b)
        with pytest.raises(ExternalToolError) as exc_info:
            process.generate_docs(tmp_path, config=config)

        assert exc_info.value.file_path == str(tmp_path / "b" / "main.bicep")

    def test_concurrency_is_bounded(self, tmp_path, basic_dir, monkeypatch):
        for index in range(6):
            _copy_fixture(basic_dir, tmp_path / f"m{index}")
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        @contextmanager
        def _counting(bicep_file):
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            try:
                yield str(Path(bicep_file).with_suffix(".json"))
            finally:
                with lock:
                    state["running"] -= 1

        monkeypatch.setattr(process, "compiled_template", _counting)
        results = process.generate_docs(tmp_path, config=BicepDocsConfig(max_workers=2))

        assert len(results) == 6
        assert state["peak"] <= 2


class TestFindTriggerFiles:
    """Directory walking."""

    def test_sorted_walk(self, tmp_path):
        for name in ("b", "a", "a/z"):
            (tmp_path / name).mkdir(parents=True, exist_ok=True)
            (tmp_path / name / "main.bicep").write_text("", encoding="utf-8")

        found = list(process.find_trigger_files(tmp_path, "main.bicep"))

        assert found == [
            tmp_path / "a" / "main.bicep",
            tmp_path / "a" / "z" / "main.bicep",
            tmp_path / "b" / "main.bicep",
        ]
