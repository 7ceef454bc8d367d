from __future__ import annotations

import threading
from pathlib import Path

import pytest
import yaml

from cnd.core.utils.io import atomic_write, ensure_directory, file_lock, lock_path_for, read_yaml, write_yaml
from cnd.core.utils.merge import deep_merge


def test_write_yaml_roundtrip(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "data.yaml"
    write_yaml(out, {"b": 1, "a": {"c": [1, 2]}})

    assert read_yaml(out) == {"a": {"c": [1, 2]}, "b": 1}
    assert out.read_text().startswith("a:")


def test_read_yaml_missing(tmp_path: Path) -> None:
    missing = tmp_path / "nope.yaml"
    assert read_yaml(missing, default={}) == {}
    with pytest.raises(FileNotFoundError):
        read_yaml(missing, raise_on_error=True)


def test_read_yaml_invalid(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("a: [1, 2\n")
    assert read_yaml(bad, default="fallback") == "fallback"
    with pytest.raises(yaml.YAMLError):
        read_yaml(bad, raise_on_error=True)


def test_atomic_write_failure_keeps_original(tmp_path: Path) -> None:
    target = tmp_path / "state.yaml"
    target.write_text("original\n")

    def _boom(f) -> None:
        f.write("partial")
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        atomic_write(target, _boom)

    assert target.read_text() == "original\n"
    assert not list(tmp_path.glob("*.tmp"))


def test_concurrent_atomic_writes_produce_valid_yaml(tmp_path: Path) -> None:
    out = tmp_path / "race.yaml"

    def writer(value: int) -> None:
        for _ in range(50):
            write_yaml(out, {"v": value})

    t1 = threading.Thread(target=writer, args=(1,))
    t2 = threading.Thread(target=writer, args=(2,))
    t1.start(); t2.start()
    t1.join(); t2.join()

    assert read_yaml(out) in ({"v": 1}, {"v": 2})


def test_ensure_directory_rejects_files(tmp_path: Path) -> None:
    f = tmp_path / "file"
    f.write_text("")
    with pytest.raises(NotADirectoryError):
        ensure_directory(f)
    with pytest.raises(FileNotFoundError):
        ensure_directory(tmp_path / "missing", create=False)


def test_deep_merge_nested() -> None:
    base = {"a": {"x": 1, "y": 2}, "b": 1}
    merged = deep_merge(base, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base["a"]["y"] == 2


def test_reader_waits_for_writer_lock(tmp_path: Path) -> None:
    target = tmp_path / "state.yaml"
    write_yaml(target, {"v": 1})
    result = {}

    def reader() -> None:
        result["data"] = read_yaml(target)

    with file_lock(target):
        t = threading.Thread(target=reader)
        t.start()
        t.join(0.2)
        assert t.is_alive()
        target.write_text("v: 2\n")
    t.join(5)

    assert result["data"] == {"v": 2}


def test_write_creates_sidecar_and_read_does_not(tmp_path: Path) -> None:
    foreign = tmp_path / "kubeconfig"
    foreign.write_text("a: 1\n")
    assert read_yaml(foreign) == {"a": 1}
    assert not lock_path_for(foreign).exists()

    owned = tmp_path / "owned.yaml"
    write_yaml(owned, {"a": 1})
    assert lock_path_for(owned) == tmp_path / "owned.yaml.lock"
    assert lock_path_for(owned).exists()
