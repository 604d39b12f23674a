from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any, Iterator, Optional, Union

import importlib_resources
import yaml
from filelock import FileLock, Timeout

log = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"
LOCK_TIMEOUT = 30
LOAD_ATTEMPTS = 10


class ConfigNotFound(Exception):
    def __init__(self, path: Path) -> None:
        super().__init__(f"can't find {path}, please run `offerkit init` to create a new config file")
        self.path = path


class ConfigLockTimeout(Exception):
    pass


def initial_config_file(filename: Union[str, Path]) -> str:
    initial_config_path = importlib_resources.files(__name__.rpartition(".")[0]).joinpath(f"initial-{filename}")
    contents: str = initial_config_path.read_text(encoding="utf-8")
    return contents


def config_path_for_filename(root_path: Path, filename: Union[str, Path]) -> Path:
    path_filename = Path(filename)
    if path_filename.is_absolute():
        return path_filename
    return root_path / "config" / filename


def _replace_file(source: Path, destination: Path) -> None:
    try:
        os.replace(source, destination)
    except PermissionError:
        shutil.move(str(source), str(destination))


def create_default_offerkit_config(root_path: Path, filenames: list[str] = [CONFIG_FILENAME]) -> None:
    for filename in filenames:
        path = config_path_for_filename(root_path, filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(f".{os.getpid()}")
        tmp_path.write_text(initial_config_file(filename), encoding="utf-8")
        _replace_file(tmp_path, path)


@contextlib.contextmanager
def lock_config(root_path: Path, filename: Union[str, Path]) -> Iterator[None]:
    config_path = config_path_for_filename(root_path, filename)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(config_path.with_name(config_path.name + ".lock"))
    try:
        lock.acquire(timeout=LOCK_TIMEOUT)
    except Timeout as e:
        raise ConfigLockTimeout(f"timed out waiting for the lock on {config_path}") from e
    try:
        yield
    finally:
        lock.release()


@contextlib.contextmanager
def lock_and_load_config(root_path: Path, filename: Union[str, Path]) -> Iterator[dict[str, Any]]:
    with lock_config(root_path, filename):
        yield _read_config(config_path_for_filename(root_path, filename))


def save_config(root_path: Path, filename: Union[str, Path], config_data: Any) -> None:
    # must be called with the config lock held
    path = config_path_for_filename(root_path, filename)
    with tempfile.TemporaryDirectory(dir=path.parent) as tmp_dir:
        tmp_path = Path(tmp_dir) / path.name
        with open(tmp_path, "w") as f:
            yaml.safe_dump(config_data, f)
        _replace_file(tmp_path, path)


def load_config(
    root_path: Path,
    filename: Union[str, Path],
    sub_config: Optional[str] = None,
) -> dict[str, Any]:
    with lock_config(root_path, filename):
        config = _read_config(config_path_for_filename(root_path, filename))
    if sub_config is not None:
        section: dict[str, Any] = config[sub_config]
        return section
    return config


def _read_config(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigNotFound(path)
    # writers replace the file in one rename, so an empty or unreadable read is retried
    for attempt in range(LOAD_ATTEMPTS):
        try:
            with open(path) as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            log.error(f"Error loading {path}: {e}, retrying ({attempt})")
        else:
            if isinstance(config, dict):
                return config
            log.error(f"{path} did not contain a mapping, retrying ({attempt})")
        time.sleep(attempt * 0.1)
    raise RuntimeError(f"Was not able to read config file {path} successfully")
