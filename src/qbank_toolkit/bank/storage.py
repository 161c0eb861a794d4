"""
Module: bank.storage

Purpose:
    Snapshot a canonical dataset to disk and load it back. Writes go to a
    temporary file in the target directory and are moved into place
    atomically, all while holding an exclusive lock on a sidecar lock file.
    Reads take a shared lock so they never observe a half-written file.

Key Functions:
    - save_bank(): Write a dataset snapshot
    - load_bank(): Open a snapshot as a QuestionBank
    - locked_path(): Context manager holding the sidecar lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - Host applications (persisting the merged dataset between runs)
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union

import portalocker

from qbank_toolkit.core.schemas import SchemaError

from .dataset import QuestionBank

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class StorageError(Exception):
    """A dataset snapshot could not be written or read."""
    pass


def _lock_path(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


@contextmanager
def locked_path(
    path: Path,
    lock_type: int = portalocker.LOCK_EX,
) -> Generator[None, None, None]:
    """
    Hold a lock on the sidecar lock file of path.

    Args:
        path: Snapshot path being protected
        lock_type: LOCK_EX for writers, LOCK_SH for readers

    Example:
        >>> with locked_path(snapshot, portalocker.LOCK_SH):
        ...     data = snapshot.read_bytes()
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(_lock_path(path), "a", encoding="utf-8") as f:
        portalocker.lock(f, lock_type)
        try:
            yield
        finally:
            portalocker.unlock(f)


def save_bank(bank: QuestionBank, path: PathLike) -> Path:
    """
    Write a dataset snapshot atomically.

    Args:
        bank: Dataset to persist
        path: Target file

    Returns:
        The written path

    Raises:
        StorageError: If the snapshot cannot be written
    """
    path = Path(path)
    try:
        with locked_path(path, portalocker.LOCK_EX):
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp.write(bank.data)
                tmp_path = Path(tmp.name)
            try:
                os.replace(tmp_path, path)
            except OSError:
                tmp_path.unlink(missing_ok=True)
                raise
    except OSError as e:
        raise StorageError(f"Could not write snapshot {path}: {e}") from e

    logger.info(f"Saved dataset snapshot ({len(bank.data)} bytes) to {path}")
    return path


def load_bank(path: PathLike) -> QuestionBank:
    """
    Open a dataset snapshot.

    Args:
        path: Snapshot written by save_bank

    Returns:
        QuestionBank over the snapshot contents

    Raises:
        StorageError: If the file is missing, unreadable or not a dataset
    """
    path = Path(path)
    if not path.exists():
        raise StorageError(f"Snapshot not found: {path}")
    try:
        with locked_path(path, portalocker.LOCK_SH):
            data = path.read_bytes()
    except OSError as e:
        raise StorageError(f"Could not read snapshot {path}: {e}") from e

    try:
        bank = QuestionBank(data)
    except SchemaError as e:
        raise StorageError(f"Snapshot {path} is not a dataset: {e}") from e

    bank.imported_count = len(bank)
    logger.info(f"Loaded dataset snapshot with {bank.imported_count} questions from {path}")
    return bank
