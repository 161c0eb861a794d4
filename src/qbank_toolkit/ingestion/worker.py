"""
Module: ingestion.worker

Purpose:
    Run merges off the caller's thread. Each merge is a one-message-in,
    one-message-out task: a MergeRequest goes to a fresh isolated executor
    and exactly one terminal message (MergeSuccess or MergeFailure) comes
    back. Inputs and outputs are plain bytes, nothing is shared.

Key Functions:
    - run_merge(): Background entry point, never raises

Key Classes:
    - MergeRequest: Sources plus configuration
    - MergeSuccess / MergeFailure: Terminal messages
    - IngestionEngine: Dispatches merges and publishes the resulting bank

Dependencies:
    - concurrent.futures (std): Process pool per merge
    - ingestion.engine: Synchronous merge core
    - bank.dataset: QuestionBank handle

Used By:
    - Host applications
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ProcessPoolExecutor
from dataclasses import dataclass, replace
from threading import Lock
from typing import Callable, Optional, Sequence, Tuple, Union

from qbank_toolkit.bank.dataset import QuestionBank

from .config import IngestionConfig
from .engine import MergeError, SourceFailure, SourceFile, merge_sources

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeRequest:
    """Everything a background merge needs, copied in."""

    sources: Tuple[SourceFile, ...]
    config: IngestionConfig


@dataclass(frozen=True)
class MergeSuccess:
    """
    Terminal message of a completed merge.

    Attributes:
        count: Rows imported
        data: Serialized canonical database
        failures: Sources that were skipped
        bank: Handle published by the engine (None until published)
    """

    count: int
    data: bytes
    failures: Tuple[SourceFailure, ...] = ()
    bank: Optional[QuestionBank] = None


@dataclass(frozen=True)
class MergeFailure:
    """Terminal message of a failed merge."""

    message: str


MergeMessage = Union[MergeSuccess, MergeFailure]


def run_merge(request: MergeRequest) -> MergeMessage:
    """
    Execute one merge and report a single terminal message.

    Module-level so it can be pickled into a worker process.

    Args:
        request: Sources and configuration

    Returns:
        MergeSuccess or MergeFailure; never raises
    """
    try:
        result = merge_sources(request.sources, request.config)
    except MergeError as e:
        return MergeFailure(str(e))
    except Exception as e:
        logger.exception("Unexpected merge failure")
        return MergeFailure(f"Unexpected error: {e}")
    return MergeSuccess(result.imported_count, result.data, result.failures)


def _default_executor() -> Executor:
    return ProcessPoolExecutor(max_workers=1)


class IngestionEngine:
    """
    Dispatch merges to background executors and hold the latest bank.

    Every call to merge() gets its own executor. Merges are not serialized:
    when two overlap, whichever completes last becomes current.

    Example:
        >>> engine = IngestionEngine()
        >>> bank = engine.merge_and_wait([SourceFile("s1", "bank.db", data)])
        >>> engine.current is bank
        True
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        executor_factory: Optional[Callable[[], Executor]] = None,
    ) -> None:
        """
        Args:
            config: Ingestion configuration for every merge
            executor_factory: Builds the executor for one merge
                (default: single-worker process pool)
        """
        self.config = config or IngestionConfig()
        self._executor_factory = executor_factory or _default_executor
        self._lock = Lock()
        self._current: Optional[QuestionBank] = None

    @property
    def current(self) -> Optional[QuestionBank]:
        """Bank from the most recently completed merge, None before the first."""
        with self._lock:
            return self._current

    def merge(
        self,
        sources: Sequence[SourceFile],
        callback: Optional[Callable[[MergeMessage], None]] = None,
    ) -> Future:
        """
        Start a merge in the background.

        The returned future resolves to a MergeMessage and never raises.
        On success the new bank is published as `current` and the
        callback has run before the future resolves.

        Args:
            sources: Files to merge
            callback: Called with the terminal message

        Returns:
            Future[MergeMessage]
        """
        request = MergeRequest(tuple(sources), self.config)
        outer: Future = Future()
        outer.set_running_or_notify_cancel()

        def finish(message: MergeMessage) -> None:
            if isinstance(message, MergeSuccess):
                try:
                    message = self._publish(message)
                except Exception as e:
                    logger.error(f"Merged dataset could not be opened: {e}")
                    message = MergeFailure(f"Merged dataset could not be opened: {e}")
            else:
                logger.error(f"Merge failed: {message.message}")
            if callback is not None:
                try:
                    callback(message)
                except Exception:
                    logger.exception("Merge callback failed")
            outer.set_result(message)

        def on_done(inner: Future) -> None:
            try:
                message = inner.result()
            except Exception as e:
                message = MergeFailure(f"Merge worker failed: {e}")
            finish(message)

        try:
            executor = self._executor_factory()
        except Exception as e:
            finish(MergeFailure(f"Could not start merge: {e}"))
            return outer
        try:
            inner = executor.submit(run_merge, request)
        except Exception as e:
            executor.shutdown(wait=False)
            finish(MergeFailure(f"Could not start merge: {e}"))
            return outer

        inner.add_done_callback(on_done)
        executor.shutdown(wait=False)
        logger.info(f"Merge started for {len(request.sources)} sources")
        return outer

    def merge_and_wait(
        self,
        sources: Sequence[SourceFile],
        timeout: Optional[float] = None,
    ) -> QuestionBank:
        """
        Merge and block until done.

        Raises:
            MergeError: If the merge failed
            concurrent.futures.TimeoutError: If timeout elapses first
        """
        message = self.merge(sources).result(timeout=timeout)
        if isinstance(message, MergeFailure):
            raise MergeError(message.message)
        return message.bank

    def _publish(self, message: MergeSuccess) -> MergeSuccess:
        bank = QuestionBank(message.data, imported_count=message.count)
        with self._lock:
            self._current = bank
        logger.info(f"Published dataset with {message.count} questions")
        return replace(message, bank=bank)
