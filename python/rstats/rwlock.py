"""Readers-writer lock built on :mod:`threading` primitives."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Condition, Lock
from typing import Iterator


class ReadWriteLock:
    """Shared/exclusive lock with writer preference and reader hand-off.

    Any number of readers may hold the lock together while no writer does.
    A writer excludes everyone else. Once a writer is waiting, newly arriving
    readers queue behind it so writers are not starved by overlapping reads.
    When a writer releases, every reader that was already waiting is admitted
    before the next writer may take the lock, so a busy stream of writers
    cannot starve readers either. The lock is not reentrant.
    """

    __slots__ = (
        "_cond",
        "_readers",
        "_writer",
        "_writers_waiting",
        "_readers_waiting",
        "_admitted",
        "_releases",
    )

    def __init__(self) -> None:
        self._cond = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0
        self._readers_waiting = 0
        # readers granted entry by the last write release but not yet inside
        self._admitted = 0
        self._releases = 0

    # ------------------------------------------------------------------
    def acquire_read(self) -> None:
        with self._cond:
            ticket = self._releases
            self._readers_waiting += 1
            try:
                while self._writer or (self._writers_waiting and self._releases == ticket):
                    self._cond.wait()
            finally:
                self._readers_waiting -= 1
                if self._releases != ticket and self._admitted:
                    self._admitted -= 1
                    if not self._admitted:
                        self._cond.notify_all()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read called without a matching acquire_read")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    # ------------------------------------------------------------------
    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers or self._admitted:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write called without a matching acquire_write")
            self._writer = False
            self._releases += 1
            self._admitted = self._readers_waiting
            self._cond.notify_all()

    # ------------------------------------------------------------------
    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    # ------------------------------------------------------------------
    @property
    def readers(self) -> int:
        with self._cond:
            return self._readers

    @property
    def write_held(self) -> bool:
        with self._cond:
            return self._writer

    @property
    def writers_waiting(self) -> int:
        with self._cond:
            return self._writers_waiting

    @property
    def readers_waiting(self) -> int:
        with self._cond:
            return self._readers_waiting


__all__ = ["ReadWriteLock"]
