"""
Concurrent hash sweeps over the fuzziness x resolution x image [x attack] matrix.

Every coordinate is hashed by its own task and written into a pre-sized
HashTable at that coordinate, so the result layout never depends on the order
in which tasks finish. A sweep is joined with a single gather(); the first
failure cancels every remaining task of the run and propagates.
"""

from __future__ import annotations

import asyncio
import inspect
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .config import Cell, SweepOptions
from .corpus import Corpus
from .errors import HashComputationError, ShapeMismatchError

Coord = Tuple[int, ...]


class HashTable:
    """
    Fixed-shape, write-once table of hash values.

    Coordinates are (fuzz_idx, res_idx, image_idx) for originals and
    (fuzz_idx, res_idx, image_idx, attack_idx) for attacked inputs.
    Values can only be read after freeze(), which checks that every
    coordinate was written exactly once.
    """

    def __init__(self, shape: Sequence[int]) -> None:
        if any(int(n) < 1 for n in shape):
            raise ShapeMismatchError(f"Hash table dimensions must be positive: {tuple(shape)}")
        self.shape: Tuple[int, ...] = tuple(int(n) for n in shape)
        self._values: List[Any] = [None] * int(np.prod(self.shape))
        self._filled = np.zeros(self.shape, dtype=bool)
        self._frozen = False

    def _offset(self, coord: Coord) -> int:
        if len(coord) != len(self.shape):
            raise ShapeMismatchError(f"Coordinate {coord} does not match table shape {self.shape}")
        try:
            return int(np.ravel_multi_index(coord, self.shape))
        except ValueError as e:
            raise ShapeMismatchError(f"Coordinate {coord} out of bounds for shape {self.shape}") from e

    def set(self, coord: Coord, value: Any) -> None:
        if self._frozen:
            raise ShapeMismatchError(f"Table is frozen; cannot write {coord}")
        offset = self._offset(coord)
        if self._filled[coord]:
            raise ShapeMismatchError(f"Coordinate {coord} written twice")
        self._values[offset] = value
        self._filled[coord] = True

    def freeze(self) -> "HashTable":
        missing = np.argwhere(~self._filled)
        if len(missing):
            first = tuple(int(i) for i in missing[0])
            raise ShapeMismatchError(
                f"{len(missing)} of {self._filled.size} coordinates never written (first: {first})"
            )
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, coord: Coord) -> Any:
        if not self._frozen:
            raise ShapeMismatchError("Hash table read before its sweep completed")
        return self._values[self._offset(coord)]

    def coords(self) -> Iterator[Coord]:
        return np.ndindex(*self.shape)

    def to_nested(self) -> list:
        """Values as nested lists, result[f][r][i] or result[f][r][i][a]."""
        def build(prefix: Coord) -> list:
            depth = len(prefix)
            if depth == len(self.shape) - 1:
                return [self[prefix + (k,)] for k in range(self.shape[depth])]
            return [build(prefix + (k,)) for k in range(self.shape[depth])]
        return build(())


@dataclass(frozen=True)
class SweepResult:
    originals: HashTable
    attacked: HashTable


def _grid_shape(cells: Sequence[Sequence[Cell]]) -> Tuple[int, int]:
    if not cells or not cells[0]:
        raise ShapeMismatchError("Configuration grid is empty")
    width = len(cells[0])
    if any(len(row) != width for row in cells):
        raise ShapeMismatchError("Configuration grid is not rectangular")
    return (len(cells), width)


def _debug_name(filename: str, resolution: int, attack: Optional[str] = None) -> str:
    stem = os.path.splitext(filename)[0]
    name = f"{stem}-res{resolution}"
    if attack is not None:
        name += f" {attack}"
    return name + ".png"


class SweepExecutor:
    """
    Drives an oracle over the evaluation matrix.

    `oracle` needs a compute(path, resolution, fuzziness) method, either a
    plain function (run on worker threads) or a coroutine function (awaited on
    the event loop). With options.emit_debug_artifacts the oracle's
    write_debug(path, resolution, out_path) is also called for the first
    fuzziness level.
    """

    def __init__(self, oracle: Any, options: Optional[SweepOptions] = None) -> None:
        self.oracle = oracle
        self.options = options or SweepOptions()
        self._is_async = inspect.iscoroutinefunction(oracle.compute)
        self._debug = self.options.emit_debug_artifacts and hasattr(oracle, "write_debug")
        if self.options.emit_debug_artifacts and not self._debug:
            print(f"[WARN] {type(oracle).__name__} cannot write debug artifacts; skipping them",
                  file=sys.stderr)

    async def sweep_originals(self, cells: Sequence[Sequence[Cell]], corpus: Corpus) -> HashTable:
        (table,) = await self._run_sweeps([self._originals_jobs(cells, corpus)])
        return table

    async def sweep_attacked(self, cells: Sequence[Sequence[Cell]], corpus: Corpus) -> HashTable:
        (table,) = await self._run_sweeps([self._attacked_jobs(cells, corpus)])
        return table

    async def run(self, cells: Sequence[Sequence[Cell]], corpus: Corpus) -> SweepResult:
        """Run both sweeps concurrently and return once both are complete.

        Both sweeps draw on the same worker limit, so max_workers bounds the
        calls in flight across the whole run.
        """
        originals, attacked = await self._run_sweeps([
            self._originals_jobs(cells, corpus),
            self._attacked_jobs(cells, corpus),
        ])
        return SweepResult(originals=originals, attacked=attacked)

    def _originals_jobs(self, cells: Sequence[Sequence[Cell]], corpus: Corpus) -> Tuple[Coord, list]:
        shape = _grid_shape(cells) + (len(corpus.files),)
        jobs = []
        for f, r, i in np.ndindex(*shape):
            cell = cells[f][r]
            debug = _debug_name(corpus.files[i], cell.resolution) if f == 0 else None
            jobs.append(((f, r, i), corpus.original_path(i), cell, None, debug))
        return shape, jobs

    def _attacked_jobs(self, cells: Sequence[Sequence[Cell]], corpus: Corpus) -> Tuple[Coord, list]:
        shape = _grid_shape(cells) + (len(corpus.files), len(corpus.attacks))
        jobs = []
        for f, r, i, a in np.ndindex(*shape):
            cell = cells[f][r]
            attack = corpus.attacks[a].name
            debug = _debug_name(corpus.files[i], cell.resolution, attack) if f == 0 else None
            jobs.append(((f, r, i, a), corpus.attacked_path(i, a), cell, attack, debug))
        return shape, jobs

    async def _run_sweeps(self, sweeps: List[Tuple[Coord, list]]) -> List[HashTable]:
        tables = [HashTable(shape) for shape, _ in sweeps]
        job_count = sum(len(jobs) for _, jobs in sweeps)
        limit = asyncio.Semaphore(self.options.max_workers or max(job_count, 1))
        pool = None if self._is_async else ThreadPoolExecutor(max_workers=self.options.max_workers)
        try:
            tasks = [
                asyncio.ensure_future(self._hash_one(table, limit, pool, *job))
                for table, (_, jobs) in zip(tables, sweeps)
                for job in jobs
            ]
            await _join(tasks)
        finally:
            if pool is not None:
                pool.shutdown(wait=False)
        return [table.freeze() for table in tables]

    async def _hash_one(self, table: HashTable, limit: asyncio.Semaphore,
                        pool: Optional[ThreadPoolExecutor], coord: Coord, path: str,
                        cell: Cell, attack: Optional[str], debug_name: Optional[str]) -> None:
        async with limit:
            try:
                value = await self._call(pool, self.oracle.compute,
                                         path, cell.resolution, cell.fuzziness)
                if self._debug and debug_name is not None:
                    out_path = os.path.join(self.options.debug_dir, debug_name)
                    await self._call(pool, self.oracle.write_debug, path, cell.resolution, out_path)
            except HashComputationError as e:
                raise HashComputationError(path, cell.resolution, cell.fuzziness, attack,
                                           reason=e.reason or str(e)) from e
            except Exception as e:
                raise HashComputationError(path, cell.resolution, cell.fuzziness, attack,
                                           reason=f"{type(e).__name__}: {e}") from e
        table.set(coord, value)

    async def _call(self, pool: Optional[ThreadPoolExecutor], fn: Any, *args: Any) -> Any:
        if inspect.iscoroutinefunction(fn):
            return await fn(*args)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(pool, fn, *args)


async def _join(tasks: List["asyncio.Future[Any]"]) -> None:
    """Wait for all tasks; on the first failure cancel the rest and re-raise."""
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for t in tasks:
            t.cancel()
        raise
