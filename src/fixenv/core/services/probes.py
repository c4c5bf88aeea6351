"""Probe policies for looking things up in remote or local sources.

A probe is one lookup that either finds something or returns None. Two
policies decide how a list of probes is evaluated:

- ``probe_all``: start every probe at once and keep every hit, in list order.
- ``probe_first``: try probes one after another and stop at the first hit.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class Probe(Generic[T]):
    label: str
    run: Callable[[], Optional[T]]


def probe_all(probes: Sequence[Probe[T]], *, max_workers: int | None = None) -> list[T]:
    """Run all probes concurrently and return the hits in probe order."""
    if not probes:
        return []
    workers = max_workers or len(probes)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as pool:
        results = list(pool.map(lambda p: p.run(), probes))
    return [r for r in results if r is not None]


def probe_first(probes: Sequence[Probe[T]]) -> Optional[T]:
    """Run probes sequentially and return the first hit, or None."""
    for probe in probes:
        result = probe.run()
        if result is not None:
            return result
    return None
