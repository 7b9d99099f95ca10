"""Concurrent fan-out of module invocations and deterministic fan-in."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, TypeVar

from ..schemas.optimize import BundleInfo
from .files import OutputFile
from .invoker import ModuleBundle
from .metadata import fold_bundle_info

logger = logging.getLogger(__name__)

T = TypeVar("T")

InvokeFn = Callable[[str], Awaitable[ModuleBundle]]


@dataclass(slots=True)
class BundleOutput:
    """Aggregated result of every module invocation."""

    files: List[OutputFile] = field(default_factory=list)
    bundle_info: Optional[BundleInfo] = None
    inlined_resources: List[str] = field(default_factory=list)


async def gather_all(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """Await every awaitable concurrently; results keep submission order.

    On the first failure the remaining tasks are cancelled and awaited before
    the original exception is re-raised unchanged.
    """

    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def bundle_modules(modules: Sequence[str], invoke: InvokeFn, *, serial: bool = False) -> BundleOutput:
    """Invoke ``invoke`` once per module and aggregate the results.

    Output order follows ``modules``, never completion order. ``serial``
    awaits each invocation before starting the next, for debugging.
    """

    if serial:
        results = [await invoke(module) for module in modules]
    else:
        results = await gather_all(invoke(module) for module in modules)

    return aggregate(results)


def aggregate(results: Sequence[ModuleBundle]) -> BundleOutput:
    files: List[OutputFile] = []
    inlined: set[str] = set()
    parts = []
    for result in results:
        files.extend(result.files)
        inlined.update(result.inlined_resources)
        if result.bundle_info is not None:
            parts.append((result.module, result.bundle_info))

    bundle_info = fold_bundle_info(parts) if parts else None
    logger.debug("Aggregated %d files from %d modules", len(files), len(results))
    return BundleOutput(files=files, bundle_info=bundle_info, inlined_resources=sorted(inlined))
