"""Concurrent fan-out to source adapters, merged in fixed priority order."""

import concurrent.futures
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import get_settings
from .models import AggregatedResultSet, NormalizedResult
from .sources import SOURCES, WEB_SOURCES, Adapter

log = logging.getLogger(__name__)


def select_sources(
    requested: Optional[Iterable[str]] = None,
    default: Sequence[str] = WEB_SOURCES,
) -> List[Tuple[str, Adapter]]:
    """Resolve adapter names to ``(name, adapter)`` pairs in priority order.

    ``None`` or an empty collection selects *default*. Unknown names are
    dropped. The request's own ordering never changes the merge order.
    """
    if isinstance(requested, str):
        requested = [requested]
    names = {str(n).strip().lower() for n in (requested or []) if str(n).strip()}
    if not names:
        names = set(default)
    unknown = names - set(SOURCES)
    if unknown:
        log.info("Ignoring unknown sources: %s", sorted(unknown))
    return [(name, fn) for name, fn in SOURCES.items() if name in names]


def fan_out(query: str, adapters: Sequence[Tuple[str, Adapter]]) -> List[List[NormalizedResult]]:
    """Run every adapter concurrently and wait for all of them.

    Returns one result list per adapter, in the order given. An adapter that
    raises contributes an empty list.
    """
    if not adapters:
        return []
    outputs: List[List[NormalizedResult]] = [[] for _ in adapters]
    with concurrent.futures.ThreadPoolExecutor(max_workers=len(adapters)) as executor:
        future_to_index = {
            executor.submit(fn, query): idx for idx, (_, fn) in enumerate(adapters)
        }
        for future in concurrent.futures.as_completed(future_to_index):
            idx = future_to_index[future]
            try:
                outputs[idx] = list(future.result() or [])
            except Exception as exc:
                log.warning("Source %s failed: %s", adapters[idx][0], exc)
    return outputs


def merge(
    batches: Iterable[List[NormalizedResult]],
    max_results: int,
    max_images: int,
) -> AggregatedResultSet:
    merged = [r for batch in batches for r in batch if r is not None]
    kept = merged[:max_results]
    images = [r.image for r in kept if r.image][:max_images]
    return AggregatedResultSet(results=kept, images=images)


def aggregate(
    query: str,
    sources: Optional[Iterable[str]] = None,
    default: Sequence[str] = WEB_SOURCES,
) -> AggregatedResultSet:
    if not query:
        raise ValueError("query must be non-empty")
    settings = get_settings()
    adapters = select_sources(sources, default)
    log.info("Searching %d sources for %r", len(adapters), query)
    result = merge(fan_out(query, adapters), settings.max_results, settings.max_images)
    log.info("Aggregated %d results, %d images", len(result.results), len(result.images))
    return result
