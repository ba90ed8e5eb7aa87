# aggregate.py
# Call every source adapter, stitch their raw records together in a fixed order,
# and collapse records that describe the same protocol.

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Protocol, Sequence

import pandas as pd

logger = logging.getLogger(__name__)


class SourceAdapter(Protocol):
    """Anything that can pull raw records from one external source."""
    name: str

    def fetch(self) -> List[dict]:
        """Return zero or more raw records. Must not raise."""
        ...


def _safe_fetch(adapter: SourceAdapter) -> List[dict]:
    # Adapters promise not to raise; this keeps a buggy one from taking the others down.
    try:
        records = adapter.fetch() or []
    except Exception as e:
        logger.warning("Source %s failed: %s", getattr(adapter, "name", adapter), e)
        return []
    logger.info("Source %s returned %d record(s)", adapter.name, len(records))
    return list(records)


def collect(adapters: Sequence[SourceAdapter], max_workers: int = 6) -> List[dict]:
    """
    Run every adapter (concurrently) and concatenate their records.

    Output order follows the order of `adapters`, regardless of which one
    finishes first. That order decides which record survives dedupe.
    """
    if not adapters:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(adapters)))) as executor:
        results = list(executor.map(_safe_fetch, adapters))

    records: List[dict] = []
    for batch in results:
        records.extend(batch)
    return records


def dedupe(records: List[dict]) -> List[dict]:
    """
    Keep the first record seen for each `name` (exact, case-sensitive match),
    drop the rest. Relative order of the survivors is unchanged.
    """
    if not records:
        return []
    names = pd.Series([r.get("name") if isinstance(r, dict) else None for r in records], dtype=object)
    keep = ~names.duplicated(keep="first")
    return [r for r, k in zip(records, keep.tolist()) if k]
