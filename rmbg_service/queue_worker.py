"""
Batch worker: run the shared pipeline over local files.

Queue integrations (Redis, SQS, ...) can build `BatchItem`s from their
messages and reuse `process_batch`. Each item either produces a PNG or a
recorded error; one bad image does not stop the batch.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .pipeline import BackgroundRemover, get_remover, process_image_bytes

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    input_path: Path
    output_path: Path


@dataclass
class BatchResult:
    item: BatchItem
    ok: bool
    error: Optional[str] = None


def _process_item(item: BatchItem, remover: BackgroundRemover) -> BatchResult:
    logger.info("Processing batch item input=%s output=%s", item.input_path, item.output_path)
    try:
        png_bytes = process_image_bytes(Path(item.input_path).read_bytes(), remover=remover)
        output_path = Path(item.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(png_bytes)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Batch item %s failed: %s", item.input_path, exc)
        return BatchResult(item=item, ok=False, error=f"{type(exc).__name__}: {exc}")
    return BatchResult(item=item, ok=True)


def process_batch(
    items: Iterable[BatchItem],
    max_workers: int = 1,
    remover: Optional[BackgroundRemover] = None,
) -> List[BatchResult]:
    """
    Process a batch of images, returning one result per item in input order.

    With `max_workers > 1` items share a single remover across threads,
    which requires a session that accepts concurrent `run` calls.
    """
    remover = remover or get_remover()
    items = list(items)
    if max_workers <= 1:
        results = [_process_item(item, remover) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda item: _process_item(item, remover), items))

    failed = sum(1 for r in results if not r.ok)
    logger.info("Batch finished: %d ok, %d failed", len(results) - failed, failed)
    return results
