"""
Read-only data store for the train catalogue.

The ``TRAINS`` list is populated at import time from the bundled
``thomas_characters.json`` (or the file named by ``TRAINS_DATA_FILE``).
Records are frozen ``Train`` instances and the list itself is never
mutated after loading, so it is safe to share between request threads.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..config import get_settings
from .schemas import Train

logger = logging.getLogger(__name__)


def load_trains(path: Optional[Path] = None) -> List[Train]:
    """Load train records from a JSON file.

    Parameters
    ----------
    path : Optional[Path]
        File holding a JSON array of train objects. Defaults to the
        configured data file.

    Returns
    -------
    List[Train]
        Records in file order. Entries that fail validation are skipped
        and logged; a missing or unreadable file yields an empty list.
    """
    path = path or get_settings().data_file
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        logger.error("Could not load train dataset from %s: %s", path, exc)
        return []
    if not isinstance(raw, list):
        logger.error("Train dataset %s is not a JSON array", path)
        return []

    trains: List[Train] = []
    seen = set()
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        images = entry.get("images") or []
        try:
            train = Train(
                id=int(entry["id"]),
                name=str(entry.get("name") or ""),
                number=str(entry.get("number") or ""),
                color=str(entry.get("color") or ""),
                description=entry.get("description"),
                images=[str(i) for i in images] if isinstance(images, list) else [],
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed train entry %r: %s", entry, exc)
            continue
        if train.id in seen:
            logger.warning("Skipping duplicate train id %s", train.id)
            continue
        seen.add(train.id)
        trains.append(train)
    return trains


# In-memory catalogue shared by every request
TRAINS: List[Train] = load_trains()


def _norm(s: Optional[str]) -> str:
    return (s or "").lower()


def filter_trains(dataset: Iterable[Train], query: Optional[str]) -> List[Train]:
    """Return the trains whose name, number or color contains ``query``.

    Matching is a case-insensitive substring test. An empty query keeps
    every record. The result preserves dataset order.
    """
    nq = _norm(query)
    if not nq:
        return list(dataset)
    return [
        t for t in dataset
        if nq in _norm(t.name) or nq in _norm(t.number) or nq in _norm(t.color)
    ]


def get_train(train_id: int, dataset: Sequence[Train] = TRAINS) -> Optional[Train]:
    return next((t for t in dataset if t.id == train_id), None)
