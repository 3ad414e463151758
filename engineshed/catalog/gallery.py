"""
Per-train image carousel state.

``GalleryStateManager`` owns one ``GalleryState`` per train id: the
index of the image currently shown, the images fetched from the image
search service, whether a fetch is in flight, and the page to request
on the next "load more". All mutation goes through the manager.

Request handlers run in a thread pool, so the state table is guarded by
a lock. The lock is never held across a network call: the ``is_loading``
flag is checked and set under the lock, which is enough to keep a
single fetch per train while fetches for different trains run side by
side.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .image_search import (
    ImageSearchError,
    build_query,
    filter_denylisted,
    search_images,
    start_offset,
)
from .schemas import GalleryView, LoadOutcome, Train

logger = logging.getLogger(__name__)

# (query, 1-based start offset) -> image links
ImageFetcher = Callable[[str, int], List[str]]


@dataclass
class GalleryState:
    extra_images: List[str] = field(default_factory=list)
    current_index: int = 0
    is_loading: bool = False
    next_page: int = 1


class GalleryStateManager:
    """Navigation and pagination state for every train in a dataset."""

    def __init__(self, trains: Sequence[Train], fetcher: Optional[ImageFetcher] = None):
        self._trains: Dict[int, Train] = {t.id: t for t in trains}
        self._states: Dict[int, GalleryState] = {t.id: GalleryState() for t in trains}
        self._fetch: ImageFetcher = fetcher or search_images
        self._lock = threading.Lock()

    # -- lookups (callers hold the lock) ---------------------------------

    def _state(self, train_id: int) -> GalleryState:
        if train_id not in self._trains:
            raise KeyError(train_id)
        return self._states.setdefault(train_id, GalleryState())

    def _images(self, train_id: int) -> List[str]:
        return list(self._trains[train_id].images) + list(self._state(train_id).extra_images)

    def _view(self, train_id: int) -> GalleryView:
        state = self._state(train_id)
        images = self._images(train_id)
        total = len(images)
        index = state.current_index if total else 0
        return GalleryView(
            train_id=train_id,
            images=images,
            current_index=index,
            current_image=images[index] if total else None,
            total=total,
            counter=f"{index + 1} / {total}",
            is_loading=state.is_loading,
            has_extra_images=bool(state.extra_images),
            next_page=state.next_page,
        )

    # -- reads -----------------------------------------------------------

    def all_images(self, train_id: int) -> List[str]:
        """Baseline images followed by fetched images."""
        with self._lock:
            return self._images(train_id)

    def view(self, train_id: int) -> GalleryView:
        with self._lock:
            return self._view(train_id)

    def state(self, train_id: int) -> GalleryState:
        """Return a copy of the raw state for ``train_id``."""
        with self._lock:
            s = self._state(train_id)
            return GalleryState(list(s.extra_images), s.current_index, s.is_loading, s.next_page)

    # -- navigation ------------------------------------------------------

    def _step(self, train_id: int, delta: int) -> int:
        with self._lock:
            state = self._state(train_id)
            total = len(self._images(train_id))
            if total == 0:
                state.current_index = 0
            else:
                state.current_index = (state.current_index + delta) % total
            return state.current_index

    def next(self, train_id: int) -> int:
        """Show the next image, wrapping from the last to the first."""
        return self._step(train_id, 1)

    def prev(self, train_id: int) -> int:
        """Show the previous image, wrapping from the first to the last."""
        return self._step(train_id, -1)

    # -- fetching --------------------------------------------------------

    def load_images(
        self,
        train_id: int,
        name: Optional[str] = None,
        is_load_more: bool = False,
    ) -> LoadOutcome:
        """Fetch images for a train and merge them into its gallery.

        A fresh load (``is_load_more=False``) requests page 1 and replaces
        previously fetched images. A load-more requests ``next_page`` and
        appends. While a fetch for the train is in flight, further calls
        return a ``busy`` outcome without contacting the image service.
        """
        with self._lock:
            state = self._state(train_id)
            if name is None:
                name = self._trains[train_id].name
            if state.is_loading:
                return LoadOutcome(
                    status="busy",
                    message=f"Images are already loading for {name}",
                    gallery=self._view(train_id),
                )
            state.is_loading = True
            page = state.next_page if is_load_more else 1

        try:
            outcome = self._fetch_and_merge(
                train_id, name, page, is_load_more, allow_retry=not is_load_more
            )
        finally:
            with self._lock:
                state.is_loading = False

        outcome.gallery = self.view(train_id)
        return outcome

    def _fetch_and_merge(
        self,
        train_id: int,
        name: str,
        page: int,
        is_load_more: bool,
        allow_retry: bool,
    ) -> LoadOutcome:
        try:
            raw = self._fetch(build_query(name), start_offset(page))
        except ImageSearchError as exc:
            logger.error("Image search for %s failed: %s", name, exc)
            return LoadOutcome(status="error", message=f"Failed to load additional images: {exc}")
        except Exception as exc:
            logger.exception("Unexpected error fetching images for %s", name)
            return LoadOutcome(status="error", message=f"Failed to load additional images: {exc}")

        if not raw:
            if is_load_more:
                return LoadOutcome(status="no_more_images", message="No more images available")
            return LoadOutcome(status="no_images", message=f"No additional images found for {name}")

        links = filter_denylisted(raw)
        if len(links) != len(raw):
            logger.info("Filtered out %d denylisted images for %s", len(raw) - len(links), name)

        if not links:
            if allow_retry:
                logger.info("No suitable images for %s on page %d, trying page %d", name, page, page + 1)
                outcome = self._fetch_and_merge(train_id, name, page + 1, True, allow_retry=False)
                outcome.retried = True
                return outcome
            return LoadOutcome(status="no_suitable_images", message="No more suitable images available")

        with self._lock:
            state = self._state(train_id)
            if is_load_more:
                state.extra_images = state.extra_images + links
            else:
                state.extra_images = links
            total = len(self._images(train_id))
            if state.current_index >= total:
                state.current_index %= total
            state.next_page = page + 1

        return LoadOutcome(
            status="loaded",
            message=f"Loaded {len(links)} images for {name}",
            added=len(links),
        )
