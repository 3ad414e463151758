"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET  /trains                        : filter trains by name/number/color
- GET  /trains/{train_id}             : one train card
- GET  /trains/{train_id}/gallery     : carousel state of a train
- POST /trains/{train_id}/gallery/next: show the next image
- POST /trains/{train_id}/gallery/prev: show the previous image
- POST /trains/{train_id}/gallery/load: fetch (more) images from image search
- GET  /images/search                 : raw image search (e.g. for AI guesses)
- GET  /debug/local                   : debug the loaded dataset
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from .gallery import GalleryStateManager
from .image_search import ImageSearchError, filter_denylisted, search_images, start_offset
from .schemas import (
    GalleryView,
    ImageSearchResult,
    LoadImagesRequest,
    LoadOutcome,
    Train,
    TrainCard,
    TrainList,
)
from .store import TRAINS, filter_trains, get_train

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

# One gallery table for the whole process; it lives until restart.
_gallery = GalleryStateManager(TRAINS)


def get_dataset() -> List[Train]:
    return TRAINS


def get_gallery() -> GalleryStateManager:
    return _gallery


def _card(train: Train, gallery: GalleryStateManager) -> TrainCard:
    return TrainCard(train=train, gallery=gallery.view(train.id))


def _find(train_id: int, dataset: List[Train]) -> Train:
    train = get_train(train_id, dataset)
    if train is None:
        raise HTTPException(status_code=404, detail="Train not found")
    return train


@router.get("/trains", response_model=TrainList)
def list_trains(
    q: Optional[str] = Query(default=None, description="Search by name, number or color"),
    dataset: List[Train] = Depends(get_dataset),
    gallery: GalleryStateManager = Depends(get_gallery),
) -> TrainList:
    trains = filter_trains(dataset, q)
    return TrainList(
        query=q or "",
        count=len(trains),
        no_results=not trains,
        message=None if trains else "No trains found matching your search.",
        items=[_card(t, gallery) for t in trains],
    )


@router.get("/trains/{train_id}", response_model=TrainCard)
def get_train_card(
    train_id: int,
    dataset: List[Train] = Depends(get_dataset),
    gallery: GalleryStateManager = Depends(get_gallery),
) -> TrainCard:
    return _card(_find(train_id, dataset), gallery)


@router.get("/trains/{train_id}/gallery", response_model=GalleryView)
def get_gallery_view(
    train_id: int,
    dataset: List[Train] = Depends(get_dataset),
    gallery: GalleryStateManager = Depends(get_gallery),
) -> GalleryView:
    _find(train_id, dataset)
    return gallery.view(train_id)


@router.post("/trains/{train_id}/gallery/next", response_model=GalleryView)
def next_image(
    train_id: int,
    dataset: List[Train] = Depends(get_dataset),
    gallery: GalleryStateManager = Depends(get_gallery),
) -> GalleryView:
    _find(train_id, dataset)
    gallery.next(train_id)
    return gallery.view(train_id)


@router.post("/trains/{train_id}/gallery/prev", response_model=GalleryView)
def prev_image(
    train_id: int,
    dataset: List[Train] = Depends(get_dataset),
    gallery: GalleryStateManager = Depends(get_gallery),
) -> GalleryView:
    _find(train_id, dataset)
    gallery.prev(train_id)
    return gallery.view(train_id)


@router.post("/trains/{train_id}/gallery/load", response_model=LoadOutcome)
def load_images(
    train_id: int,
    response: Response,
    req: Optional[LoadImagesRequest] = Body(default=None),
    dataset: List[Train] = Depends(get_dataset),
    gallery: GalleryStateManager = Depends(get_gallery),
) -> LoadOutcome:
    """Fetch images for a train.

    ``load_more=false`` (the "See More Images" button) replaces fetched
    images with page 1; ``load_more=true`` appends the next page. Empty
    results and search failures are reported in the outcome, not as HTTP
    errors. A load already in flight for the same train answers 409.
    """
    train = _find(train_id, dataset)
    load_more = req.load_more if req is not None else False
    outcome = gallery.load_images(train.id, train.name, is_load_more=load_more)
    if outcome.status == "busy":
        response.status_code = 409
    return outcome


@router.get("/images/search", response_model=ImageSearchResult)
def image_search(
    q: str = Query(..., min_length=1, description="Image search query"),
    page: int = Query(default=1, ge=1, description="Result page (1-indexed)"),
) -> ImageSearchResult:
    try:
        links = search_images(q, start_offset(page))
    except ImageSearchError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to load images: {exc}")
    return ImageSearchResult(query=q, page=page, links=filter_denylisted(links))


@router.get("/debug/local")
def debug_local(dataset: List[Train] = Depends(get_dataset)):
    """
    Debug endpoint to verify the train dataset is loaded.
    Visit: http://127.0.0.1:8000/api/catalog/debug/local
    """
    return {
        "count": len(dataset),
        "sample": [
            {"id": t.id, "name": t.name, "number": t.number}
            for t in dataset[:5]
        ],
    }
