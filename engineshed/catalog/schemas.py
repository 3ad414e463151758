"""
Pydantic schema definitions for the catalog module.

The ``Train`` model is a catalogue record loaded once from the bundled
dataset and never modified afterwards, so it is declared frozen. The
remaining models are read models returned by the HTTP layer: a
``GalleryView`` holds everything a card needs to render its image
carousel, and ``LoadOutcome`` reports what a "load images" action did.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Literal  # Py3.8 compatibility


class Train(BaseModel):
    """A single train entry.

    ``images`` are the baseline images bundled with the record. They may
    be empty, in which case the card shows a placeholder until images are
    fetched from the image search service.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    number: str
    color: str
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class GalleryView(BaseModel):
    """Snapshot of one train's carousel.

    ``current_image`` doubles as the "Save Image" link. ``counter`` is the
    1-based "i / n" label; with no images it reads "1 / 0" like the card
    front-end always did. ``has_extra_images`` tells the client whether
    the "Load More Images" action applies.
    """

    train_id: int
    images: List[str]
    current_index: int
    current_image: Optional[str] = None
    total: int
    counter: str
    is_loading: bool = False
    has_extra_images: bool = False
    next_page: int = 1


class TrainCard(BaseModel):
    train: Train
    gallery: GalleryView


class TrainList(BaseModel):
    """Result of a catalogue search."""

    query: str = ""
    count: int
    no_results: bool = False
    message: Optional[str] = None
    items: List[TrainCard]


LoadStatus = Literal[
    "loaded",
    "busy",
    "no_images",
    "no_more_images",
    "no_suitable_images",
    "error",
]


class LoadOutcome(BaseModel):
    """What happened to a "load images" request.

    Only ``loaded`` changes the gallery. Every other status leaves the
    previously fetched images and the page cursor untouched.
    """

    status: LoadStatus
    message: Optional[str] = None
    added: int = 0
    retried: bool = False
    gallery: Optional[GalleryView] = None


class LoadImagesRequest(BaseModel):
    load_more: bool = False


class ImageSearchResult(BaseModel):
    query: str
    page: int
    links: List[str] = Field(default_factory=list)
