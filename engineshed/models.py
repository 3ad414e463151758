# engineshed/models.py
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GuessRequest(BaseModel):
    train_name: Optional[str] = Field(default=None, alias="trainName")

    model_config = ConfigDict(populate_by_name=True)


class GuessAnswer(BaseModel):
    result: str


class GuessCandidate(BaseModel):
    name: str = ""
    franchise: str = ""
    search_terms: str = Field(default="", alias="searchTerms")

    model_config = ConfigDict(populate_by_name=True)


class StructuredGuess(BaseModel):
    # Either GuessCandidate objects or, for a bare top-level array from the
    # model, whatever entries it contained.
    trains: List[Any] = Field(default_factory=list)
