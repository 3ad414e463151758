# engineshed/main.py
import logging

from fastapi import FastAPI, HTTPException

from . import __version__, ai
from .catalog import catalog_router
from .config import get_settings
from .models import GuessAnswer, GuessCandidate, GuessRequest, StructuredGuess

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Engine Shed",
    description=(
        "Catalogue of Thomas the Tank Engine trains with search, image "
        "galleries backed by Google image search, and an AI guess for "
        "half-remembered train names."
    ),
    version=__version__,
)
app.include_router(catalog_router)


# Basic route for a quick check
@app.get("/")
def health_check():
    return {"status": "ok", "message": "Engine Shed is running"}


@app.post("/api/guess-train", response_model=GuessAnswer)
def guess_train_api(req: GuessRequest):
    if not (req.train_name or "").strip():
        raise HTTPException(status_code=400, detail="Train name is required")
    try:
        result = ai.guess_train(req.train_name)
    except Exception:
        logger.exception("Error calling the guess model")
        raise HTTPException(status_code=500, detail="Failed to process request")
    return GuessAnswer(result=result)


@app.post("/api/guess-train/structured", response_model=StructuredGuess)
def guess_train_structured_api(req: GuessRequest):
    if not (req.train_name or "").strip():
        raise HTTPException(status_code=400, detail="Train name is required")
    try:
        candidates = ai.guess_train_candidates(req.train_name)
    except Exception:
        logger.exception("Error calling the guess model")
        raise HTTPException(status_code=500, detail="Failed to process request")
    return StructuredGuess(
        trains=[
            c.model_dump(by_alias=True) if isinstance(c, GuessCandidate) else c
            for c in candidates
        ]
    )
