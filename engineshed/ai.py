# engineshed/ai.py
"""
"Which train is this?" guesses from a large language model.

Two backends produce the completion text: an OpenAI-compatible chat
completions endpoint (default) and a local Hugging Face text2text
pipeline. The local model is loaded on first use only, so the service
starts without it.

The structured guess asks the model for JSON and normalizes whatever
comes back into a list of candidates. Bad JSON is never an error here.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from .config import Settings, get_settings
from .models import GuessCandidate

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant that specializes in trains from children's media."

_openai_client = None
_text2text_pipeline = None


def build_prompt(train_name: str) -> str:
    return (
        f'I\'m looking for a train that sounds like "{train_name}".\n'
        "It may not necessarily be in Thomas the Tank Engine but could be in "
        "similar train-based franchises.\n"
        "Please provide a succinct and to-the-point response about which train "
        "this could be.\n"
        "If there are multiple possibilities, list the most likely one first.\n"
        "Keep your response brief and focused."
    )


def build_structured_prompt(train_name: str) -> str:
    return (
        f'I\'m looking for a train that sounds like "{train_name}".\n'
        "It may not necessarily be in Thomas the Tank Engine but could be in "
        "similar train-based franchises.\n"
        "Reply with JSON only, in the form "
        '{"trains": [{"name": "...", "franchise": "...", "searchTerms": "..."}]}.\n'
        "List at most five trains, most likely first. searchTerms is a short "
        "image search query for that train."
    )


# === Backends ===

def _get_openai_client(settings: Settings):
    global _openai_client
    if _openai_client is None:
        from openai import OpenAI

        if not settings.openai_api_key:
            raise RuntimeError("OPENAI_API_KEY is not configured")
        kwargs: Dict[str, Any] = {"api_key": settings.openai_api_key}
        if settings.openai_base_url:
            kwargs["base_url"] = settings.openai_base_url
        _openai_client = OpenAI(**kwargs)
    return _openai_client


def _complete_openai(prompt: str, settings: Settings, json_mode: bool) -> str:
    client = _get_openai_client(settings)
    kwargs: Dict[str, Any] = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    completion = client.chat.completions.create(
        model=settings.openai_model,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        **kwargs,
    )
    return completion.choices[0].message.content or ""


def _complete_local(prompt: str, settings: Settings) -> str:
    global _text2text_pipeline
    if _text2text_pipeline is None:
        from transformers import AutoModelForSeq2SeqLM, AutoTokenizer, pipeline

        logger.info("Loading local model %s", settings.local_llm_model)
        tokenizer = AutoTokenizer.from_pretrained(settings.local_llm_model)
        model = AutoModelForSeq2SeqLM.from_pretrained(settings.local_llm_model)
        _text2text_pipeline = pipeline("text2text-generation", model=model, tokenizer=tokenizer)
    return _text2text_pipeline(f"{SYSTEM_PROMPT}\n\n{prompt}", max_new_tokens=256)[0]["generated_text"]


def generate_answer(prompt: str, json_mode: bool = False, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    if settings.guess_backend == "local":
        return _complete_local(prompt, settings)
    if settings.guess_backend != "openai":
        raise RuntimeError(f"Unknown guess backend: {settings.guess_backend}")
    return _complete_openai(prompt, settings, json_mode)


# === Guesses ===

def guess_train(train_name: str) -> str:
    """Return the model's free-text guess for ``train_name``."""
    if not train_name or not train_name.strip():
        raise ValueError("Train name is required")
    return generate_answer(build_prompt(train_name.strip()))


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _to_candidate(entry: Dict[str, Any]) -> GuessCandidate:
    name = str(entry.get("name") or "")
    return GuessCandidate(
        name=name,
        franchise=str(entry.get("franchise") or ""),
        search_terms=str(entry.get("searchTerms") or name),
    )


def normalize_candidates(payload: Any) -> List[Any]:
    """Turn a structured guess payload into a list of candidates.

    ``payload`` is the raw completion text or an already decoded value.
    An object holding a ``trains`` (or ``results``) array yields
    ``GuessCandidate`` items; a bare top-level array is returned as-is;
    anything else, including text that is not JSON, yields ``[]``.
    """
    if isinstance(payload, (str, bytes)):
        text = payload.decode("utf-8", errors="ignore") if isinstance(payload, bytes) else payload
        try:
            payload = json.loads(_FENCE_RE.sub("", text.strip()))
        except ValueError:
            logger.warning("Structured guess was not valid JSON")
            return []

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("trains", "results"):
            entries = payload.get(key)
            if isinstance(entries, list):
                return [_to_candidate(e) for e in entries if isinstance(e, dict)]
    return []


def guess_train_candidates(train_name: str) -> List[Any]:
    """Return candidate trains for ``train_name``, most likely first."""
    if not train_name or not train_name.strip():
        raise ValueError("Train name is required")
    raw = generate_answer(build_structured_prompt(train_name.strip()), json_mode=True)
    return normalize_candidates(raw)
