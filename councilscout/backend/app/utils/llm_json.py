"""Parse-or-degrade handling for JSON-shaped language-model replies."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")


@dataclass
class Parsed(Generic[T]):
    value: T
    degraded: bool = False
    error: Optional[str] = None


def strip_code_fence(raw: str) -> str:
    """Trim a reply and drop one leading ```lang fence and one trailing fence."""
    text = (raw or "").strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_json_object(raw: str) -> Dict[str, Any]:
    data = json.loads(strip_code_fence(raw))
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def parse_or_degrade(raw: str, model: Type[T], degraded: Callable[[], T], *, stage: str = "LLM") -> Parsed[T]:
    try:
        return Parsed(model.model_validate(parse_json_object(raw)))
    except Exception as exc:
        logger.warning("[%s] Unparseable model reply (%s); using degraded record", stage, exc)
        return Parsed(degraded(), degraded=True, error=str(exc))


async def complete_or_degrade(
    call: Callable[[], Awaitable[str]],
    model: Type[T],
    degraded: Callable[[], T],
    *,
    stage: str = "LLM",
) -> Parsed[T]:
    """Run an inference call and parse its reply; any failure yields ``degraded()``."""
    try:
        raw = await call()
    except Exception as exc:
        logger.warning("[%s] Inference call failed (%s); using degraded record", stage, exc)
        return Parsed(degraded(), degraded=True, error=str(exc))
    return parse_or_degrade(raw, model, degraded, stage=stage)
