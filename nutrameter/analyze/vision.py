# -*- coding: utf-8 -*-
"""Analyze: meal photo estimate via the Gemini generateContent API."""

from __future__ import annotations

import ast
import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..errors import ServiceUnconfigured, UpstreamServiceError, ValidationError
from ..meals.models import clamp_health_score, normalize_micronutrients
from .models import NutritionEstimate

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_api_key_here"

NUTRITIONIST_PROMPT = """You are a certified nutritionist AI. Analyze the food image carefully.
Identify all visible food items.
Estimate portion sizes realistically.
Provide a detailed nutritional breakdown.

Return ONLY valid JSON in this exact format (no markdown, no explanation):
{
  "food_items": ["item1", "item2"],
  "calories": 450,
  "macros": {
    "protein": 25,
    "carbs": 45,
    "fats": 15,
    "fiber": 5,
    "sugar": 8
  },
  "micronutrients": {
    "vitaminA": 120,
    "vitaminC": 35,
    "vitaminD": 0,
    "vitaminE": 2,
    "iron": 3.5,
    "calcium": 150,
    "potassium": 520,
    "sodium": 480,
    "magnesium": 45,
    "zinc": 2.1
  },
  "health_score": 72,
  "recommendations": [
    "Consider adding more vegetables for fiber",
    "Good protein source detected"
  ]
}

Ensure estimates are realistic and scientifically reasonable. If you cannot identify food items, make your best estimate based on visual cues."""


@dataclass(frozen=True)
class VisionSettings:
    api_key: str
    base_url: str
    model: str
    timeout: float


def resolve_vision_settings() -> VisionSettings:
    api_key = (settings.gemini_api_key or "").strip()
    if not api_key or api_key == PLACEHOLDER_API_KEY:
        raise ServiceUnconfigured("Gemini API key not configured")
    return VisionSettings(
        api_key=api_key,
        base_url=settings.gemini_base_url.rstrip("/"),
        model=settings.gemini_model,
        timeout=settings.gemini_timeout,
    )


def decode_image(image_base64: Optional[str]) -> bytes:
    """Validate the base64 payload; tolerates a `data:<mime>;base64,` prefix."""
    raw = (image_base64 or "").strip()
    if raw.startswith("data:") and "," in raw:
        raw = raw.split(",", 1)[1]
    if not raw:
        raise ValidationError("Image data is required")
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image data is not valid base64") from exc
    if not data:
        raise ValidationError("Image data is required")
    if len(data) > settings.max_image_bytes:
        raise ValidationError("Image is too large")
    return data


def _remove_trailing_commas(text: str) -> str:
    """Remove trailing commas before `}`/`]` while preserving string literals."""
    out: list[str] = []
    in_str = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_str:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            i += 1
            continue

        if ch == "\"":
            in_str = True
        elif ch == ",":
            j = i + 1
            while j < len(text) and text[j] in " \t\r\n":
                j += 1
            if j < len(text) and text[j] in "}]":
                i += 1
                continue

        out.append(ch)
        i += 1
    return "".join(out)


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned, flags=re.IGNORECASE)
    return re.sub(r"\s*```$", "", cleaned)


def _iter_json_object_candidates(text: str) -> list[str]:
    """Extract balanced {...} candidates from arbitrary text.

    Models sometimes wrap JSON with prose or markdown fences, so we scan for
    balanced braces while respecting string literals.
    """
    cleaned = _strip_fences(text)
    candidates: list[str] = []
    in_str = False
    escaped = False
    depth = 0
    start_idx: int | None = None

    for i, ch in enumerate(cleaned):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue

        if ch == "\"":
            in_str = True
        elif ch == "{":
            if depth == 0:
                start_idx = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start_idx is not None:
                candidates.append(cleaned[start_idx : i + 1])
                start_idx = None

    return candidates


def _sanitize_json_like(text: str) -> str:
    # Curly quotes, trailing commas and non-finite floats.
    cleaned = text.replace("“", "\"").replace("”", "\"").replace("‘", "'").replace("’", "'")
    cleaned = _remove_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"-?\bInfinity\b", "null", cleaned, flags=re.IGNORECASE)
    return cleaned


def parse_model_output_json(content: str) -> Dict[str, Any]:
    """Parse the first JSON object found in model output text."""
    last_error: Exception | None = None

    try:
        parsed = json.loads(_strip_fences(content))
        if isinstance(parsed, dict):
            return parsed
    except ValueError as exc:
        last_error = exc

    for candidate in _iter_json_object_candidates(content):
        sanitized = _sanitize_json_like(candidate)
        for attempt in (candidate, sanitized):
            try:
                parsed = json.loads(attempt)
                if isinstance(parsed, dict):
                    return parsed
            except ValueError as exc:
                last_error = exc

        # Python-literal-ish dicts (single quotes).
        py = re.sub(r"\bnull\b", "None", sanitized)
        py = re.sub(r"\btrue\b", "True", py)
        py = re.sub(r"\bfalse\b", "False", py)
        try:
            parsed = ast.literal_eval(py)
            if isinstance(parsed, dict):
                return parsed
        except (ValueError, SyntaxError) as exc:
            last_error = exc

    raise ValueError(f"Could not parse AI response as JSON: {last_error}")


_NUM_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value == value else None
    if isinstance(value, str):
        m = _NUM_RE.search(value.replace(",", ""))
        return float(m.group(0)) if m else None
    return None


def _non_negative(value: Any) -> float:
    amount = _coerce_float(value)
    return max(0.0, amount) if amount is not None else 0.0


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        s = value.strip()
        return [s] if s else []
    if isinstance(value, list):
        out: List[str] = []
        for x in value:
            if x is None:
                continue
            s = x.strip() if isinstance(x, str) else str(x).strip()
            if s:
                out.append(s)
        return out
    return []


def normalize_estimate(parsed: Dict[str, Any]) -> NutritionEstimate:
    """Coerce model output into the meal nutrition shape, defaulting to zero/empty."""
    macros_raw = parsed.get("macros")
    if not isinstance(macros_raw, dict):
        macros_raw = {}
    return NutritionEstimate.model_validate(
        {
            "food_items": _as_str_list(parsed.get("food_items")),
            "calories": _non_negative(parsed.get("calories")),
            "macros": {
                key: _non_negative(macros_raw.get(key))
                for key in ("protein", "carbs", "fats", "fiber", "sugar")
            },
            "micronutrients": normalize_micronutrients(parsed.get("micronutrients")),
            "health_score": clamp_health_score(_coerce_float(parsed.get("health_score"))),
            "recommendations": _as_str_list(parsed.get("recommendations")),
        }
    )


def _extract_text(data: object) -> str:
    """Concatenate text parts of the first candidate."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


def _extract_error(data: object) -> Optional[str]:
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            return err["message"]
    return None


def build_payload(image_base64: str, mime_type: str) -> Dict[str, Any]:
    return {
        "contents": [
            {
                "parts": [
                    {"text": NUTRITIONIST_PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": image_base64}},
                ]
            }
        ],
        "generationConfig": {"responseMimeType": "application/json"},
    }


def analyze_image(
    *,
    image_base64: Optional[str],
    mime_type: str = "image/jpeg",
    transport: httpx.BaseTransport | None = None,
) -> NutritionEstimate:
    """Estimate nutrition for a meal photo.

    Raises ServiceUnconfigured when no API key is set, ValidationError for a
    missing or malformed image and UpstreamServiceError for any failure of the
    model call or its output.
    """
    cfg = resolve_vision_settings()
    image = decode_image(image_base64)
    encoded = base64.b64encode(image).decode("ascii")

    url = f"{cfg.base_url}/models/{cfg.model}:generateContent"
    headers = {"Content-Type": "application/json", "x-goog-api-key": cfg.api_key}

    try:
        with httpx.Client(timeout=cfg.timeout, transport=transport) as client:
            resp = client.post(url, headers=headers, json=build_payload(encoded, mime_type))
    except httpx.HTTPError as exc:
        logger.warning("gemini request failed: %s", exc)
        raise UpstreamServiceError() from exc

    try:
        data = resp.json()
    except ValueError:
        data = None

    if resp.status_code >= 400:
        message = _extract_error(data) or f"HTTP {resp.status_code}"
        logger.warning("gemini returned an error: %s", message)
        raise UpstreamServiceError()

    content = _extract_text(data)
    try:
        parsed = parse_model_output_json(content)
    except ValueError as exc:
        logger.warning("gemini output parse failed: %s", exc)
        raise UpstreamServiceError() from exc

    estimate = normalize_estimate(parsed)
    logger.info(
        "meal photo analyzed: model=%s items=%d calories=%.0f",
        cfg.model,
        len(estimate.food_items),
        estimate.calories,
    )
    return estimate
