"""Response parsing, JSON repair and normalization.

Upstream models routinely wrap JSON in Markdown fences or get cut off at
their output-token limit. ``parse_model_json`` applies a best-effort repair
before giving up; ``normalize_analysis`` turns whatever survived into a
validated ``AnalysisResponse`` or rejects it.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .errors import InvalidResponseShapeError, MalformedResponseError
from .i18n import LANG_EN, tr
from .models import AnalysisResponse, DreamSymbol

log = logging.getLogger("dreamlens.normalizer")

_FENCE_OPEN = re.compile(r"```(?:json|JSON)?\s*")
_UNESCAPED_QUOTE = re.compile(r'(?<!\\)"')
_FIRST_OBJECT = re.compile(r"\{[\s\S]*\}")


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence wrappers (```json ... ```)."""
    return _FENCE_OPEN.sub("", text).replace("```", "").strip()


def repair_truncated_json(text: str) -> str:
    """Close an object that was cut off mid-stream.

    Approximate by design: an odd number of unescaped quotes means the text
    stopped inside a string, and every unmatched ``[``/``{`` gets its closer,
    brackets first. Brackets that appear inside string values are counted too.
    """
    repaired = text.rstrip()

    if len(_UNESCAPED_QUOTE.findall(repaired)) % 2:
        if repaired.endswith("\\"):
            repaired = repaired[:-1]
        repaired += '"'

    missing_brackets = repaired.count("[") - repaired.count("]")
    missing_braces = repaired.count("{") - repaired.count("}")
    if missing_brackets > 0:
        repaired += "]" * missing_brackets
    if missing_braces > 0:
        repaired += "}" * missing_braces
    return repaired


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def parse_model_json(
    text: str | None,
    *,
    provider: str = "",
    lang: str = LANG_EN,
    empty_on_failure: bool = False,
) -> Any:
    """Parse a model reply as JSON, repairing it when necessary.

    Steps: plain parse, parse without code fences, structural repair, then
    extraction of the first ``{...}`` block. When everything fails, either
    return ``{}`` (``empty_on_failure``, so shape validation reports the
    problem) or raise ``MalformedResponseError``.
    """
    raw = (text or "").strip()
    if raw:
        parsed = _loads(raw)
        if parsed is not None:
            return parsed

        cleaned = strip_code_fences(raw)
        parsed = _loads(cleaned)
        if parsed is not None:
            return parsed

        log.debug("Initial JSON parse failed for %s, attempting repair", provider or "reply")
        parsed = _loads(repair_truncated_json(cleaned))
        if parsed is not None:
            return parsed

        match = _FIRST_OBJECT.search(cleaned)
        if match:
            parsed = _loads(match.group(0))
            if parsed is not None:
                return parsed

    if empty_on_failure:
        log.warning("JSON repair failed for %s, continuing with an empty object", provider or "reply")
        return {}
    raise MalformedResponseError(
        tr(lang, "ERR_MALFORMED_RESPONSE", provider=provider or "AI"), provider=provider or None
    )


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def normalize_analysis(
    response: str | dict[str, Any],
    *,
    provider: str | None = None,
    lang: str = LANG_EN,
) -> AnalysisResponse:
    """Validate and coerce a reply into the canonical analysis shape.

    - strings are parsed as JSON (``MalformedResponseError`` on failure);
    - ``summary`` must be a non-empty string;
    - ``symbolism`` defaults to ``[]``; every entry needs name and meaning,
      otherwise the whole reply is rejected;
    - a missing ``analysis`` reuses ``summary``;
    - ``advice`` and ``questions`` keep only their string entries.
    """
    if isinstance(response, str):
        try:
            response = json.loads(response)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(
                tr(lang, "ERR_MALFORMED_RESPONSE", provider=provider or "AI"),
                provider=provider,
            ) from exc

    if not isinstance(response, dict):
        raise InvalidResponseShapeError(tr(lang, "ERR_RESPONSE_NOT_OBJECT"), provider=provider)

    summary = response.get("summary")
    if not _non_empty_str(summary):
        raise InvalidResponseShapeError(tr(lang, "ERR_SUMMARY_INVALID"), provider=provider)

    raw_symbols = response.get("symbolism")
    if not isinstance(raw_symbols, list):
        raw_symbols = []

    symbolism: list[DreamSymbol] = []
    for index, entry in enumerate(raw_symbols, start=1):
        name = entry.get("name") if isinstance(entry, dict) else None
        meaning = entry.get("meaning") if isinstance(entry, dict) else None
        if not name or not meaning:
            raise InvalidResponseShapeError(
                tr(lang, "ERR_SYMBOL_INVALID", index=index), provider=provider
            )
        symbolism.append(DreamSymbol(name=str(name), meaning=str(meaning)))

    analysis = response.get("analysis")
    if not _non_empty_str(analysis):
        analysis = summary

    return AnalysisResponse(
        summary=summary,
        symbolism=symbolism,
        analysis=analysis,
        advice=_string_list(response.get("advice")),
        questions=_string_list(response.get("questions")),
    )
