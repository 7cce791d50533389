"""Prompt construction shared by all adapters.

Single-stage adapters send ``build_analysis_prompt``; the Gemini pipeline
sends ``build_stage1_prompt`` followed by one ``build_symbol_prompt`` per
symbol name.
"""

from __future__ import annotations

from typing import Any

from .i18n import LANG_EN, LANG_LABELS, tr
from .models import DreamContext, DreamData, PsychMethod

#: Stage 1 only sees the head of very long descriptions.
STAGE1_DESCRIPTION_LIMIT = 3000

METHOD_INSTRUCTIONS: dict[PsychMethod, str] = {
    PsychMethod.JUNGIAN: (
        "Use Carl Jung's analytical psychology: archetypes, the Shadow, "
        "Anima/Animus, the collective unconscious, mythological symbols."
    ),
    PsychMethod.FREUDIAN: (
        "Use Freudian psychoanalysis: repressed wishes, hidden conflicts, "
        "the Oedipus complex, libido and symbolic disguise."
    ),
    PsychMethod.GESTALT: (
        "Use Gestalt therapy: treat every element of the dream as a projection "
        "of the dreamer's personality, dialogue with dream objects, 'here and now'."
    ),
    PsychMethod.COGNITIVE: (
        "Use the cognitive-experiential model: links between thoughts, beliefs, "
        "cognitive distortions and the dreamer's daytime experience."
    ),
    PsychMethod.EXISTENTIAL: (
        "Use the existential approach: freedom, responsibility, the search for "
        "meaning, fear of death."
    ),
    PsychMethod.AUTO: (
        "Choose the most suitable scientific psychological framework (Jung, Freud, "
        "Gestalt or Existentialism) and state explicitly which one you are using."
    ),
}

ANALYST_SYSTEM_INSTRUCTION = (
    "You are a professional dream analyst and psychologist. Give deep, insightful "
    "analyses and always reply with a single JSON object and no other text."
)
STAGE1_SYSTEM_INSTRUCTION = (
    "You are an expert psychologist. Write in a structured way, without filler. "
    "Follow the JSON format strictly."
)
SYMBOL_SYSTEM_INSTRUCTION = (
    "You are an expert in dream symbols. Write in detail, deeply and at length. "
    "Follow the JSON format strictly."
)

STAGE1_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "analysis": {"type": "STRING"},
        "advice": {"type": "ARRAY", "items": {"type": "STRING"}},
        "questions": {"type": "ARRAY", "items": {"type": "STRING"}},
        "symbol_names": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["summary", "analysis", "advice", "questions", "symbol_names"],
}

SYMBOL_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "meaning": {"type": "STRING"},
    },
    "required": ["name", "meaning"],
}

RESPONSE_FORMAT_BLOCK = """RESPONSE FORMAT (strictly one JSON object, nothing else):
{
  "summary": "Short summary (2-3 sentences)",
  "symbolism": [
    {"name": "Symbol 1", "meaning": "What the symbol means in this dream"},
    {"name": "Symbol 2", "meaning": "What the symbol means in this dream"}
  ],
  "analysis": "Detailed analysis (3-4 paragraphs, Markdown allowed)",
  "advice": ["Advice 1", "Advice 2", "Advice 3"],
  "questions": ["Reflection question 1", "Reflection question 2"]
}"""


def method_instruction(method: PsychMethod | str) -> str:
    """Return the framing block for ``method``; unknown values mean auto."""
    try:
        return METHOD_INSTRUCTIONS[PsychMethod(method)]
    except ValueError:
        return METHOD_INSTRUCTIONS[PsychMethod.AUTO]


def language_line(lang: str) -> str:
    return f"Language of the answer: {LANG_LABELS.get(lang, LANG_LABELS[LANG_EN])}."


def context_lines(context: DreamContext, lang: str = LANG_EN) -> list[str]:
    """Render every context field in a fixed, labeled order."""
    recurring = tr(lang, "YES") if context.recurring else tr(lang, "NO")
    return [
        f"- Emotion on waking: {context.emotion}",
        f"- Life situation: {context.life_situation}",
        f"- Associations: {context.associations}",
        f"- Recurring dream: {recurring}",
        f"- Day residue: {context.day_residue}",
        f"- Character types: {context.character_type}",
        f"- Dreamer's role: {context.dream_role}",
        f"- Physical sensations: {context.physical_sensation}",
    ]


def build_analysis_prompt(dream: DreamData, lang: str = LANG_EN) -> str:
    """Full single-request prompt, symbol meanings included."""
    parts = [
        method_instruction(dream.method),
        language_line(lang),
        "",
        "DREAM DESCRIPTION:",
        dream.description,
        "",
        "CONTEXT:",
        *context_lines(dream.context, lang),
        "",
        RESPONSE_FORMAT_BLOCK,
    ]
    return "\n".join(parts)


def build_stage1_prompt(dream: DreamData, lang: str = LANG_EN) -> str:
    """First stage: everything except symbol meanings.

    Asking only for symbol *names* keeps the reply short enough not to be
    cut off at the output-token limit.
    """
    description = dream.description[:STAGE1_DESCRIPTION_LIMIT]
    return "\n".join(
        [
            "You are a professional psychoanalyst with 20 years of experience. "
            "Perform the FIRST STAGE of a dream analysis.",
            language_line(lang),
            "",
            "INPUT:",
            f'- Dream: "{description}"',
            *context_lines(dream.context, lang),
            f"- Method: {method_instruction(dream.method)}",
            "",
            "TASK:",
            '1. Write "summary": the essence of the dream in 2-3 sentences.',
            '2. Write "analysis": a DEEP analysis of the whole situation. Take the '
            "dreamer's role (an observer may point to dissociation) and bodily "
            "reactions (psychosomatics) into account. Use Markdown headings (###), "
            "4-5 sections, paragraphs separated by a blank line.",
            '3. Give "advice": an array of 3 to 5 practical recommendations, '
            "each at least 2-3 sentences long, one recommendation per element.",
            '4. Give "questions": an array of 3 deep questions for reflection.',
            '5. List "symbol_names": an array of 3-5 names of key symbols. '
            "DO NOT write their meanings here, only the names.",
            "",
            "RESPONSE FORMAT: JSON.",
        ]
    )


def build_symbol_prompt(symbol_name: str, dream: DreamData, lang: str = LANG_EN) -> str:
    """Second stage: a detailed interpretation of one symbol."""
    ctx = dream.context
    return "\n".join(
        [
            f'SYMBOL ANALYSIS: "{symbol_name}"',
            "",
            f'FULL DREAM CONTEXT: "{dream.description}"',
            f"LIFE SITUATION: {ctx.life_situation}",
            f"ROLE IN THE DREAM: {ctx.dream_role}",
            f"PHYSICAL SENSATIONS: {ctx.physical_sensation}",
            f"EMOTION: {ctx.emotion}",
            "",
            "TASK:",
            f'Write the MOST DETAILED interpretation of the symbol "{symbol_name}" '
            "in the context of this dream and the dreamer's state.",
            "",
            "REQUIREMENTS:",
            f"1. {language_line(lang)}",
            "2. LENGTH: 3-4 full paragraphs (at least 800 characters).",
            f'3. FORMAT: JSON {{"name": "{symbol_name}", "meaning": "..."}}',
        ]
    )


def build_image_prompt(prompt: str) -> str:
    return (
        f'Generate a surreal, artistic, and dreamlike digital painting: "{prompt}".\n'
        "Style: Ethereal, psychological, symbolic, soft lighting, deep atmosphere, "
        "high quality concept art, darker tones to match a midnight theme."
    )


def connection_test_dream(lang: str = LANG_EN) -> DreamData:
    """Minimal dream used to probe a provider cheaply."""
    filler = tr(lang, "TEST_DREAM_FILLER")
    return DreamData(
        description=tr(lang, "TEST_DREAM_DESCRIPTION"),
        context=DreamContext(
            emotion=tr(lang, "TEST_DREAM_EMOTION"),
            life_situation=filler,
            associations=filler,
            recurring=False,
            day_residue=filler,
            character_type=filler,
            dream_role=filler,
            physical_sensation=filler,
        ),
        method=PsychMethod.AUTO,
    )
