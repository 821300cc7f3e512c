"""Per-tool parameter extraction and subject-text resolution.

Every field is an independent keyword lookup over the lower-cased parameter
tail. Within a field the first category in declaration order wins, and a field
with no matching keyword takes its default, so extraction is total.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from typing import TypeVar

from pydantic import BaseModel, Field

from docs_agent.types import DocumentContext, ParsedRequest

E = TypeVar("E", bound=Enum)


class SummaryStyle(str, Enum):
    BULLET_POINTS = "bullet-points"
    DETAILED = "detailed"
    CONCISE = "concise"


class SummaryLength(str, Enum):
    SHORT = "short"
    LONG = "long"
    MEDIUM = "medium"


class RewriteStyle(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    ACADEMIC = "academic"
    CREATIVE = "creative"
    SIMPLE = "simple"
    IMPROVE = "improve"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    PERSUASIVE = "persuasive"
    AUTHORITATIVE = "authoritative"
    EMPATHETIC = "empathetic"
    NEUTRAL = "neutral"


class RewriteLength(str, Enum):
    SHORTER = "shorter"
    LONGER = "longer"
    SAME = "same"


class ExplainStyle(str, Enum):
    SIMPLE = "simple"
    DETAILED = "detailed"
    TECHNICAL = "technical"
    ACADEMIC = "academic"
    CONVERSATIONAL = "conversational"
    CLEAR = "clear"


class Audience(str, Enum):
    BEGINNER = "beginner"
    EXPERT = "expert"
    CHILD = "child"
    GENERAL = "general"


class Depth(str, Enum):
    BRIEF = "brief"
    DETAILED = "detailed"
    MODERATE = "moderate"


class Language(str, Enum):
    SPANISH = "spanish"
    FRENCH = "french"
    GERMAN = "german"
    ITALIAN = "italian"
    PORTUGUESE = "portuguese"
    CHINESE = "chinese"
    JAPANESE = "japanese"
    KOREAN = "korean"
    RUSSIAN = "russian"
    ARABIC = "arabic"
    UNSPECIFIED = "unspecified"


class FormatType(str, Enum):
    BULLETED_LIST = "bulleted-list"
    TABLE = "table"
    OUTLINE = "outline"
    PARAGRAPHS = "paragraphs"
    HEADINGS = "headings"
    STRUCTURED = "structured"


SUMMARY_STYLE_KEYWORDS = {
    SummaryStyle.BULLET_POINTS: ("bullet", "points", "list"),
    SummaryStyle.DETAILED: ("detailed", "comprehensive", "thorough"),
}
SUMMARY_LENGTH_KEYWORDS = {
    SummaryLength.SHORT: ("short", "brief", "quick"),
    SummaryLength.LONG: ("long", "detailed", "extensive"),
}
REWRITE_STYLE_KEYWORDS = {
    RewriteStyle.FORMAL: ("formal", "professional", "business", "official"),
    RewriteStyle.CASUAL: ("casual", "informal", "conversational", "relaxed"),
    RewriteStyle.ACADEMIC: ("academic", "scholarly", "research", "technical"),
    RewriteStyle.CREATIVE: ("creative", "artistic", "expressive", "imaginative"),
    RewriteStyle.SIMPLE: ("simple", "clear", "plain", "straightforward"),
    RewriteStyle.IMPROVE: ("improve", "better", "enhance", "polish"),
}
TONE_KEYWORDS = {
    Tone.PROFESSIONAL: ("professional", "business", "corporate"),
    Tone.FRIENDLY: ("friendly", "warm", "approachable", "welcoming"),
    Tone.PERSUASIVE: ("persuasive", "convincing", "compelling"),
    Tone.AUTHORITATIVE: ("authoritative", "confident", "expert"),
    Tone.EMPATHETIC: ("empathetic", "understanding", "compassionate"),
    Tone.NEUTRAL: ("neutral", "objective", "balanced"),
}
REWRITE_LENGTH_KEYWORDS = {
    RewriteLength.SHORTER: ("shorter", "concise", "brief"),
    RewriteLength.LONGER: ("longer", "expand", "elaborate"),
}
SPECIFIC_INSTRUCTIONS: tuple[tuple[str, str], ...] = (
    ("grammar", "Fix grammar and spelling"),
    ("clarity", "Improve clarity"),
    ("flow", "Improve flow and readability"),
    ("active voice", "Use active voice"),
    ("passive voice", "Use passive voice"),
    ("remove jargon", "Remove jargon and technical terms"),
    ("add examples", "Add examples or illustrations"),
)
EXPLAIN_STYLE_KEYWORDS = {
    ExplainStyle.SIMPLE: ("simple", "easy", "basic", "plain"),
    ExplainStyle.DETAILED: ("detailed", "comprehensive", "thorough", "in-depth"),
    ExplainStyle.TECHNICAL: ("technical", "precise", "scientific", "formal"),
    ExplainStyle.ACADEMIC: ("academic", "scholarly", "research-based"),
    ExplainStyle.CONVERSATIONAL: ("conversational", "casual", "friendly"),
}
AUDIENCE_KEYWORDS = {
    Audience.BEGINNER: ("beginner", "novice", "new to"),
    Audience.EXPERT: ("expert", "advanced", "professional"),
    Audience.CHILD: ("child", "kid", "5 year old"),
}
DEPTH_KEYWORDS = {
    Depth.BRIEF: ("brief", "quick", "short"),
    Depth.DETAILED: ("detailed", "comprehensive", "thorough"),
}
LANGUAGE_KEYWORDS = {
    Language.SPANISH: ("spanish", "español"),
    Language.FRENCH: ("french", "français"),
    Language.GERMAN: ("german", "deutsch"),
    Language.ITALIAN: ("italian", "italiano"),
    Language.PORTUGUESE: ("portuguese", "português"),
    Language.CHINESE: ("chinese", "mandarin"),
    Language.JAPANESE: ("japanese",),
    Language.KOREAN: ("korean",),
    Language.RUSSIAN: ("russian",),
    Language.ARABIC: ("arabic",),
}
LANGUAGE_CODES = {
    Language.SPANISH: "es",
    Language.FRENCH: "fr",
    Language.GERMAN: "de",
    Language.ITALIAN: "it",
    Language.PORTUGUESE: "pt",
    Language.CHINESE: "zh",
    Language.JAPANESE: "ja",
    Language.KOREAN: "ko",
    Language.RUSSIAN: "ru",
    Language.ARABIC: "ar",
}
FORMAT_KEYWORDS = {
    FormatType.BULLETED_LIST: ("bullet", "list"),
    FormatType.TABLE: ("table",),
    FormatType.OUTLINE: ("outline",),
    FormatType.PARAGRAPHS: ("paragraph",),
    FormatType.HEADINGS: ("heading",),
}
GENERATE_LENGTH_KEYWORDS = {
    SummaryLength.SHORT: ("short", "brief", "quick"),
    SummaryLength.LONG: ("long", "detailed", "extensive"),
}

STOP_WORDS = frozenset(
    "the a an and or but in on at to for of with by is are was were be been have has had "
    "do does did will would could should may might can this that these those".split()
)
# Trigger words of the explain intent; never useful as key terms.
EXPLAIN_TRIGGER_WORDS = frozenset(
    "explain clarify what help understand please mean means me".split()
)

_QUOTED = re.compile(r"[\"“]([^\"”]+)[\"”]")
_WHAT_IS = re.compile(r"what\s+(?:is|does|are)\s+(.+?)(?:\?|$)", re.IGNORECASE)


class SummarizeParameters(BaseModel):
    style: SummaryStyle = SummaryStyle.CONCISE
    length: SummaryLength = SummaryLength.MEDIUM


class RewriteParameters(BaseModel):
    style: RewriteStyle = RewriteStyle.IMPROVE
    tone: Tone = Tone.NEUTRAL
    length: RewriteLength = RewriteLength.SAME
    specific_instructions: list[str] = Field(default_factory=list)


class ExplainParameters(BaseModel):
    style: ExplainStyle = ExplainStyle.CLEAR
    audience: Audience = Audience.GENERAL
    depth: Depth = Depth.MODERATE
    include_examples: bool = True


class TranslateParameters(BaseModel):
    target_language: Language = Language.UNSPECIFIED


class FormatParameters(BaseModel):
    format_type: FormatType = FormatType.STRUCTURED


class GenerateParameters(BaseModel):
    tone: Tone = Tone.NEUTRAL
    length: SummaryLength = SummaryLength.MEDIUM


class GeneralParameters(BaseModel):
    pass


ExtractedParameters = (
    SummarizeParameters
    | RewriteParameters
    | ExplainParameters
    | TranslateParameters
    | FormatParameters
    | GenerateParameters
    | GeneralParameters
)


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(r"(?<!\w)" + re.escape(keyword))


def mentions(text: str, keyword: str) -> bool:
    """True when ``keyword`` occurs in ``text`` starting at a word boundary."""
    return _keyword_pattern(keyword).search(text) is not None


def _first_match(text: str, table: Mapping[E, tuple[str, ...]], default: E) -> E:
    for value, keywords in table.items():
        if any(mentions(text, keyword) for keyword in keywords):
            return value
    return default


def extract_summarize(tail: str) -> SummarizeParameters:
    text = (tail or "").lower()
    return SummarizeParameters(
        style=_first_match(text, SUMMARY_STYLE_KEYWORDS, SummaryStyle.CONCISE),
        length=_first_match(text, SUMMARY_LENGTH_KEYWORDS, SummaryLength.MEDIUM),
    )


def extract_rewrite(tail: str) -> RewriteParameters:
    text = (tail or "").lower()
    return RewriteParameters(
        style=_first_match(text, REWRITE_STYLE_KEYWORDS, RewriteStyle.IMPROVE),
        tone=_first_match(text, TONE_KEYWORDS, Tone.NEUTRAL),
        length=_first_match(text, REWRITE_LENGTH_KEYWORDS, RewriteLength.SAME),
        specific_instructions=[
            instruction
            for keyword, instruction in SPECIFIC_INSTRUCTIONS
            if mentions(text, keyword)
        ],
    )


def extract_explain(tail: str, *, include_examples_default: bool = True) -> ExplainParameters:
    text = (tail or "").lower()
    if mentions(text, "no examples") or mentions(text, "without examples"):
        include_examples = False
    elif mentions(text, "with examples") or mentions(text, "give examples"):
        include_examples = True
    else:
        include_examples = include_examples_default
    return ExplainParameters(
        style=_first_match(text, EXPLAIN_STYLE_KEYWORDS, ExplainStyle.CLEAR),
        audience=_first_match(text, AUDIENCE_KEYWORDS, Audience.GENERAL),
        depth=_first_match(text, DEPTH_KEYWORDS, Depth.MODERATE),
        include_examples=include_examples,
    )


def extract_translate(tail: str) -> TranslateParameters:
    text = (tail or "").lower()
    language = _first_match(text, LANGUAGE_KEYWORDS, Language.UNSPECIFIED)
    if language is Language.UNSPECIFIED:
        # Bare ISO codes only count after a preposition: "to es", "into de".
        for candidate, code in LANGUAGE_CODES.items():
            if re.search(rf"\b(?:to|into|in)\s+{code}\b", text):
                language = candidate
                break
    return TranslateParameters(target_language=language)


def extract_format(tail: str) -> FormatParameters:
    text = (tail or "").lower()
    return FormatParameters(
        format_type=_first_match(text, FORMAT_KEYWORDS, FormatType.STRUCTURED)
    )


def extract_generate(tail: str) -> GenerateParameters:
    text = (tail or "").lower()
    return GenerateParameters(
        tone=_first_match(text, TONE_KEYWORDS, Tone.NEUTRAL),
        length=_first_match(text, GENERATE_LENGTH_KEYWORDS, SummaryLength.MEDIUM),
    )


def quoted_text(tail: str) -> str:
    match = _QUOTED.search(tail or "")
    return match.group(1).strip() if match else ""


def what_is_subject(tail: str) -> str:
    match = _WHAT_IS.search(tail or "")
    return match.group(1).strip() if match else ""


def key_terms(tail: str, limit: int = 5) -> list[str]:
    words = re.findall(r"[\w'-]+", (tail or "").lower())
    return [
        word
        for word in words
        if len(word) > 2 and word not in STOP_WORDS and word not in EXPLAIN_TRIGGER_WORDS
    ][:limit]


def resolve_subject(
    request: ParsedRequest,
    context: DocumentContext,
    *,
    allow_document: bool = True,
    allow_what_is: bool = False,
    allow_key_terms: bool = False,
) -> str:
    """Pick the text a tool operates on.

    Precedence: quoted literal, "what is/does" phrasing, active selection,
    full document, key terms from the request.
    """

    tail = request.parameter_tail
    subject = quoted_text(tail)
    if subject:
        return subject
    if allow_what_is:
        subject = what_is_subject(tail)
        # "what does this mean?" names no concept; defer to the selection.
        if subject and key_terms(subject):
            return subject
    if context.has_selection:
        return context.selection
    if allow_document and context.content.strip():
        return context.content
    if allow_key_terms:
        return " ".join(key_terms(tail))
    return ""
