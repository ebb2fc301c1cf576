"""Pure text-extraction helpers: market figures, growth rates, scope, taglines.

Every function here takes text and returns plain values; none of them keep
state between calls.
"""

from __future__ import annotations

import re

from oxira.models.market import MarketScope, ScopedFigure

_UNITS = r"(trillion|billion|million|T|B|M)"

# Surface forms: "$X unit", "X unit USD/dollars", "USD X unit".
_DOLLAR_PATTERNS = (
    re.compile(r"\$\s*([\d,.]+)\s*" + _UNITS + r"\b", re.IGNORECASE),
    re.compile(
        r"(?<![\d.,$])([\d,.]+)\s*(trillion|billion|million)\s*(?:USD|dollars?)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\bUSD\s*([\d,.]+)\s*" + _UNITS + r"\b", re.IGNORECASE),
)

_MULTIPLIERS = {
    "trillion": 1e12,
    "t": 1e12,
    "billion": 1e9,
    "b": 1e9,
    "million": 1e6,
    "m": 1e6,
}

_GROWTH_PATTERNS = (
    re.compile(r"CAGR\s*(?:of\s*)?(\d+(?:\.\d+)?)\s*%", re.IGNORECASE),
    re.compile(
        r"compound\s+annual\s+growth\s+rate\s*(?:of\s*)?(\d+(?:\.\d+)?)\s*%", re.IGNORECASE
    ),
    re.compile(r"grow(?:ing|th)\s+(?:at\s+|of\s+)?(\d+(?:\.\d+)?)\s*%", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*%\s*(?:annual\s+)?(?:growth|CAGR)", re.IGNORECASE),
)

_NARROW_INDICATORS = re.compile(
    r"\b(?:apps?|software|platforms?|saas|digital|online|on-demand|cloud|subscriptions?)\b",
    re.IGNORECASE,
)
_BROAD_INDICATORS = re.compile(
    r"\b(?:industry|industries|services?\s+(?:market|sector)|sector|total\s+market|"
    r"overall|traditional)\b",
    re.IGNORECASE,
)

# Policy for text that names both scopes or neither. Broad is the
# conservative choice: overstating a digital slice is the worse error.
AMBIGUOUS_SCOPE_DEFAULT = MarketScope.BROAD

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+(?=[A-Z$\"'(])")

_HEADING_MARKER = re.compile(r"^#+\s*")
_BULLET_LINE = re.compile(r"^[-*•]\s+(.+)$", re.MULTILINE)
_NAV_PHRASES = ("log in", "sign up")
_BOILERPLATE_PHRASES = ("log in", "sign up", "terms", "privacy")

MAX_FEATURES = 5


def extract_dollar_figures(text: str) -> list[float]:
    """All USD magnitudes mentioned in *text*, in order of appearance.

    Overlapping matches of different surface forms ("$3 billion USD")
    count once.
    """
    found: list[tuple[int, int, float]] = []
    for pattern in _DOLLAR_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(start < f_end and f_start < end for f_start, f_end, _ in found):
                continue
            try:
                number = float(match.group(1).replace(",", ""))
            except ValueError:
                continue
            multiplier = _MULTIPLIERS.get(match.group(2).lower(), 1.0)
            found.append((start, end, number * multiplier))
    found.sort(key=lambda item: item[0])
    return [value for _, _, value in found]


def extract_growth_rate(text: str) -> str | None:
    """First CAGR/growth percentage in *text*, e.g. ``"12.5%"``."""
    for pattern in _GROWTH_PATTERNS:
        match = pattern.search(text)
        if match:
            return f"{match.group(1)}%"
    return None


def has_scope_indicator(text: str) -> bool:
    return bool(_NARROW_INDICATORS.search(text) or _BROAD_INDICATORS.search(text))


def classify_scope(text: str, default: MarketScope = AMBIGUOUS_SCOPE_DEFAULT) -> MarketScope:
    """Classify a market-size mention as a narrow digital segment or a broad industry."""
    has_narrow = bool(_NARROW_INDICATORS.search(text))
    has_broad = bool(_BROAD_INDICATORS.search(text))
    if has_narrow and not has_broad:
        return MarketScope.NARROW
    if has_broad and not has_narrow:
        return MarketScope.BROAD
    return default


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_BREAK.split(text) if s.strip()]


def extract_scoped_figures(title: str, snippet: str) -> list[ScopedFigure]:
    """Dollar figures from *snippet*, each tagged with its sentence's scope.

    A sentence that names no scope at all borrows context from the title.
    """
    scoped: list[ScopedFigure] = []
    for sentence in split_sentences(snippet):
        figures = extract_dollar_figures(sentence)
        if not figures:
            continue
        context = sentence if has_scope_indicator(sentence) else f"{title} {sentence}"
        scope = classify_scope(context)
        scoped.extend(ScopedFigure(value=value, scope=scope) for value in figures)
    return scoped


def extract_tagline(markdown: str) -> str | None:
    """A short standalone line near the top of a page, skipping navigation."""
    lines = [line for line in markdown[:500].split("\n") if line.strip()]
    for line in lines[:5]:
        cleaned = _HEADING_MARKER.sub("", line).strip()
        if not 10 <= len(cleaned) <= 100:
            continue
        lowered = cleaned.lower()
        if "|" in cleaned or any(phrase in lowered for phrase in _NAV_PHRASES):
            continue
        return cleaned
    return None


def extract_features(markdown: str) -> list[str]:
    """Up to five bullet-list lines that read like product features."""
    features: list[str] = []
    for match in _BULLET_LINE.finditer(markdown):
        feature = match.group(1).strip()
        lowered = feature.lower()
        if not 10 <= len(feature) <= 100:
            continue
        if any(phrase in lowered for phrase in _BOILERPLATE_PHRASES):
            continue
        features.append(feature)
        if len(features) >= MAX_FEATURES:
            break
    return features
