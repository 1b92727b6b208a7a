"""Text canonicalization for food and ingredient names."""

import re

_PARENTHETICAL = re.compile(r"\([^()]*\)")
_PUNCTUATION = re.compile(r"[,.\-]")
_WHITESPACE = re.compile(r"\s+")

_DAIRY_NOUNS = (
    "cottage cheese",
    "cream cheese",
    "mozzarella",
    "ricotta",
    "cheddar",
    "cheese",
    "yogurt",
    "yoghurt",
    "milk",
)

_FAT_MODIFIERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bnon ?fat\b"), "nonfat"),
    (re.compile(r"\bfat ?free\b"), "nonfat"),
    (re.compile(r"\bpart ?skim\b"), "part skim"),
    (
        re.compile(r"(?<!part )\bskim (?=(?:%s)\b)" % "|".join(_DAIRY_NOUNS)),
        "nonfat ",
    ),
)

_SPELLING_VARIANTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\byoghurts?\b"), "yogurt"),
    (re.compile(r"\bchilli\b"), "chili"),
    (re.compile(r"\bcorn starch\b"), "cornstarch"),
    (re.compile(r"\bgreek style\b"), "greek"),
)


def normalize(text: str) -> str:
    """Return the canonical form of a food or ingredient name.

    Lower-cases, collapses fat-content modifiers ("fat-free", "non-fat",
    "skim milk") to "nonfat", keeps "part skim" as two words, folds spelling
    variants and removes parenthetical notes and punctuation. Percent
    annotations such as "2%" are kept. The result is a fixed point:
    ``normalize(normalize(x)) == normalize(x)``.
    """
    value = _clean(text.lower())
    # a spelling fold can expose a modifier match and vice versa
    while True:
        folded = _clean(_fold(value))
        if folded == value:
            return value
        value = folded


def _fold(value: str) -> str:
    for pattern, replacement in (*_FAT_MODIFIERS, *_SPELLING_VARIANTS):
        value = pattern.sub(replacement, value)
    return value


def _clean(value: str) -> str:
    # innermost groups first so nested notes collapse completely
    stripped = _PARENTHETICAL.sub(" ", value)
    while stripped != value:
        value = stripped
        stripped = _PARENTHETICAL.sub(" ", value)
    value = _PUNCTUATION.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip()
