"""
Expression categories, display tables and the dominant-label reduction.
"""
from __future__ import annotations
from typing import Dict, Mapping, Optional, Tuple

# Enumeration order doubles as the tie-break order for dominant_expression.
CATEGORIES: Tuple[str, ...] = ("neutral", "happy", "sad", "angry", "fearful", "disgusted", "surprised")

NO_FACE = "no_face"
PENDING = "pending"
SENTINELS: Tuple[str, ...] = (NO_FACE, PENDING)

DEFAULT_COLOR = "#282c34"

EXPRESSION_LABELS: Dict[str, str] = {
    "neutral": "Neutral",
    "happy": "Happy",
    "sad": "Sad",
    "angry": "Angry",
    "fearful": "Fearful",
    "disgusted": "Disgusted",
    "surprised": "Surprised",
    NO_FACE: "No face detected",
    PENDING: "Detecting...",
}

EXPRESSION_COLORS: Dict[str, str] = {
    "neutral": DEFAULT_COLOR,
    "happy": "#2E7D32",
    "sad": "#1565C0",
    "angry": "#C62828",
    "surprised": "#F9A825",
    "fearful": "#6A1B9A",
    "disgusted": "#795548",
}

EXPRESSION_EMOJI: Dict[str, str] = {
    "neutral": "\U0001F610",
    "happy": "\U0001F60A",
    "sad": "\U0001F622",
    "angry": "\U0001F620",
    "fearful": "\U0001F628",
    "disgusted": "\U0001F922",
    "surprised": "\U0001F62E",
}

# DeepFace emotion names -> our categories
_ALIASES: Dict[str, str] = {
    "fear": "fearful",
    "disgust": "disgusted",
    "surprise": "surprised",
}


def normalize_category(name: str) -> Optional[str]:
    """Map a library category name onto CATEGORIES, or None if unknown."""
    if not isinstance(name, str):
        return None
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    return key if key in CATEGORIES else None


def normalize_scores(raw: Mapping[str, float] | None, scale: float = 1.0) -> Dict[str, float]:
    """
    Convert a library score mapping into {category: score} over CATEGORIES.

    Unknown names are dropped; missing categories score 0.0.
    """
    out = {c: 0.0 for c in CATEGORIES}
    for name, value in (raw or {}).items():
        cat = normalize_category(name)
        if cat is None:
            continue
        try:
            out[cat] = float(value) / scale
        except (TypeError, ValueError):
            out[cat] = 0.0
    return out


def dominant_expression(scores: Mapping[str, float]) -> str:
    """
    Category with the highest score. Linear scan over CATEGORIES, so the
    first category encountered wins a tie.
    """
    best = CATEGORIES[0]
    best_score = float(scores.get(best, 0.0))
    for cat in CATEGORIES[1:]:
        s = float(scores.get(cat, 0.0))
        if s > best_score:
            best, best_score = cat, s
    return best


def label_for(label: str) -> str:
    return EXPRESSION_LABELS.get(label, label)


def color_for(label: str) -> str:
    return EXPRESSION_COLORS.get(label, DEFAULT_COLOR)


def emoji_for(label: str) -> str:
    return EXPRESSION_EMOJI.get(label, "")


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    """'#RRGGBB' -> (B, G, R) for OpenCV drawing calls."""
    h = color.lstrip("#")
    if len(h) != 6:
        raise ValueError(f"Not a #RRGGBB color: {color!r}")
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return b, g, r
