"""
Triage configuration - keyword table, severity thresholds and priority weights.

The scoring algorithms never hard-code domain vocabulary: everything they
need lives in the immutable config models below. Build a new config (or use
`with_keywords`) to change behaviour; configs are never mutated at runtime.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, Mapping, Optional, Tuple
from pathlib import Path
from types import MappingProxyType
import json
import logging

from app.core.settings import settings
from app.models.classification import Category, Severity
from app.models.errors import KeywordTableError

logger = logging.getLogger(__name__)


# Category -> keyword phrases. Declaration order is the tie-break order.
DEFAULT_CATEGORY_KEYWORDS: Mapping[Category, Tuple[str, ...]] = MappingProxyType({
    Category.POTHOLE: (
        "pothole", "hole", "crack", "asphalt", "pavement", "road damage",
        "concrete", "street", "road", "highway", "path", "sidewalk",
        "crater", "depression", "broken road", "damaged pavement",
        "tarmac", "bitumen", "pathway", "roadway", "thoroughfare",
    ),
    Category.GARBAGE: (
        "garbage", "trash", "waste", "litter", "rubbish", "bin", "dumpster",
        "plastic bag", "debris", "refuse", "junk", "dump", "landfill",
        "recycling", "waste basket", "waste container", "trash can",
        "bottle", "can", "wrapper", "paper", "cardboard", "waste bin",
    ),
    Category.BROKEN_LIGHT: (
        "street light", "lamp", "light pole", "lamppost", "broken light",
        "street lamp", "light", "bulb", "fixture", "lighting",
        "pole", "post", "illumination", "dark", "unlit",
        "spotlight", "floodlight", "lantern", "beacon",
    ),
    Category.WATER_LEAKAGE: (
        "water", "leak", "pipe", "flooding", "puddle", "drain", "sewer",
        "wet", "moisture", "flood", "overflow", "burst pipe", "plumbing",
        "hydrant", "water main", "drainage", "sewage",
        "waterfall", "stream", "rain", "liquid", "fountain",
    ),
    Category.GRAFFITI: (
        "graffiti", "vandalism", "spray paint", "wall art", "writing",
        "painted", "tag", "mural", "defacement", "vandalized",
        "street art", "paint", "drawing", "inscription",
    ),
})

# (threshold, severity) pairs, highest first. Scores below all thresholds are minor.
DEFAULT_SEVERITY_THRESHOLDS: Tuple[Tuple[float, Severity], ...] = (
    (0.7, Severity.CRITICAL),
    (0.4, Severity.MODERATE),
)


def _normalize_phrases(phrases) -> Tuple[str, ...]:
    """Case-fold, strip and de-duplicate phrases, keeping first-seen order."""
    seen = []
    for phrase in phrases:
        if not isinstance(phrase, str):
            raise KeywordTableError(f"Keyword must be a string, got {type(phrase).__name__}")
        folded = phrase.strip().casefold()
        if folded and folded not in seen:
            seen.append(folded)
    return tuple(seen)


class FallbackRule(BaseModel):
    """One ordered rule of the text fallback heuristic."""
    model_config = ConfigDict(frozen=True)

    category: Category
    terms: Tuple[str, ...]

    @field_validator("terms")
    @classmethod
    def check_terms(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return _normalize_phrases(value)


# Checked in this order; the first rule with a contained term wins.
DEFAULT_FALLBACK_RULES: Tuple[FallbackRule, ...] = (
    FallbackRule(category=Category.POTHOLE, terms=("pothole", "hole", "road")),
    FallbackRule(category=Category.GARBAGE, terms=("garbage", "trash", "waste")),
    FallbackRule(category=Category.BROKEN_LIGHT, terms=("light", "lamp")),
    FallbackRule(category=Category.WATER_LEAKAGE, terms=("water", "leak", "flood")),
)


class ClassificationConfig(BaseModel):
    """
    Everything the category mapper and fallback resolver need.

    Attributes:
        category_keywords: Category -> keyword phrases (declaration order breaks ties)
        severity_thresholds: Ordered (threshold, severity) pairs, highest first
        default_severity: Severity for scores below every threshold
        unmatched_severity: Severity reported for the thresholded "other" result
        match_threshold: Minimum accumulated score for a real category
        max_predictions: Number of top predictions considered
        position_decay: Per-rank weight decay
        model_name: Identifier recorded on mapper results
    """
    model_config = ConfigDict(frozen=True)

    category_keywords: Mapping[Category, Tuple[str, ...]] = Field(
        default_factory=lambda: DEFAULT_CATEGORY_KEYWORDS,
        validate_default=True,
    )
    severity_thresholds: Tuple[Tuple[float, Severity], ...] = DEFAULT_SEVERITY_THRESHOLDS
    default_severity: Severity = Severity.MINOR
    unmatched_severity: Severity = Severity.MODERATE
    match_threshold: float = 0.1
    max_predictions: int = Field(5, ge=1)
    position_decay: float = Field(0.15, ge=0.0)
    model_name: str = "google/vit-base-patch16-224"

    fallback_rules: Tuple[FallbackRule, ...] = DEFAULT_FALLBACK_RULES
    fallback_confidence: float = 0.6
    fallback_default_confidence: float = 0.5
    fallback_severity: Severity = Severity.MODERATE
    fallback_model_name: str = "fallback-url-based"
    fallback_default_model_name: str = "fallback-default"

    @field_validator("category_keywords")
    @classmethod
    def check_keywords(cls, value: Mapping[Category, Tuple[str, ...]]) -> Mapping[Category, Tuple[str, ...]]:
        if Category.OTHER in value:
            raise ValueError("'other' is the no-match category and cannot have keywords")
        return MappingProxyType({category: _normalize_phrases(phrases) for category, phrases in value.items()})

    @field_validator("severity_thresholds")
    @classmethod
    def check_thresholds(cls, value):
        thresholds = [threshold for threshold, _ in value]
        if thresholds != sorted(thresholds, reverse=True):
            raise ValueError("severity_thresholds must be ordered from highest to lowest")
        return value

    def with_keywords(self, category: Category, phrases) -> "ClassificationConfig":
        """Return a new config with extra phrases appended to one category."""
        table = dict(self.category_keywords)
        table[category] = tuple(table.get(category, ())) + tuple(phrases)
        return self.model_validate({**dict(self), "category_keywords": table})


class PriorityConfig(BaseModel):
    """Weights of the additive priority formula."""
    model_config = ConfigDict(frozen=True)

    severity_weights: Mapping[str, int] = Field(
        default_factory=lambda: {
            Severity.CRITICAL.value: 70,
            Severity.MODERATE.value: 50,
            Severity.MINOR.value: 30,
        },
        validate_default=True,
    )
    default_severity_weight: int = 50
    vote_cap: int = 20
    age_window_days: float = 10.0

    @field_validator("severity_weights")
    @classmethod
    def freeze_weights(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        return MappingProxyType(dict(value))


def load_keyword_table(path: str) -> Dict[Category, Tuple[str, ...]]:
    """
    Load a keyword table from a JSON object of {category: [phrases...]}.

    Raises:
        KeywordTableError: File missing, not JSON, unknown category or bad phrases
    """
    file_path = Path(path)
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise KeywordTableError(f"Keyword table not found: {path}") from e
    except json.JSONDecodeError as e:
        raise KeywordTableError(f"Keyword table is not valid JSON: {path}: {e}") from e

    if not isinstance(raw, dict):
        raise KeywordTableError("Keyword table must be a JSON object of category -> list of phrases")

    table: Dict[Category, Tuple[str, ...]] = {}
    for name, phrases in raw.items():
        try:
            category = Category(name)
        except ValueError as e:
            raise KeywordTableError(f"Unknown category in keyword table: {name!r}") from e
        if category is Category.OTHER:
            raise KeywordTableError("'other' cannot have keywords")
        if not isinstance(phrases, list):
            raise KeywordTableError(f"Keywords for {name!r} must be a list")
        table[category] = _normalize_phrases(phrases)

    logger.info(f"Loaded keyword table from {path} ({len(table)} categories)")
    return table


def merge_keyword_tables(
    base: Mapping[Category, Tuple[str, ...]],
    extra: Mapping[Category, Tuple[str, ...]],
) -> Dict[Category, Tuple[str, ...]]:
    """Append extra phrases to base; new categories are declared after existing ones."""
    merged = {category: tuple(phrases) for category, phrases in base.items()}
    for category, phrases in extra.items():
        merged[category] = _normalize_phrases(merged.get(category, ()) + tuple(phrases))
    return merged


def build_classification_config(
    keyword_table_path: Optional[str] = None,
    mode: Optional[str] = None,
) -> ClassificationConfig:
    """
    Build a ClassificationConfig from settings.

    Args:
        keyword_table_path: Overrides settings.KEYWORD_TABLE_PATH
        mode: "extend" (append to defaults) or "replace"; overrides settings.KEYWORD_TABLE_MODE
    """
    path = keyword_table_path or settings.KEYWORD_TABLE_PATH
    mode = (mode or settings.KEYWORD_TABLE_MODE).lower()

    keywords: Dict[Category, Tuple[str, ...]] = dict(DEFAULT_CATEGORY_KEYWORDS)
    if path:
        loaded = load_keyword_table(path)
        if mode == "replace":
            keywords = loaded
        elif mode == "extend":
            keywords = merge_keyword_tables(keywords, loaded)
        else:
            raise KeywordTableError(f"Unknown keyword table mode: {mode!r}")

    return ClassificationConfig(
        category_keywords=keywords,
        match_threshold=settings.MATCH_THRESHOLD,
        max_predictions=settings.MAX_PREDICTIONS,
        model_name=settings.LABEL_MODEL_NAME,
    )
