"""
Engine configuration.

Defaults match the usual BM25/RRF literature values (k1=1.2, b=0.75, k=60).
Values can be overridden from environment variables, which are loaded from
``.env.local`` (local dev, highest priority) or ``.env`` when present:

    SEARCH_BM25_K1            float, >= 0
    SEARCH_BM25_B             float, 0 - 1
    SEARCH_MIN_TERM_LENGTH    int, >= 1
    SEARCH_RRF_K              float, > 0
    SEARCH_SCORE_THRESHOLD    float (empty = disabled)
    SEARCH_KEYWORD_WEIGHT     float
    SEARCH_VECTOR_WEIGHT      float
    SEARCH_STEM               "true" / "false"
    SEARCH_USE_STOPWORDS      "true" / "false"
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import InvalidArgumentError
from .models import SearchMode

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent

ENV_VARS = {
    "k1": "SEARCH_BM25_K1",
    "b": "SEARCH_BM25_B",
    "min_term_length": "SEARCH_MIN_TERM_LENGTH",
    "rrf_k": "SEARCH_RRF_K",
    "score_threshold": "SEARCH_SCORE_THRESHOLD",
    "keyword_weight": "SEARCH_KEYWORD_WEIGHT",
    "vector_weight": "SEARCH_VECTOR_WEIGHT",
    "stem": "SEARCH_STEM",
    "use_stopwords": "SEARCH_USE_STOPWORDS",
}


class EngineConfig(BaseModel):
    """Engine-wide settings; per-query ``SearchOptions`` override a subset."""
    model_config = ConfigDict(frozen=True)

    k1: float = Field(default=1.2, ge=0.0, description="BM25 term frequency saturation")
    b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization strength")
    min_term_length: int = Field(default=2, ge=1, description="Shortest token kept by the tokenizer")
    rrf_k: float = Field(default=60.0, gt=0.0, description="RRF rank constant")
    score_threshold: Optional[float] = Field(
        default=None,
        description="Drop results scoring below this value (None = disabled)"
    )
    keyword_weight: float = Field(default=0.5, description="RRF weight of the BM25 ranking")
    vector_weight: float = Field(default=0.5, description="RRF weight of the vector ranking")
    high_df_ratio: float = Field(
        default=0.3, ge=0.0, le=1.0,
        description="df/N at or below which a term counts as HIGH contribution"
    )
    medium_df_ratio: float = Field(
        default=0.7, ge=0.0, le=1.0,
        description="df/N at or below which a term counts as MEDIUM contribution"
    )
    long_document_ratio: float = Field(
        default=1.5, ge=1.0,
        description="Documents longer than avgdl times this are flagged as length-penalized"
    )
    stem: bool = Field(default=False, description="Apply Snowball stemming to documents and queries")
    use_stopwords: bool = Field(default=False, description="Drop English stopwords")

    @model_validator(mode="after")
    def check_df_ratios(self) -> "EngineConfig":
        if self.medium_df_ratio < self.high_df_ratio:
            raise ValueError(
                f"medium_df_ratio ({self.medium_df_ratio}) must be >= high_df_ratio ({self.high_df_ratio})"
            )
        return self

    @classmethod
    def build(cls, **values: Any) -> "EngineConfig":
        """Validate ``values``, raising ``InvalidArgumentError`` instead of pydantic's error."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidArgumentError(_describe(e)) from e


class SearchOptions(BaseModel):
    """Per-query options. Unset fields fall back to the engine's ``EngineConfig``."""
    model_config = ConfigDict(frozen=True)

    mode: Optional[SearchMode] = Field(
        default=None,
        description="Retrieval strategy (default: hybrid if a vector ranking is given, else bm25)"
    )
    k1: Optional[float] = Field(default=None, ge=0.0)
    b: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    rrf_k: Optional[float] = Field(default=None, gt=0.0)
    score_threshold: Optional[float] = None
    keyword_weight: Optional[float] = None
    vector_weight: Optional[float] = None
    top_k: Optional[int] = Field(default=None, ge=1, description="Maximum number of results")

    @classmethod
    def build(cls, **values: Any) -> "SearchOptions":
        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidArgumentError(_describe(e)) from e

    def apply_to(self, config: EngineConfig) -> EngineConfig:
        """Config for one query: ``config`` with this query's overrides applied."""
        overrides = self.model_dump(exclude_none=True, exclude={"mode", "top_k"})
        if not overrides:
            return config
        return EngineConfig.build(**{**config.model_dump(), **overrides})


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def load_environment(project_root: Union[str, Path, None] = None) -> Optional[Path]:
    """
    Load .env.local (highest priority) or .env into os.environ.

    Returns:
        Path of the file that was loaded, or None
    """
    root = Path(project_root) if project_root else PROJECT_ROOT
    env_local = root / ".env.local"
    env_file = root / ".env"

    if env_local.exists():
        load_dotenv(env_local, override=True)
        logger.debug(f"Loaded environment from: {env_local}")
        return env_local
    if env_file.exists():
        load_dotenv(env_file, override=True)
        logger.debug(f"Loaded environment from: {env_file}")
        return env_file
    return None


def load_config(
    environ: Optional[Dict[str, str]] = None,
    project_root: Union[str, Path, None] = None,
) -> EngineConfig:
    """
    Build an EngineConfig from environment variables.

    Args:
        environ: Mapping to read instead of os.environ (no .env loading then)
        project_root: Where to look for .env.local / .env

    Raises:
        InvalidArgumentError: if a variable holds an invalid value
    """
    if environ is None:
        load_environment(project_root)
        environ = os.environ

    values: Dict[str, Any] = {}
    for field_name, var in ENV_VARS.items():
        raw = environ.get(var)
        if raw is None:
            continue
        raw = raw.strip()
        if field_name == "score_threshold" and raw == "":
            values[field_name] = None
        elif field_name in ("stem", "use_stopwords"):
            values[field_name] = raw.lower() in ("1", "true", "yes", "on")
        else:
            values[field_name] = raw

    config = EngineConfig.build(**values)
    if values:
        logger.info(f"Engine config from environment: {sorted(values)}")
    return config
