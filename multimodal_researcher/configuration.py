"""
Runtime configuration for the research pipeline.

Values resolve in this order (first match wins):
1. Call-time overrides from ``config["configurable"]``
2. Environment variables named after the upper-cased field (``SEARCH_MODEL``)
3. Field defaults
"""

import logging
import math
import os
from typing import Any, Dict, Mapping, Optional

from langchain_core.runnables import RunnableConfig
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Configuration(BaseModel):
    """Immutable settings for one pipeline run."""

    model_config = ConfigDict(frozen=True)

    # Models
    search_model: str = "gemini-2.5-flash"
    synthesis_model: str = "gemini-2.5-flash"
    video_model: str = "gemini-2.5-flash"
    tts_model: str = "gemini-2.5-flash-preview-tts"

    # Sampling
    search_temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    synthesis_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    podcast_script_temperature: float = Field(default=0.4, ge=0.0, le=2.0)

    # Voices for the two podcast speakers
    mike_voice: str = "Kore"
    sarah_voice: str = "Puck"

    # PCM parameters of the TTS output
    tts_channels: int = Field(default=1, ge=1)
    tts_rate: int = Field(default=24_000, ge=1)
    tts_sample_width: int = Field(default=2, ge=1)

    # Retries handed to the client for text generation
    max_retries: int = Field(default=2, ge=0)

    # Where the podcast WAV lands when no explicit path is given
    output_dir: str = "."

    @classmethod
    def from_runnable_config(cls, config: Optional[RunnableConfig] = None) -> "Configuration":
        """
        Build a configuration from a LangGraph/LangChain runnable config.

        Args:
            config: Runnable config whose ``configurable`` mapping carries overrides

        Returns:
            Resolved configuration
        """
        configurable: Mapping[str, Any] = {}
        if config:
            configurable = config.get("configurable") or {}
        return cls.from_overrides(configurable)

    @classmethod
    def from_environment(cls) -> "Configuration":
        """Build a configuration from environment variables and defaults only."""
        return cls.from_overrides({})

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any]) -> "Configuration":
        values: Dict[str, Any] = {}

        for name in cls.model_fields:
            raw = overrides.get(name)
            if raw is None:
                raw = os.environ.get(name.upper())
            if raw is None:
                continue
            values[name] = cls._coerce(name, raw)

        return cls(**values)

    @classmethod
    def _coerce(cls, name: str, value: Any) -> Any:
        field = cls.model_fields[name]
        default = field.default

        if field.annotation is str:
            return str(value)

        if field.annotation is int:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                if math.isfinite(value):
                    return int(value)
            else:
                try:
                    return int(float(str(value).strip()))
                except (TypeError, ValueError, OverflowError):
                    pass
            logger.warning(f"Invalid integer for {name}: {value!r}, using default {default}")
            return default

        try:
            parsed = float(value)
        except (TypeError, ValueError):
            parsed = math.nan
        if math.isfinite(parsed):
            return parsed
        logger.warning(f"Invalid number for {name}: {value!r}, using default {default}")
        return default
