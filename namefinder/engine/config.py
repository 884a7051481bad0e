"""Configuration management for namefinder."""

from pathlib import Path
from typing import Optional, List

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator


class ResolverConfig(BaseModel):
    ttl_seconds: float = 86400.0
    degraded_ttl_seconds: float = 60.0
    max_retries: int = 1
    backoff_seconds: float = 0.12
    jitter_seconds: float = 0.035
    concurrency: int = 6
    timeout_seconds: float = 5.0
    doh_endpoint: str = "https://dns.google/resolve"
    rdap_endpoint: str = "https://rdap.verisign.com/com/v1/domain"

    @field_validator('concurrency')
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("concurrency must be at least 1")
        return v

    @field_validator('max_retries')
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_retries cannot be negative")
        return v


class SearchConfig(BaseModel):
    quality_threshold: float = 75.0
    meaning_floor: float = 60.0
    max_attempts: int = 5
    time_cap_seconds: float = 12.0
    pool_size: int = 700
    shortlist_size: int = 40
    target_tld: str = "com"
    alternate_tlds: List[str] = Field(default_factory=lambda: ["io", "ai", "co"])
    near_miss_probe: int = 16
    near_miss_limit: int = 6
    max_target: int = 10
    max_length_cap: int = 24

    @field_validator('quality_threshold', 'meaning_floor')
    @classmethod
    def validate_percent(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError("thresholds must be between 0 and 100")
        return v

    @field_validator('target_tld')
    @classmethod
    def validate_tld(cls, v: str) -> str:
        return v.strip().lstrip('.').lower()


class AutoFindSettings(BaseModel):
    """Main configuration for the AutoFind engine."""

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    vocabulary_path: Optional[Path] = None

    @field_validator('vocabulary_path')
    @classmethod
    def validate_vocabulary_path(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return v
        v = Path(v).expanduser()
        if not v.exists():
            raise ValueError(f"vocabulary file not found: {v}")
        return v

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AutoFindSettings":
        """Load configuration from YAML file.

        Without an explicit path the default locations are searched; when none
        exists the built-in defaults are used.
        """
        if config_path is None:
            candidates = [
                Path("namefinder.yaml"),
                Path.home() / ".config" / "namefinder" / "config.yaml",
            ]
            for candidate in candidates:
                if candidate.exists():
                    config_path = candidate
                    break
            else:
                logger.debug(f"No config file found, using defaults. Searched: {[str(c) for c in candidates]}")
                return cls()

        logger.info(f"Loading config from: {config_path}")
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def save(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode='json'), f, default_flow_style=False)
