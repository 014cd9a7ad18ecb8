"""
SCRIPTORIUM - Configuration

Centralized configuration management for the entire system.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional
from enum import Enum
import logging

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class LLMConfig:
    """Language model configuration for the completion providers."""
    default_provider: str = field(default_factory=lambda: os.getenv("DEFAULT_PROVIDER", "gemini"))
    temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.7")))

    # OpenAI settings
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))

    # Gemini settings
    gemini_api_key: str = field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))
    gemini_model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash"))

    # Vertex AI Search datastore used for grounded chat
    gemini_datastore: str = field(default_factory=lambda: os.getenv("GEMINI_DATASTORE", ""))


@dataclass
class TimelineConfig:
    """Geometry of the circular cross-reference timeline."""
    radius: float = field(default_factory=lambda: float(os.getenv("TIMELINE_RADIUS", "150")))
    center_x: float = field(default_factory=lambda: float(os.getenv("TIMELINE_CENTER_X", "200")))
    center_y: float = field(default_factory=lambda: float(os.getenv("TIMELINE_CENTER_Y", "200")))

    # Fraction of the midpoint-to-centre distance the Bezier control point moves inward
    curve_pull: float = 0.2

    # Arc thickness = min(base + per_member * members, max)
    thickness_base: float = 1.5
    thickness_per_member: float = 0.3
    thickness_max: float = 4.0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    json_format: bool = field(default_factory=lambda: os.getenv("LOG_FORMAT", "console").lower() == "json")
    log_dir: Path = field(default_factory=lambda: Path(os.getenv("LOG_DIR", "./logs")))
    log_to_file: bool = field(default_factory=lambda: os.getenv("LOG_TO_FILE", "false").lower() == "true")


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(default_factory=lambda: Environment(os.getenv("ENVIRONMENT", "development")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    # Default translation for verse text lookups
    translation: str = field(default_factory=lambda: os.getenv("BIBLE_TRANSLATION", "web"))

    # Sub-configurations
    llm: LLMConfig = field(default_factory=LLMConfig)
    timeline: TimelineConfig = field(default_factory=TimelineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.env == Environment.DEVELOPMENT

    def setup_logging(self) -> None:
        """Setup structured logging based on configuration."""
        from observability.logging import LoggingConfig as StructLoggingConfig, setup_logging

        setup_logging(StructLoggingConfig(
            level=self.logging.level,
            json_format=self.logging.json_format,
            log_to_file=self.logging.log_to_file,
            log_file_path=self.logging.log_dir / "scriptorium.log",
            environment=self.env.value,
        ), force=True)
        if self.debug:
            logging.getLogger().setLevel(logging.DEBUG)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (excluding sensitive values)."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "translation": self.translation,
            "llm": {
                "default_provider": self.llm.default_provider,
                "temperature": self.llm.temperature,
                "openai_model": self.llm.openai_model,
                "gemini_model": self.llm.gemini_model,
                "openai_configured": bool(self.llm.openai_api_key),
                "gemini_configured": bool(self.llm.gemini_api_key),
            },
            "timeline": {
                "radius": self.timeline.radius,
                "center": [self.timeline.center_x, self.timeline.center_y],
            },
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config
