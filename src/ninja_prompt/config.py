"""
Ninja Prompt Configuration
==========================

This module handles configuration loading for the video prompt analyzer.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    NINJA_FRAME_COUNT      -> sampling.frame_count
    NINJA_SEEK_TIMEOUT     -> sampling.seek_timeout_seconds
    NINJA_REMOTE_ENABLED   -> remote.enabled
    NINJA_REMOTE_ENDPOINT  -> remote.endpoint
    NINJA_HF_TOKEN         -> remote.api_token (HF_TOKEN also accepted)
    NINJA_REMOTE_TIMEOUT   -> remote.timeout_seconds
    NINJA_MAX_CONCURRENCY  -> analysis.max_concurrency
    NINJA_UPLOAD_FRAME_COUNT -> service.upload_frame_count
    NINJA_MAX_UPLOAD_BYTES -> service.max_upload_bytes
    NINJA_PORT             -> service.port
    NINJA_LOG_LEVEL        -> logging.level
    NINJA_LOG_FORMAT       -> logging.format
    PORT                   -> service.port (Cloud Run)

Example:
    from ninja_prompt.config import settings

    print(settings.sampling.frame_count)
    print(settings.remote.endpoint)
    print(settings.thresholds.edge_luma_delta)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


DEFAULT_CLASSIFIER_ENDPOINT = (
    "https://api-inference.huggingface.co/models/openai/clip-vit-base-patch32"
)


# =============================================================================
# Configuration Models
# =============================================================================

class AgentConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="ninja-prompt", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class SamplingConfig(BaseModel):
    """Frame sampling configuration."""

    frame_count: int = Field(
        default=6,
        ge=1,
        description="Number of frames sampled per video",
    )
    min_interval_seconds: float = Field(
        default=0.001,
        gt=0,
        description="Lower bound on the sampling interval (epsilon)",
    )
    seek_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Maximum wait for a seek to settle",
    )
    seek_poll_interval_seconds: float = Field(
        default=0.01,
        gt=0,
        description="Delay between settle checks while seeking",
    )


class RemoteConfig(BaseModel):
    """Remote label-ranking service configuration."""

    enabled: bool = Field(
        default=True,
        description="Attempt the remote classifier before the local fallback",
    )
    endpoint: str = Field(
        default=DEFAULT_CLASSIFIER_ENDPOINT,
        description="HTTP endpoint accepting raw image bytes",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the endpoint (never commit this)",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single classification call",
    )
    top_k: int = Field(
        default=5,
        ge=1,
        description="Number of ranked labels considered per frame",
    )


class AnalysisConfig(BaseModel):
    """Per-frame analysis configuration."""

    max_concurrency: int = Field(
        default=1,
        ge=1,
        description="Maximum frames analyzed concurrently (1 = sequential)",
    )


class ThresholdsConfig(BaseModel):
    """
    Tunable feature and heuristic thresholds.

    The defaults are empirically chosen and kept for compatibility with
    previously generated prompts.
    """

    temperature_delta: float = Field(default=30.0, ge=0, description="Channel lead for warm/cool")
    edge_luma_delta: float = Field(default=25.0, ge=0, description="Luma step counted as an edge")
    complexity_high: float = Field(default=0.10, ge=0, description="Edge density for 'high'")
    complexity_medium: float = Field(default=0.05, ge=0, description="Edge density for 'medium'")
    thirds_spread: float = Field(default=40.0, ge=0, description="Band spread for 'balanced'")
    focus_ratio: float = Field(default=0.3, ge=0, le=1.0, description="Center edge share for 'centered'")
    bright_level: float = Field(default=180.0, ge=0, description="Brightness for bright tags")
    dark_level: float = Field(default=100.0, ge=0, description="Brightness for moody tags")
    saturated_level: float = Field(default=0.6, ge=0, le=1.0, description="Saturation for colorful tags")
    muted_level: float = Field(default=0.3, ge=0, le=1.0, description="Saturation for muted tags")
    symmetry_level: float = Field(default=0.8, ge=0, le=1.0, description="Symmetry for symmetrical tag")


class ServiceConfig(BaseModel):
    """HTTP service configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")
    upload_frame_count: int = Field(
        default=8,
        ge=1,
        description="Frames sampled for uploads sent to /analyze",
    )
    max_upload_bytes: int = Field(
        default=100 * 1024 * 1024,
        ge=1,
        description="Largest accepted video upload",
    )
    download_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for downloading a video by URL",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for Ninja Prompt.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    agent: AgentConfig = Field(default_factory=AgentConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Sampling settings
    if env_count := os.environ.get("NINJA_FRAME_COUNT"):
        config_data.setdefault("sampling", {})["frame_count"] = int(env_count)
    if env_seek := os.environ.get("NINJA_SEEK_TIMEOUT"):
        config_data.setdefault("sampling", {})["seek_timeout_seconds"] = float(env_seek)

    # Remote classifier settings
    if env_enabled := os.environ.get("NINJA_REMOTE_ENABLED"):
        config_data.setdefault("remote", {})["enabled"] = _parse_bool(env_enabled)
    if env_endpoint := os.environ.get("NINJA_REMOTE_ENDPOINT"):
        config_data.setdefault("remote", {})["endpoint"] = env_endpoint
    if env_token := os.environ.get("NINJA_HF_TOKEN") or os.environ.get("HF_TOKEN"):
        config_data.setdefault("remote", {})["api_token"] = env_token
    if env_timeout := os.environ.get("NINJA_REMOTE_TIMEOUT"):
        config_data.setdefault("remote", {})["timeout_seconds"] = float(env_timeout)

    # Analysis settings
    if env_conc := os.environ.get("NINJA_MAX_CONCURRENCY"):
        config_data.setdefault("analysis", {})["max_concurrency"] = int(env_conc)

    # Service settings (Cloud Run uses PORT env var)
    if env_upload_count := os.environ.get("NINJA_UPLOAD_FRAME_COUNT"):
        config_data.setdefault("service", {})["upload_frame_count"] = int(env_upload_count)
    if env_upload := os.environ.get("NINJA_MAX_UPLOAD_BYTES"):
        config_data.setdefault("service", {})["max_upload_bytes"] = int(env_upload)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("service", {})["port"] = int(env_port)
    elif env_port := os.environ.get("NINJA_PORT"):
        config_data.setdefault("service", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("NINJA_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_fmt := os.environ.get("NINJA_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_fmt


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
