from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load environment variables from .env if present
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Settings(BaseModel):
    model_config = ConfigDict(validate_default=True)

    data_dir: Path = Field(default_factory=lambda: Path(os.getenv("FASTFOOD_DATA_DIR", "data")))
    errors_file: str = Field(default_factory=lambda: os.getenv("FASTFOOD_ERRORS_FILE", "errors.json"))
    system_file: str = Field(default_factory=lambda: os.getenv("FASTFOOD_SYSTEM_FILE", "system.json"))
    flags_file: str = Field(default_factory=lambda: os.getenv("FASTFOOD_FLAGS_FILE", "flags.json"))

    reload_debounce_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FASTFOOD_RELOAD_DEBOUNCE_SECONDS", "0.1")), ge=0.0
    )
    suggestion_top_n: int = Field(default_factory=lambda: int(os.getenv("FASTFOOD_SUGGESTION_TOP_N", "3")), ge=1)
    suggestion_min_score: float = Field(
        default_factory=lambda: float(os.getenv("FASTFOOD_SUGGESTION_MIN_SCORE", "0.3")), ge=0.0, le=1.0
    )
    search_limit_cap: int = Field(default_factory=lambda: int(os.getenv("FASTFOOD_SEARCH_LIMIT_CAP", "50")), ge=1)

    log_level: str = Field(default_factory=lambda: os.getenv("FASTFOOD_LOG_LEVEL", "INFO"))
    log_format: Literal["console", "json"] = Field(
        default_factory=lambda: os.getenv("FASTFOOD_LOG_FORMAT", "console")  # type: ignore[arg-type]
    )
    debug: bool = Field(default_factory=lambda: _env_bool("FASTFOOD_DEBUG"))

    transport: Literal["stdio", "http"] = Field(
        default_factory=lambda: os.getenv("FASTFOOD_TRANSPORT", "stdio")  # type: ignore[arg-type]
    )
    http_host: str = Field(default_factory=lambda: os.getenv("FASTFOOD_HTTP_HOST", "127.0.0.1"))
    http_port: int = Field(default_factory=lambda: int(os.getenv("FASTFOOD_HTTP_PORT", "5000")))

    server_name: str = "fastfood-mcp"
    server_version: str = "0.1.0"
    otel_endpoint: Optional[str] = Field(default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or None)

    @property
    def errors_path(self) -> Path:
        return self.data_dir / self.errors_file

    @property
    def system_path(self) -> Path:
        return self.data_dir / self.system_file

    @property
    def flags_path(self) -> Path:
        return self.data_dir / self.flags_file


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> Settings:
    """Environment defaults, then the optional YAML file, then explicit overrides."""
    values: Dict[str, Any] = {}
    path = config_path or os.getenv("FASTFOOD_CONFIG")
    if path:
        with open(path, encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
        if not isinstance(cfg, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        values.update(cfg)
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
