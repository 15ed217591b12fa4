from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from companion.core.errors import ConfigError, format_issues


DEFAULT_CONFIG_PATH = os.path.join("config", "companion.json")


class StoreConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    db_path: Optional[str] = os.path.join("data", "companion.db")  # None -> in-memory
    ops_log_path: str = os.path.join("logs", "ops.jsonl")


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    log_dir: str = "logs"
    level: str = "INFO"
    max_bytes: int = Field(default=1_000_000, ge=10_000)
    backup_count: int = Field(default=5, ge=0, le=50)

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = str(v or "").strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("unknown log level")
        return v


class WebConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    host: str = "127.0.0.1"
    port: int = Field(default=8787, ge=1, le=65535)
    allowed_origins: List[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)


@dataclass(frozen=True)
class ReadResult:
    ok: bool
    data: Dict[str, Any]
    error: Optional[str] = None


def read_json_file(path: str) -> ReadResult:
    if not os.path.exists(path):
        return ReadResult(ok=False, data={}, error="missing")
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except json.JSONDecodeError as e:
        return ReadResult(ok=False, data={}, error=f"corrupt_json:{e}")
    except OSError as e:
        return ReadResult(ok=False, data={}, error=str(e))
    if not isinstance(obj, dict):
        return ReadResult(ok=False, data={}, error="not_object")
    return ReadResult(ok=True, data=obj)


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """
    Missing file -> defaults. Unreadable, non-object or off-schema -> ConfigError.
    """
    res = read_json_file(path)
    if not res.ok:
        if res.error == "missing":
            return AppConfig()
        raise ConfigError(f"Config file is unreadable: {res.error}", path=path)
    try:
        return AppConfig.model_validate(res.data)
    except ValidationError as e:
        raise ConfigError("Config file does not match the schema.", path=path, issues=format_issues(e)) from e
