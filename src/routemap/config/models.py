"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, routemap.toml only contains
overrides. A local setup needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    backend: Literal["redis", "memory"] = "redis"
    namespace: str = Field(default="routemap", min_length=1)


class RedisConfig(BaseModel):
    """[redis] section."""

    model_config = {"frozen": True}

    url: str = "redis://localhost:6379/0"
    password: str | None = None


class ServerConfig(BaseModel):
    """[server] section."""

    model_config = {"frozen": True}

    host: str = "localhost"
    port: int = Field(default=1337, ge=1, le=65535)
