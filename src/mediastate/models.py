# SPDX-License-Identifier: MIT
"""Entity shapes shared by the facade and every storage backend.

Field names match the JSON already persisted by existing deployments, so
records written by other clients round-trip unchanged.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class PlayRecord(BaseModel):
    """Playback progress for one title of one source."""

    title: str
    source_name: str
    cover: str = ""
    year: str = ""
    index: int = Field(default=1, ge=1, description="Episode being watched (1-based)")
    total_episodes: int = Field(default=1, ge=0)
    play_time: float = Field(default=0, ge=0, description="Position in seconds")
    total_time: float = Field(default=0, ge=0, description="Episode length in seconds")
    save_time: int = Field(default=0, description="Unix timestamp in milliseconds")
    search_title: str = ""


class Favorite(BaseModel):
    """A favourited title."""

    source_name: str
    total_episodes: int = Field(default=1, ge=0)
    title: str
    year: str = ""
    cover: str = ""
    save_time: int = 0
    search_title: str = ""
    origin: Literal["vod", "live"] | None = None


class SkipConfig(BaseModel):
    """Intro/outro skip bounds for one title."""

    enable: bool = True
    intro_time: float = Field(default=0, ge=0)
    outro_time: float = Field(default=0, ge=0)


class AdminConfig(BaseModel):
    """Process-wide admin configuration.

    Only the well-known sections are typed; any other section is kept as-is.
    Serialise with ``by_alias=True`` to reproduce the stored layout.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    site_config: dict[str, Any] = Field(default_factory=dict, alias="SiteConfig")
    user_config: dict[str, Any] = Field(default_factory=lambda: {"Users": []}, alias="UserConfig")
    source_config: list[dict[str, Any]] = Field(default_factory=list, alias="SourceConfig")
