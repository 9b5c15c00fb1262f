from typing import Any

from pydantic import BaseModel, Field

from .format import FormatDescriptor


class FragmentsRequest(BaseModel):
    """Request model for the /fragments endpoint."""

    player_url: str = Field(
        ...,
        max_length=2048,
        description="Player script URL or site-relative path",
        examples=["/s/player/0004de42/player_ias.vflset/en_US/base.js"],
    )
    headers: dict[str, str] | None = Field(
        default=None,
        description="Extra headers sent when fetching the player script",
    )
    proxy: str | None = Field(
        default=None,
        max_length=2048,
        description="Proxy URL used when fetching the player script",
    )

    def fetch_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.headers:
            options["headers"] = self.headers
        if self.proxy:
            options["proxy"] = self.proxy
        return options


class ResolveRequest(FragmentsRequest):
    """Request model for the /resolve endpoint."""

    formats: list[FormatDescriptor] = Field(
        ...,
        description="Format descriptors exactly as found in the streaming data",
    )
