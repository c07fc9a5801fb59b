"""Sink configuration models."""

from pydantic import BaseModel, ConfigDict, Field

WARNING = 2
NORMAL = 1


class SinkConfig(BaseModel):
    """Settings of a DingTalk sink, built once from the sink URI."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(default="", description="Webhook host and path, without scheme")
    token: str = Field(description="Bot access token")
    level: int = Field(default=WARNING, description="Minimum event severity score")
    namespaces: tuple[str, ...] | None = Field(default=None, description="None disables the filter")
    kinds: tuple[str, ...] | None = Field(default=None, description="None disables the filter")
    labels: tuple[str, ...] = Field(default=(), description="Lines prepended to each message")

    @property
    def webhook_url(self) -> str:
        return f"https://{self.endpoint}?access_token={self.token}"
