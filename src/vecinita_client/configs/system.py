from pydantic import BaseModel, Field


class GatewayConfig(BaseModel):
    """Where the agent gateway lives and how long calls may take."""

    base_url: str = Field(
        default="http://localhost:8002",
        description="Gateway base: an absolute URL or a relative prefix such as /api",
    )
    origin: str | None = Field(
        default=None,
        description="Origin that relative base URLs are resolved against",
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Budget in seconds for request/response calls"
    )
    stream_timeout: float = Field(
        default=120.0, gt=0, description="Budget in seconds for a whole event stream"
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers sent with every request"
    )


class LoggingConfig(BaseModel):
    """Logging output settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=False, description="Emit JSON lines instead of human-readable text"
    )
