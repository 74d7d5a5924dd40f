"""Response payloads of the request/response endpoints."""

from collections.abc import Callable
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)


def _none_as(empty: Callable[[], Any]) -> BeforeValidator:
    # Gateways send null where they mean "nothing".
    return BeforeValidator(lambda value: empty() if value is None else value)


WireText = Annotated[str, _none_as(str)]


class AgentSource(BaseModel):
    """A citation attached to an answer.

    Gateways differ in which keys they send, so everything is optional and
    unknown keys are kept.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str | None = Field(default=None, description="Chunk or document ID")
    content: str | None = Field(default=None, description="Cited text")
    similarity: float | None = Field(
        default=None, description="Retrieval similarity, expected in [0, 1]"
    )
    title: str | None = None
    url: str | None = None
    snippet: str | None = None
    type: str | None = Field(default=None, description="document, link or web")
    is_download: bool | None = Field(
        default=None, validation_alias=AliasChoices("is_download", "isDownload")
    )
    chunk_index: int | None = Field(
        default=None, validation_alias=AliasChoices("chunk_index", "chunkIndex")
    )
    metadata: dict[str, Any] | None = None


SourceList = Annotated[list[AgentSource], _none_as(list)]


class AgentResponse(BaseModel):
    """Fully materialised answer from ``GET /ask``."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    answer: WireText = Field(default="", description="Final answer text")
    sources: SourceList = Field(
        default_factory=list, description="Citations, in gateway order"
    )
    thread_id: str | None = Field(
        default=None, description="Thread assigned or continued by the gateway"
    )
    language: str | None = None
    model: str | None = None


class ProviderInfo(BaseModel):
    """One selectable LLM provider."""

    model_config = ConfigDict(extra="allow")

    key: str
    label: str

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data: Any) -> Any:
        # Accept bare strings and the {id, name} shape some gateways send.
        if isinstance(data, str):
            return {"key": data, "label": data}
        if isinstance(data, dict):
            key = data.get("key") or data.get("id") or data.get("name")
            label = data.get("label") or data.get("name") or key
            return {**data, "key": key, "label": label}
        return data


class AgentConfig(BaseModel):
    """Provider/model catalogue from ``GET /ask/config``."""

    providers: list[ProviderInfo] = Field(default_factory=list)
    models: dict[str, list[str]] = Field(
        default_factory=dict, description="Model names keyed by provider key"
    )
    default_provider: str | None = Field(
        default=None,
        validation_alias=AliasChoices("default_provider", "defaultProvider"),
    )
    default_model: str | None = Field(
        default=None,
        validation_alias=AliasChoices("default_model", "defaultModel"),
    )

    @model_validator(mode="before")
    @classmethod
    def _group_model_list(cls, data: Any) -> Any:
        """Fold a flat ``[{id, provider}]`` model list into the keyed map."""
        if not isinstance(data, dict) or not isinstance(data.get("models"), list):
            return data
        grouped: dict[str, list[str]] = {}
        for item in data["models"]:
            if isinstance(item, dict):
                name = item.get("id") or item.get("name")
                provider = item.get("provider") or ""
            else:
                name, provider = item, ""
            if name is not None:
                grouped.setdefault(str(provider), []).append(str(name))
        return {**data, "models": grouped}

    def models_for(self, provider: str) -> list[str]:
        """Return the models offered by *provider* (empty when unknown)."""
        return list(self.models.get(provider, []))
