"""Tool contract: metadata, parameter schema, async execution.

Each tool declares its metadata and a pydantic params model as class
variables and implements `run()`. Parameter models live next to the tool
that consumes them.

Example:
    >>> class EchoParams(BaseModel):
    ...     text: StrictStr
    ...
    >>> class EchoTool(GrokTool[EchoParams]):
    ...     metadata = ToolMetadata(name="echo", description="Echo the given text back")
    ...     params_schema = EchoParams
    ...
    ...     async def run(self, params: EchoParams) -> ToolResponse:
    ...         return ToolResponse.text(params.text)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..foundation.errors import ValidationError

# ─────────────────────────────────────────────────────────────────────────────
# Metadata & Response
# ─────────────────────────────────────────────────────────────────────────────


class ToolMetadata(BaseModel):
    """Name and description advertised to MCP clients.

    Attributes:
        name: Unique identifier (snake_case, e.g., "grok_ask")
        description: What the tool does (shown to the calling model)
        category: Grouping category ("query", "diagnostics")
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="query")


@dataclass(slots=True)
class ToolResponse:
    """Transport-neutral tool result.

    `content` holds text blocks in order. Failures are ordinary responses
    with `is_error` set; they never propagate as exceptions to the channel.
    """

    content: list[str] = field(default_factory=list)
    metrics: dict[str, object] | None = None
    is_error: bool = False

    @classmethod
    def text(cls, *blocks: str, metrics: dict[str, object] | None = None) -> ToolResponse:
        return cls(content=list(blocks), metrics=metrics)

    @classmethod
    def error(cls, message: str) -> ToolResponse:
        return cls(content=[f"Error: {message}"], is_error=True)

    @property
    def first_text(self) -> str:
        return self.content[0] if self.content else ""


class EmptyParams(BaseModel):
    """Schema for tools that take no arguments."""

    model_config = ConfigDict(extra="ignore")


TParams = TypeVar("TParams", bound=BaseModel)


# ─────────────────────────────────────────────────────────────────────────────
# Base Tool
# ─────────────────────────────────────────────────────────────────────────────


class GrokTool(ABC, Generic[TParams]):
    """Abstract base for all tools.

    Subclasses must:
    - Define `metadata` class variable with ToolMetadata
    - Define `params_schema` class variable with the pydantic model type
    - Implement `run(params)` returning a ToolResponse
    """

    metadata: ClassVar[ToolMetadata]
    params_schema: ClassVar[type[BaseModel]] = EmptyParams

    @property
    def name(self) -> str:
        return self.metadata.name

    def validate(self, arguments: dict[str, object]) -> TParams:
        """Validate raw arguments against `params_schema`.

        Raises:
            ValidationError: one-line message plus per-field issues
        """
        try:
            return self.params_schema.model_validate(arguments)  # type: ignore[return-value]
        except PydanticValidationError as e:
            issues = [
                {"field": ".".join(str(p) for p in err["loc"]) or "(root)", "message": err["msg"]}
                for err in e.errors()
            ]
            detail = "; ".join(f"{i['field']}: {i['message']}" for i in issues)
            raise ValidationError(f"Invalid input for {self.name}: {detail}", issues) from e

    def input_schema(self) -> dict[str, object]:
        """JSON schema for the tool's arguments, without pydantic titles."""
        schema = self.params_schema.model_json_schema()
        properties = {
            name: {k: v for k, v in prop.items() if k != "title"}
            for name, prop in schema.get("properties", {}).items()
        }
        out: dict[str, object] = {"type": "object", "properties": properties}
        if schema.get("required"):
            out["required"] = schema["required"]
        if "$defs" in schema:
            out["$defs"] = schema["$defs"]
        return out

    @abstractmethod
    async def run(self, params: TParams) -> ToolResponse:
        """Execute with validated params."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
