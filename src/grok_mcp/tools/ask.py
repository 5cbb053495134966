"""grok_ask: single question with optional context."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from ..client import GrokClient
from ..foundation.errors import ExternalServiceError
from .base import GrokTool, ToolMetadata, ToolResponse

Temperature = Annotated[float, Field(ge=0.0, le=1.0, description="Temperature for response generation (0.0 to 1.0)")]
MaxTokens = Annotated[int, Field(ge=1, le=8000, strict=True, description="Maximum tokens in the response")]


class AskParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    question: StrictStr = Field(..., min_length=1, description="The question to ask Grok 4")
    context: StrictStr | None = Field(default=None, description="Optional context to provide with the question")
    system_prompt: StrictStr | None = Field(default=None, description="Optional system prompt to guide Grok's behavior")
    temperature: Temperature | None = None
    max_tokens: MaxTokens | None = None
    include_search: StrictBool | None = Field(
        default=None, description="Include live search results for current information",
    )
    model: StrictStr | None = Field(default=None, description="Grok model to use (e.g., grok-4-1-fast-reasoning)")


class AskTool(GrokTool[AskParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="grok_ask",
        description="Ask Grok 4 a question with optional context and system prompt. Supports live search integration.",
    )
    params_schema: ClassVar[type[BaseModel]] = AskParams

    def __init__(self, client: GrokClient) -> None:
        self.client = client

    async def run(self, params: AskParams) -> ToolResponse:
        try:
            answer = await self.client.ask(
                params.question,
                params.context,
                params.system_prompt,
                temperature=params.temperature,
                max_tokens=params.max_tokens,
                include_search=bool(params.include_search),
                model=params.model,
            )
        except ExternalServiceError as e:
            raise ExternalServiceError.wrap("Grok ask", e) from e
        return ToolResponse.text(answer)
