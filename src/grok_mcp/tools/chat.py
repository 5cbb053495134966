"""grok_chat: multi-turn conversation."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from ..client import GrokClient
from ..foundation.errors import ExternalServiceError
from ..foundation.types import ChatMessage, ChatRequest, Role
from .ask import MaxTokens, Temperature
from .base import GrokTool, ToolMetadata, ToolResponse


class MessageParam(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Role = Field(..., description="Role of the message sender")
    content: StrictStr = Field(..., description="Content of the message")


class ChatParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    messages: list[MessageParam] = Field(..., min_length=1, description="Array of messages in the conversation")
    model: StrictStr | None = Field(default=None, description="Grok model to use (defaults to the configured model)")
    temperature: Temperature | None = None
    max_tokens: MaxTokens | None = None


class ChatTool(GrokTool[ChatParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="grok_chat",
        description="Have a multi-turn conversation with Grok 4 using the chat completion API",
    )
    params_schema: ClassVar[type[BaseModel]] = ChatParams

    def __init__(self, client: GrokClient) -> None:
        self.client = client

    async def run(self, params: ChatParams) -> ToolResponse:
        request = ChatRequest(
            messages=tuple(ChatMessage(role=m.role, content=m.content) for m in params.messages),
            model=params.model,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
        )
        try:
            completion = await self.client.chat_completion(request)
        except ExternalServiceError as e:
            raise ExternalServiceError.wrap("Grok chat", e) from e
        return ToolResponse.text(completion.text_or_default())
