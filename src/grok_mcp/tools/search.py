"""grok_search: live search with formatted results."""

from __future__ import annotations

import math
from typing import Annotated, ClassVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

from ..client import GrokClient
from ..foundation.errors import ExternalServiceError
from ..foundation.types import SearchRequest, SearchResponse, TimeFilter
from .base import GrokTool, ToolMetadata, ToolResponse

MAX_RESULTS_LIMIT = 20


class SearchParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: StrictStr = Field(..., description="Search query to execute")
    max_results: Annotated[int, Field(gt=0, le=MAX_RESULTS_LIMIT, strict=True)] | None = Field(
        default=None, description="Maximum number of search results to return (1-20)",
    )
    include_images: StrictBool | None = Field(default=None, description="Ask for image-rich results in search")
    include_news: StrictBool | None = Field(default=None, description="Include news articles in search results")
    time_filter: TimeFilter | None = Field(default=None, description="Filter results by time period")

    @field_validator("max_results", mode="before")
    @classmethod
    def _truncate_to_int(cls, v: object) -> object:
        """3.7 -> 3, "4" -> 4. Anything else is left for strict validation."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            try:
                v = float(v.strip())
            except ValueError:
                return v
        if isinstance(v, float) and math.isfinite(v):
            return math.floor(v)
        return v


def format_results(query: str, response: SearchResponse) -> str:
    entries = []
    for i, r in enumerate(response.results, start=1):
        entry = f"{i}. {r.title}\n{r.url}\n{r.snippet}"
        if r.published_date:
            entry += f"\nPublished: {r.published_date}"
        entries.append(entry)
    header = f'Search Results for "{query}" ({response.total_results} results found in {response.search_time}s):'
    return f"{header}\n\n" + "\n\n".join(entries)


class SearchTool(GrokTool[SearchParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="grok_search",
        description="Perform a live search using Grok's search capabilities for current information",
    )
    params_schema: ClassVar[type[BaseModel]] = SearchParams

    def __init__(self, client: GrokClient) -> None:
        self.client = client

    async def run(self, params: SearchParams) -> ToolResponse:
        request = SearchRequest(**params.model_dump())
        try:
            response = await self.client.live_search(request)
        except ExternalServiceError as e:
            raise ExternalServiceError.wrap("Grok search", e) from e
        return ToolResponse.text(format_results(params.query, response))
