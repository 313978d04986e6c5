"""Splunk alert-action webhook payload."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SplunkWebhook(BaseModel):
    """Notification posted by a Splunk saved search's webhook action."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    sid: str = Field(default="", description="Search job identifier")
    search_name: str = Field(default="", description="Saved search (rule) name")
    app: str = Field(default="", description="Splunk app the search belongs to")
    owner: str = Field(default="")
    results_link: str = Field(default="", description="Link to the search results")
    result: dict[str, Any] = Field(default_factory=dict, description="First result row")
