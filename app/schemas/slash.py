"""Schemas for the slash-command endpoint and the debug-env endpoint."""

from enum import Enum

from pydantic import BaseModel, Field


class Visibility(str, Enum):
    """Slack response_type: ephemeral is shown only to the requester."""

    PRIVATE = "ephemeral"
    CHANNEL = "in_channel"


class SlashCommand(BaseModel):
    """Fields read from Slack's slash-command POST. Everything else is ignored."""

    text: str = Field("", description="Free-text query typed after the command.")
    response_url: str | None = Field(None, description="One-time callback URL for delayed replies.")
    user_id: str | None = Field(None, description="Slack user who ran the command.")
    command: str | None = Field(None, description="The command itself, e.g. /ask.")

    model_config = {"extra": "ignore"}


class Reply(BaseModel):
    """The single reply for a slash command, in Slack's wire format."""

    response_type: Visibility = Field(Visibility.PRIVATE, description="Who sees the reply.")
    text: str = Field(..., description="Slack mrkdwn text.")

    model_config = {
        "json_schema_extra": {
            "examples": [{"response_type": "ephemeral", "text": "Usage: /ask your question"}]
        },
    }


class EnvStatus(BaseModel):
    """Presence (not values) of the required secrets."""

    hasModelKey: bool
    hasSearchKey: bool
    environmentName: str | None = None
