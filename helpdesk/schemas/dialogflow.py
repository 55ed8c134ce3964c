from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class DetectedIntent(BaseModel):
    displayName: Optional[str] = None


class QueryResult(BaseModel):
    intent: Optional[DetectedIntent] = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    queryText: str = ""
    intentDetectionConfidence: Optional[float] = None

    @field_validator("parameters", mode="before")
    @classmethod
    def default_parameters(cls, value: object) -> object:
        return value if value is not None else {}

    @field_validator("queryText", mode="before")
    @classmethod
    def default_query_text(cls, value: object) -> object:
        return value if value is not None else ""


class OriginalDetectIntentRequest(BaseModel):
    source: Optional[str] = None


class WebhookRequest(BaseModel):
    queryResult: QueryResult
    session: Optional[str] = None
    sessionId: Optional[str] = None
    responseId: Optional[str] = None
    originalDetectIntentRequest: Optional[OriginalDetectIntentRequest] = None


class FulfillmentResponse(BaseModel):
    fulfillmentText: Optional[str] = None
    fulfillmentMessages: Optional[list[dict[str, Any]]] = None
