from helpdesk.schemas.admin import AdminOverviewResponse
from helpdesk.schemas.dialogflow import FulfillmentResponse, WebhookRequest

__all__ = ["WebhookRequest", "FulfillmentResponse", "AdminOverviewResponse"]
