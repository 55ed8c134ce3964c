from fastapi import APIRouter, Depends, Request

from helpdesk.dependencies import get_flow_dependencies
from helpdesk.logging_config import get_logger
from helpdesk.schemas.dialogflow import FulfillmentResponse, WebhookRequest
from helpdesk.services.flow_service import FlowDependencies, Turn, handle_turn
from helpdesk.services.fulfillment import error_response

logger = get_logger("dialogflow")

router = APIRouter()


@router.post("/dialogflow", response_model=FulfillmentResponse, response_model_exclude_none=True)
async def dialogflow_webhook(request: Request, deps: FlowDependencies = Depends(get_flow_dependencies)):
    """Dialogflow fulfillment webhook.

    Always answers 200: the platform treats any other status as a transport
    failure, so errors become a generic apology instead.
    """
    logger.info("Request received")
    try:
        payload = await request.json()
        webhook_request = WebhookRequest.model_validate(payload)
        return await handle_turn(Turn.from_request(webhook_request), deps)
    except Exception:
        logger.exception("Error handling Dialogflow request")
        return error_response()
