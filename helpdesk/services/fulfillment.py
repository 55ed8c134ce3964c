"""Builders for Dialogflow fulfillment payloads."""

from typing import Any, Iterable, Optional

from helpdesk.schemas.dialogflow import FulfillmentResponse

CHIP_IMAGES = {
    "support": "https://www.svgrepo.com/show/485554/customer-support.svg",
    "faq": "https://www.svgrepo.com/show/488191/faq.svg",
    "feedback": "https://www.svgrepo.com/show/339196/feedback-02.svg",
}

WELCOME_TEXT = "Welcome to Our Virtual Assistant. How can I help you today?"
WELCOME_SELECT_TEXT = "Please select a category below to continue:"
GENERIC_ERROR_TEXT = "Something went wrong while processing your request. Please try again."


def chip_option(text: str, image_url: Optional[str] = None) -> dict[str, Any]:
    option: dict[str, Any] = {"text": text}
    if image_url:
        option["image"] = {"src": {"rawUrl": image_url}}
    return option


def chips_payload(options: Iterable[dict[str, Any]]) -> dict[str, Any]:
    return {
        "payload": {
            "richContent": [
                [
                    {
                        "type": "chips",
                        "options": list(options),
                    }
                ]
            ]
        }
    }


def text_message(text: str) -> dict[str, Any]:
    return {"text": {"text": [text]}}


def fulfillment_text(text: str) -> FulfillmentResponse:
    return FulfillmentResponse(fulfillmentText=text)


def fulfillment_messages(*texts: str, chips: Optional[Iterable[dict[str, Any]]] = None) -> FulfillmentResponse:
    messages = [text_message(text) for text in texts]
    if chips is not None:
        messages.append(chips_payload(chips))
    return FulfillmentResponse(fulfillmentMessages=messages)


def missing_fields_text(missing: list[str]) -> str:
    return (
        f"I still need your {' and '.join(missing)}. "
        "Please provide the remaining detail(s) so I can log your request."
    )


def missing_fields_response(missing: list[str]) -> FulfillmentResponse:
    return fulfillment_messages(missing_fields_text(missing))


def welcome_response() -> FulfillmentResponse:
    return fulfillment_messages(
        WELCOME_TEXT,
        WELCOME_SELECT_TEXT,
        chips=[
            chip_option("Customer Support", CHIP_IMAGES["support"]),
            chip_option("FAQ", CHIP_IMAGES["faq"]),
            chip_option("Feedback", CHIP_IMAGES["feedback"]),
        ],
    )


def error_response() -> FulfillmentResponse:
    return fulfillment_text(GENERIC_ERROR_TEXT)
