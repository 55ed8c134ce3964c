from dataclasses import dataclass
from enum import Enum
from typing import Optional

from helpdesk.logging_config import get_logger
from helpdesk.services.session_state import SessionStateTracker
from helpdesk.services.state_machine import PendingFlow

logger = get_logger("intent_service")


class Intent(str, Enum):
    WELCOME = "Default Welcome Intent"
    CUSTOMER_SUPPORT = "Customer Support"
    FAQ = "FAQ"
    FEEDBACK = "Feedback"


# Quick-reply chip labels as reported back in queryText (lowercased)
CHIP_INTENT_MAP = {
    "customer support": Intent.CUSTOMER_SUPPORT,
    "customer support help": Intent.CUSTOMER_SUPPORT,
    "faq": Intent.FAQ,
    "frequently asked questions": Intent.FAQ,
    "feedback": Intent.FEEDBACK,
    "leave feedback": Intent.FEEDBACK,
}

FAQ_TRIGGER_LABELS = {label for label, intent in CHIP_INTENT_MAP.items() if intent == Intent.FAQ}
FEEDBACK_TRIGGER_LABELS = {label for label, intent in CHIP_INTENT_MAP.items() if intent == Intent.FEEDBACK}

OVERRIDE_CHIP = "chip"
OVERRIDE_PENDING_FAQ = "pending_faq"
OVERRIDE_PENDING_FEEDBACK = "pending_feedback"


@dataclass(frozen=True)
class IntentResolution:
    intent: str
    detected_intent: Optional[str]
    override: Optional[str] = None


def normalize_query(query_text: Optional[str]) -> str:
    return (query_text or "").strip().lower()


def chip_intent(query_text: Optional[str]) -> Optional[Intent]:
    """Canonical intent for a clicked chip label, if the text is one."""
    return CHIP_INTENT_MAP.get(normalize_query(query_text))


def is_faq_trigger(query_text: Optional[str]) -> bool:
    return normalize_query(query_text) in FAQ_TRIGGER_LABELS


def is_feedback_trigger(query_text: Optional[str]) -> bool:
    return normalize_query(query_text) in FEEDBACK_TRIGGER_LABELS


def resolve_intent(
    detected_intent: Optional[str],
    query_text: Optional[str],
    session_id: Optional[str],
    tracker: SessionStateTracker,
) -> IntentResolution:
    """Pick the authoritative intent for this turn.

    Chip labels beat the NLU guess; a pending multi-turn flow beats both.
    If the user is mid-FAQ and clicks the Feedback chip, the pending FAQ
    still wins.
    """
    intent = detected_intent or ""
    override = None

    clicked = chip_intent(query_text)
    if clicked is not None:
        intent = clicked.value
        override = OVERRIDE_CHIP
        logger.info(
            "Overriding intent based on chip selection",
            extra={"context": {"session_id": session_id, "detected": detected_intent, "intent": intent}},
        )

    if tracker.is_pending(PendingFlow.FAQ, session_id) and intent != Intent.FAQ.value:
        logger.info(
            "Overriding intent to FAQ due to pending FAQ question",
            extra={"context": {"session_id": session_id, "was": intent}},
        )
        intent = Intent.FAQ.value
        override = OVERRIDE_PENDING_FAQ
    elif tracker.is_pending(PendingFlow.FEEDBACK, session_id) and intent != Intent.FEEDBACK.value:
        logger.info(
            "Overriding intent to Feedback due to pending feedback",
            extra={"context": {"session_id": session_id, "was": intent}},
        )
        intent = Intent.FEEDBACK.value
        override = OVERRIDE_PENDING_FEEDBACK

    return IntentResolution(intent=intent, detected_intent=detected_intent, override=override)
