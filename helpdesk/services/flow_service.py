"""Per-intent flow handlers for a single webhook turn.

FAQ and Feedback are two-step flows: the chip click (PROMPTING) marks the
session pending and asks for free text; the next turn (ANSWERING) consumes
that text, clears the pending state and stores the final records.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from helpdesk.logging_config import LoggerAdapter, turn_logger
from helpdesk.schemas.dialogflow import FulfillmentResponse, WebhookRequest
from helpdesk.services.ai_service import GenerativeFallback
from helpdesk.services.faq_catalog import build_faq_prompt, faq_questions, lookup_predefined_answer
from helpdesk.services.fulfillment import (
    chip_option,
    fulfillment_messages,
    fulfillment_text,
    missing_fields_response,
    welcome_response,
)
from helpdesk.services.intent_service import Intent, is_faq_trigger, is_feedback_trigger, resolve_intent
from helpdesk.services.parameter_service import (
    extract_email,
    extract_message,
    extract_name,
    extract_rating,
    extract_topic,
)
from helpdesk.services.persistence_service import PersistenceGateway, RecordTable
from helpdesk.services.session_state import SessionStateTracker
from helpdesk.services.state_machine import PendingFlow

DEFAULT_CHANNEL = "dialogflow"
DEFAULT_FALLBACK_QUERY = "Hello"
DEFAULT_CONFIDENCE_THRESHOLD = 0.6

MSG_FAQ_PROMPT = "Here are some frequently asked questions. You can tap one of them or type your own question."
MSG_FEEDBACK_PROMPT = "Please type your feedback and I will share it with our team."
MSG_FEEDBACK_THANKS = "Thanks for your feedback. It really helps us improve our service."

RECORD_SUPPORT = "support"
RECORD_FAQ = "faq"
RECORD_FAQ_START = "faq_start"
RECORD_FEEDBACK = "feedback"
RECORD_FEEDBACK_START = "feedback_start"

REASON_LOW_CONFIDENCE = "low_confidence"
REASON_UNKNOWN_INTENT = "unknown_intent"
REASON_FAQ_FOLLOWUP = "faq_followup"
REASON_FAQ_FOLLOWUP_PREDEFINED = "faq_followup_predefined"
REASON_FEEDBACK_FOLLOWUP = "feedback_followup"


@dataclass(frozen=True)
class Turn:
    """One inbound webhook call, flattened."""

    detected_intent: Optional[str]
    query_text: str
    parameters: dict[str, Any]
    session_id: Optional[str]
    channel: str
    confidence: Optional[float]

    @classmethod
    def from_request(cls, request: WebhookRequest) -> "Turn":
        query = request.queryResult
        source = request.originalDetectIntentRequest.source if request.originalDetectIntentRequest else None
        return cls(
            detected_intent=query.intent.displayName if query.intent else None,
            query_text=query.queryText or "",
            parameters=dict(query.parameters or {}),
            session_id=request.session or request.sessionId or request.responseId,
            channel=source or DEFAULT_CHANNEL,
            confidence=query.intentDetectionConfidence,
        )


@dataclass
class FlowDependencies:
    tracker: SessionStateTracker
    gateway: PersistenceGateway
    fallback: GenerativeFallback
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD


@dataclass
class FlowContext:
    turn: Turn
    intent: str
    deps: FlowDependencies
    log: LoggerAdapter

    def conversation_record(self, **fields: Any) -> dict[str, Any]:
        record = {
            "session_id": self.turn.session_id,
            "intent_name": self.intent,
            "channel": self.turn.channel,
            "intent_confidence": self.turn.confidence,
            "used_gemini": False,
        }
        record.update(fields)
        return record


async def handle_welcome(ctx: FlowContext) -> FulfillmentResponse:
    ctx.log.info("Welcome intent")
    return welcome_response()


async def handle_customer_support(ctx: FlowContext) -> FulfillmentResponse:
    turn = ctx.turn
    ctx.log.info("Customer Support intent triggered")

    if turn.confidence is not None and turn.confidence < ctx.deps.confidence_threshold:
        ctx.log.info(
            "Low intent confidence; using generative fallback",
            context={"threshold": ctx.deps.confidence_threshold},
        )
        fallback_text = await ctx.deps.fallback.generate(turn.query_text or DEFAULT_FALLBACK_QUERY)
        await ctx.deps.gateway.save(
            RecordTable.CONVERSATIONS,
            ctx.conversation_record(
                user_message=turn.query_text,
                response_text=fallback_text,
                used_gemini=True,
                fallback_reason=REASON_LOW_CONFIDENCE,
            ),
        )
        return fulfillment_text(fallback_text)

    user_name = extract_name(turn.parameters)
    user_email = extract_email(turn.parameters)
    user_message = extract_message(turn.parameters, turn.query_text)

    missing = [
        label
        for label, value in (("name", user_name), ("email", user_email), ("message", user_message))
        if not value
    ]
    if missing:
        ctx.log.info("Support request incomplete", context={"missing": missing})
        return missing_fields_response(missing)

    reply_text = f"Thanks {user_name}! I have logged your request and our team will reach out at {user_email} very soon."
    await ctx.deps.gateway.save(
        RecordTable.CONVERSATIONS,
        ctx.conversation_record(
            user_name=user_name,
            user_email=user_email,
            user_message=user_message,
            response_text=reply_text,
            record_type=RECORD_SUPPORT,
        ),
    )
    return fulfillment_messages(reply_text)


async def answer_faq(ctx: FlowContext, question: str, *, followup: bool = False) -> FulfillmentResponse:
    """ANSWERING step of the FAQ flow."""
    turn = ctx.turn
    user_name = extract_name(turn.parameters)
    user_email = extract_email(turn.parameters)

    answer = lookup_predefined_answer(question)
    used_gemini = answer is None
    if answer is None:
        answer = await ctx.deps.fallback.generate(build_faq_prompt(question))

    ctx.deps.tracker.clear_pending(PendingFlow.FAQ, turn.session_id)
    ctx.log.info("FAQ answered", context={"used_gemini": used_gemini, "followup": followup})

    fallback_reason = None
    if followup:
        fallback_reason = REASON_FAQ_FOLLOWUP if used_gemini else REASON_FAQ_FOLLOWUP_PREDEFINED

    await ctx.deps.gateway.save(
        RecordTable.CONVERSATIONS,
        ctx.conversation_record(
            intent_name=Intent.FAQ.value,
            user_name=user_name,
            user_email=user_email,
            user_message=question,
            response_text=answer,
            record_type=RECORD_FAQ,
            used_gemini=used_gemini,
            fallback_reason=fallback_reason,
        ),
    )
    await ctx.deps.gateway.save(
        RecordTable.FAQS,
        {
            "session_id": turn.session_id,
            "user_name": user_name,
            "user_email": user_email,
            "question_text": question,
            "answer_text": answer,
            "channel": turn.channel,
            "intent_name": Intent.FAQ.value,
            "intent_confidence": turn.confidence,
            "used_gemini": used_gemini,
        },
    )
    return fulfillment_messages(answer)


async def handle_faq(ctx: FlowContext) -> FulfillmentResponse:
    turn = ctx.turn
    ctx.log.info("FAQ intent triggered")

    if is_faq_trigger(turn.query_text):
        ctx.deps.tracker.mark_pending(PendingFlow.FAQ, turn.session_id)
        await ctx.deps.gateway.save(
            RecordTable.CONVERSATIONS,
            ctx.conversation_record(
                user_message=turn.query_text,
                response_text=MSG_FAQ_PROMPT,
                record_type=RECORD_FAQ_START,
            ),
        )
        return fulfillment_messages(MSG_FAQ_PROMPT, chips=[chip_option(question) for question in faq_questions()])

    question = extract_topic(turn.parameters, turn.query_text) or turn.query_text
    return await answer_faq(ctx, question)


async def answer_feedback(ctx: FlowContext, *, followup: bool = False) -> FulfillmentResponse:
    """ANSWERING step of the Feedback flow."""
    turn = ctx.turn
    user_name = extract_name(turn.parameters)
    user_email = extract_email(turn.parameters)
    feedback_text = extract_message(turn.parameters, turn.query_text)
    feedback_rating = extract_rating(turn.parameters)

    ctx.deps.tracker.clear_pending(PendingFlow.FEEDBACK, turn.session_id)
    ctx.log.info("Feedback captured", context={"rating": feedback_rating, "followup": followup})

    await ctx.deps.gateway.save(
        RecordTable.CONVERSATIONS,
        ctx.conversation_record(
            intent_name=Intent.FEEDBACK.value,
            user_name=user_name,
            user_email=user_email,
            user_message=feedback_text,
            response_text=MSG_FEEDBACK_THANKS,
            feedback_rating=feedback_rating,
            record_type=RECORD_FEEDBACK,
            fallback_reason=REASON_FEEDBACK_FOLLOWUP if followup else None,
        ),
    )
    await ctx.deps.gateway.save(
        RecordTable.FEEDBACK,
        {
            "session_id": turn.session_id,
            "user_name": user_name,
            "user_email": user_email,
            "feedback_text": feedback_text,
            "feedback_rating": feedback_rating,
            "channel": turn.channel,
            "intent_name": Intent.FEEDBACK.value,
            "intent_confidence": turn.confidence,
            "used_gemini": False,
        },
    )
    return fulfillment_messages(MSG_FEEDBACK_THANKS)


async def handle_feedback(ctx: FlowContext) -> FulfillmentResponse:
    turn = ctx.turn
    ctx.log.info("Feedback intent triggered")

    if is_feedback_trigger(turn.query_text):
        ctx.deps.tracker.mark_pending(PendingFlow.FEEDBACK, turn.session_id)
        await ctx.deps.gateway.save(
            RecordTable.CONVERSATIONS,
            ctx.conversation_record(
                user_message=turn.query_text,
                response_text=MSG_FEEDBACK_PROMPT,
                record_type=RECORD_FEEDBACK_START,
            ),
        )
        return fulfillment_messages(MSG_FEEDBACK_PROMPT)

    return await answer_feedback(ctx)


async def handle_fallback(ctx: FlowContext) -> FulfillmentResponse:
    turn = ctx.turn
    tracker = ctx.deps.tracker

    # Normally the resolver has already redirected pending sessions.
    if tracker.is_pending(PendingFlow.FAQ, turn.session_id):
        ctx.log.info("FAQ follow-up detected in fallback handler")
        return await answer_faq(ctx, turn.query_text, followup=True)

    if tracker.is_pending(PendingFlow.FEEDBACK, turn.session_id):
        ctx.log.info("Feedback follow-up detected in fallback handler")
        return await answer_feedback(ctx, followup=True)

    ctx.log.info("Fallback handler hit")
    fallback_text = await ctx.deps.fallback.generate(turn.query_text or DEFAULT_FALLBACK_QUERY)
    await ctx.deps.gateway.save(
        RecordTable.CONVERSATIONS,
        ctx.conversation_record(
            user_message=turn.query_text,
            response_text=fallback_text,
            used_gemini=True,
            fallback_reason=REASON_UNKNOWN_INTENT,
        ),
    )
    return fulfillment_text(fallback_text)


FlowHandler = Callable[[FlowContext], Awaitable[FulfillmentResponse]]

HANDLERS: dict[str, FlowHandler] = {
    Intent.WELCOME.value: handle_welcome,
    Intent.CUSTOMER_SUPPORT.value: handle_customer_support,
    Intent.FAQ.value: handle_faq,
    Intent.FEEDBACK.value: handle_feedback,
}


async def handle_turn(turn: Turn, deps: FlowDependencies) -> FulfillmentResponse:
    """Resolve the effective intent and run its handler."""
    resolution = resolve_intent(turn.detected_intent, turn.query_text, turn.session_id, deps.tracker)
    log = turn_logger(
        "flow",
        turn.session_id,
        intent=resolution.intent,
        detected_intent=resolution.detected_intent,
        override=resolution.override,
        channel=turn.channel,
    )
    handler = HANDLERS.get(resolution.intent, handle_fallback)
    return await handler(FlowContext(turn=turn, intent=resolution.intent, deps=deps, log=log))
