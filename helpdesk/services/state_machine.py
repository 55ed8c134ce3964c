from enum import Enum


class SessionFlowState(str, Enum):
    IDLE = "idle"
    AWAITING_FAQ_ANSWER = "awaiting_faq_answer"
    AWAITING_FEEDBACK_TEXT = "awaiting_feedback_text"


class PendingFlow(str, Enum):
    FAQ = "faq"
    FEEDBACK = "feedback"


AWAITING_STATES = {
    PendingFlow.FAQ: SessionFlowState.AWAITING_FAQ_ANSWER,
    PendingFlow.FEEDBACK: SessionFlowState.AWAITING_FEEDBACK_TEXT,
}

# Re-entering an awaiting state is allowed: the user clicked the same chip twice.
VALID_TRANSITIONS = {
    SessionFlowState.IDLE: [SessionFlowState.AWAITING_FAQ_ANSWER, SessionFlowState.AWAITING_FEEDBACK_TEXT],
    SessionFlowState.AWAITING_FAQ_ANSWER: [SessionFlowState.IDLE, SessionFlowState.AWAITING_FAQ_ANSWER],
    SessionFlowState.AWAITING_FEEDBACK_TEXT: [SessionFlowState.IDLE, SessionFlowState.AWAITING_FEEDBACK_TEXT],
}


class InvalidTransitionError(Exception):
    def __init__(self, from_state: SessionFlowState, to_state: SessionFlowState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} -> {to_state.value}")


def can_transition(from_state: SessionFlowState, to_state: SessionFlowState) -> bool:
    """Check if transition is valid."""
    allowed = VALID_TRANSITIONS.get(from_state, [])
    return to_state in allowed


def transition(from_state: SessionFlowState, to_state: SessionFlowState) -> SessionFlowState:
    """Perform state transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(from_state, to_state):
        raise InvalidTransitionError(from_state, to_state)
    return to_state


def awaiting_state_for(flow: PendingFlow) -> SessionFlowState:
    return AWAITING_STATES[flow]


def start_flow(current_state: SessionFlowState, flow: PendingFlow) -> SessionFlowState:
    """Chip clicked: wait for the free-text follow-up of this flow."""
    return transition(current_state, awaiting_state_for(flow))


def complete_flow(current_state: SessionFlowState) -> SessionFlowState:
    """Follow-up received: back to idle."""
    return transition(current_state, SessionFlowState.IDLE)
