from helpdesk.services.flow_service import (
    FlowDependencies,
    Turn,
    handle_turn,
)
from helpdesk.services.persistence_service import (
    PersistenceGateway,
    RecordTable,
    sanitize_record,
)
from helpdesk.services.session_state import SessionStateTracker
from helpdesk.services.state_machine import (
    InvalidTransitionError,
    PendingFlow,
    SessionFlowState,
    can_transition,
    transition,
)
