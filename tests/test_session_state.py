from helpdesk.services.session_state import SessionStateTracker
from helpdesk.services.state_machine import PendingFlow, SessionFlowState


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestMarkAndClear:
    def test_unknown_session_is_idle(self, tracker):
        assert tracker.get_state("s1") == SessionFlowState.IDLE
        assert tracker.is_pending(PendingFlow.FAQ, "s1") is False
        assert tracker.is_pending(PendingFlow.FEEDBACK, "s1") is False

    def test_mark_faq_pending(self, tracker):
        state = tracker.mark_pending(PendingFlow.FAQ, "s1")

        assert state == SessionFlowState.AWAITING_FAQ_ANSWER
        assert tracker.is_pending(PendingFlow.FAQ, "s1") is True
        assert tracker.is_pending(PendingFlow.FEEDBACK, "s1") is False

    def test_clear_returns_to_idle(self, tracker):
        tracker.mark_pending(PendingFlow.FEEDBACK, "s1")

        state = tracker.clear_pending(PendingFlow.FEEDBACK, "s1")

        assert state == SessionFlowState.IDLE
        assert tracker.is_pending(PendingFlow.FEEDBACK, "s1") is False
        assert len(tracker) == 0

    def test_clear_other_flow_keeps_state(self, tracker):
        tracker.mark_pending(PendingFlow.FAQ, "s1")

        state = tracker.clear_pending(PendingFlow.FEEDBACK, "s1")

        assert state == SessionFlowState.AWAITING_FAQ_ANSWER
        assert tracker.is_pending(PendingFlow.FAQ, "s1") is True

    def test_clear_idle_session_is_noop(self, tracker):
        assert tracker.clear_pending(PendingFlow.FAQ, "never-seen") == SessionFlowState.IDLE

    def test_sessions_are_independent(self, tracker):
        tracker.mark_pending(PendingFlow.FAQ, "s1")
        tracker.mark_pending(PendingFlow.FEEDBACK, "s2")

        assert tracker.is_pending(PendingFlow.FAQ, "s1") is True
        assert tracker.is_pending(PendingFlow.FEEDBACK, "s2") is True
        assert tracker.is_pending(PendingFlow.FAQ, "s2") is False


class TestMutualExclusion:
    def test_new_flow_replaces_pending_flow(self, tracker):
        tracker.mark_pending(PendingFlow.FAQ, "s1")
        tracker.mark_pending(PendingFlow.FEEDBACK, "s1")

        assert tracker.is_pending(PendingFlow.FEEDBACK, "s1") is True
        assert tracker.is_pending(PendingFlow.FAQ, "s1") is False
        assert len(tracker) == 1

    def test_same_flow_twice_stays_pending(self, tracker):
        tracker.mark_pending(PendingFlow.FAQ, "s1")
        tracker.mark_pending(PendingFlow.FAQ, "s1")

        assert tracker.is_pending(PendingFlow.FAQ, "s1") is True
        assert len(tracker) == 1


class TestMissingSessionId:
    def test_mark_without_session_is_ignored(self, tracker):
        assert tracker.mark_pending(PendingFlow.FAQ, None) == SessionFlowState.IDLE
        assert tracker.mark_pending(PendingFlow.FAQ, "") == SessionFlowState.IDLE
        assert len(tracker) == 0

    def test_none_session_is_never_pending(self, tracker):
        assert tracker.is_pending(PendingFlow.FAQ, None) is False


class TestExpiry:
    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        tracker = SessionStateTracker(ttl_seconds=60, clock=clock)
        tracker.mark_pending(PendingFlow.FAQ, "s1")

        clock.now += 59
        assert tracker.is_pending(PendingFlow.FAQ, "s1") is True

        clock.now += 2
        assert tracker.is_pending(PendingFlow.FAQ, "s1") is False
        assert len(tracker) == 0

    def test_mark_refreshes_expiry(self):
        clock = FakeClock()
        tracker = SessionStateTracker(ttl_seconds=60, clock=clock)
        tracker.mark_pending(PendingFlow.FAQ, "s1")

        clock.now += 50
        tracker.mark_pending(PendingFlow.FAQ, "s1")
        clock.now += 50

        assert tracker.is_pending(PendingFlow.FAQ, "s1") is True

    def test_sweep_removes_only_expired(self):
        clock = FakeClock()
        tracker = SessionStateTracker(ttl_seconds=60, clock=clock)
        tracker.mark_pending(PendingFlow.FAQ, "old")
        clock.now += 30
        tracker.mark_pending(PendingFlow.FEEDBACK, "fresh")
        clock.now += 40

        removed = tracker.sweep()

        assert removed == 1
        assert tracker.get_state("old") == SessionFlowState.IDLE
        assert tracker.get_state("fresh") == SessionFlowState.AWAITING_FEEDBACK_TEXT


class TestCapacity:
    def test_least_recently_marked_is_evicted(self):
        tracker = SessionStateTracker(max_entries=2)
        tracker.mark_pending(PendingFlow.FAQ, "s1")
        tracker.mark_pending(PendingFlow.FAQ, "s2")
        tracker.mark_pending(PendingFlow.FEEDBACK, "s3")

        assert len(tracker) == 2
        assert tracker.get_state("s1") == SessionFlowState.IDLE
        assert tracker.is_pending(PendingFlow.FAQ, "s2") is True
        assert tracker.is_pending(PendingFlow.FEEDBACK, "s3") is True

    def test_remarking_moves_to_most_recent(self):
        tracker = SessionStateTracker(max_entries=2)
        tracker.mark_pending(PendingFlow.FAQ, "s1")
        tracker.mark_pending(PendingFlow.FAQ, "s2")
        tracker.mark_pending(PendingFlow.FAQ, "s1")
        tracker.mark_pending(PendingFlow.FAQ, "s3")

        assert tracker.is_pending(PendingFlow.FAQ, "s1") is True
        assert tracker.get_state("s2") == SessionFlowState.IDLE
