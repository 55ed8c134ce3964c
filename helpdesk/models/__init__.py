from helpdesk.models.records import ConversationRecord, FaqRecord, FeedbackRecord

__all__ = [
    "ConversationRecord",
    "FaqRecord",
    "FeedbackRecord",
]
