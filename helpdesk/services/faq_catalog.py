from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional


@dataclass(frozen=True)
class FaqEntry:
    question: str
    answer: str


FAQ_PREDEFINED: tuple[FaqEntry, ...] = (
    FaqEntry(
        question="How can I contact customer support?",
        answer=(
            "You can reach our customer support team through live chat, email, or by submitting a ticket "
            "on our support page. Our team is available 24/7 to assist you."
        ),
    ),
    FaqEntry(
        question="What is the average response time?",
        answer=(
            "Our typical response time is within a few minutes via live chat and within 12–24 hours "
            "for email or ticket inquiries."
        ),
    ),
    FaqEntry(
        question="How do I create an account?",
        answer=(
            "To create an account, simply click on the 'Sign Up' button on our website, enter your details, "
            "and follow the instructions to verify your email."
        ),
    ),
    FaqEntry(
        question="I forgot my password. How can I reset it?",
        answer=(
            "Click on the 'Forgot Password' option on the login page, enter your registered email, "
            "and follow the secure link sent to you to reset your password."
        ),
    ),
    FaqEntry(
        question="How do I track my order or request?",
        answer=(
            "You can track your order or service request by logging into your account and viewing the "
            "'Orders' or 'Requests' section in your dashboard."
        ),
    ),
    FaqEntry(
        question="What payment methods do you accept?",
        answer=(
            "We accept major credit and debit cards, bank transfers, PayPal, and supported digital wallets "
            "depending on your region."
        ),
    ),
    FaqEntry(
        question="Can I modify or cancel my order?",
        answer=(
            "Yes, you can modify or cancel your order within a limited time window from your account dashboard. "
            "If the option is unavailable, please contact support for assistance."
        ),
    ),
    FaqEntry(
        question="Do you offer refunds?",
        answer=(
            "Refunds are available based on our refund policy. If eligible, you can submit a refund request "
            "through your account or by contacting customer support."
        ),
    ),
    FaqEntry(
        question="How can I update my profile or account information?",
        answer=(
            "You can update your personal details by going to the 'Account Settings' section after logging "
            "into your account."
        ),
    ),
    FaqEntry(
        question="Is my personal information secure?",
        answer=(
            "Yes, we use industry-standard encryption and security practices to ensure that your data is "
            "protected at all times."
        ),
    ),
    FaqEntry(
        question="Do you provide support for technical issues?",
        answer=(
            "Yes, our technical support team can help with troubleshooting, installation guidance, "
            "configuration issues, and general product assistance."
        ),
    ),
    FaqEntry(
        question="Where can I find tutorials or documentation?",
        answer=(
            "All guides, tutorials, and product documentation are available in the 'Help Center' section "
            "of our website."
        ),
    ),
)


def _question_key(question: Optional[str]) -> str:
    return (question or "").strip().lower()


FAQ_ANSWER_MAP = MappingProxyType(
    {_question_key(entry.question): entry.answer for entry in FAQ_PREDEFINED if _question_key(entry.question)}
)

FAQ_PROMPT_TEMPLATE = (
    "The user is asking an FAQ about our products or services.\n\n"
    'Question: "{question}"\n\n'
    "Provide a clear, concise answer in simple language."
)


def lookup_predefined_answer(question: Optional[str]) -> Optional[str]:
    """Exact, case-insensitive match on the trimmed question."""
    return FAQ_ANSWER_MAP.get(_question_key(question))


def faq_questions() -> list[str]:
    return [entry.question for entry in FAQ_PREDEFINED]


def build_faq_prompt(question: str) -> str:
    return FAQ_PROMPT_TEMPLATE.format(question=question)
