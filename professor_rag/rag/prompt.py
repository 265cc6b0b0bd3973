"""
Prompt Module

Builds the message list sent to the completion model.

Message layout:
- System prompt: fixed assistant instructions (first message, always)
- History: every earlier message, unchanged
- Last message: the user's latest content with the retrieved reviews appended
"""

from typing import List, Dict, Sequence, Union

from professor_rag.core.logging import get_logger
from professor_rag.models.request import ChatMessage, ChatMessageRole
from professor_rag.models.response import MatchResult

logger = get_logger(__name__)


SYSTEM_PROMPT_VERSION = "1"

SYSTEM_PROMPT = """You are an AI assistant for a "Rate My Professor" platform. Your role is to help students find the most suitable professors based on their queries. You have access to a comprehensive database of professor reviews and ratings.

For each user question, you will receive the top 3 relevant professor profiles retrieved using RAG (Retrieval-Augmented Generation). Your task is to analyze these profiles and present the information in a helpful, concise, and unbiased manner.

When responding to queries:

1. Always provide information on the top 3 professors most relevant to the query.
2. Include key details such as the professor's name, subject, average rating, and a brief summary of their reviews.
3. Highlight both positive and negative aspects mentioned in the reviews to give a balanced perspective.
4. If the query is about a specific subject or teaching style, emphasize how each professor matches those criteria.
5. Avoid making personal judgments or recommendations. Instead, present the information objectively and let the student make their own decision.
6. If the query is vague or could be interpreted in multiple ways, ask for clarification before providing an answer.
7. If a student asks about a professor not in the top 3 results, politely explain that you can only provide information on the most relevant matches based on their query.
8. Be prepared to answer follow-up questions about the professors or explain certain aspects of the reviews in more detail.

Remember, your goal is to assist students in making informed decisions about their course selections based on professor reviews and ratings. Always maintain a helpful, respectful, and neutral tone in your responses.
"""

RESULTS_HEADER = "\n\nReturned results from vector db (Done automatically): "

MATCH_TEMPLATE = (
    "\n\n\n"
    "      Professor: {id}\n"
    "      Review: {review}\n"
    "      Subject: {subject}\n"
    "      Stars: {stars}\n"
    "      \n\n"
)


def format_stars(stars: Union[int, float]) -> str:
    """Render a rating, dropping the decimal part of whole numbers (5.0 -> 5)"""
    if isinstance(stars, float) and stars.is_integer():
        return str(int(stars))
    return str(stars)


def format_matches(matches: Sequence[MatchResult]) -> str:
    """
    Render retrieved matches as the text block appended to the last message.

    Args:
        matches: Matches in ranked order (any count, including zero)

    Returns:
        Header followed by one block per match
    """
    parts = [RESULTS_HEADER]
    for match in matches:
        parts.append(
            MATCH_TEMPLATE.format(
                id=match.id,
                review=match.metadata.review,
                subject=match.metadata.subject,
                stars=format_stars(match.metadata.stars),
            )
        )
    return "".join(parts)


class PromptBuilder:
    """Builder for the completion request's message list"""

    def __init__(self, system_prompt: str = SYSTEM_PROMPT):
        self.system_prompt = system_prompt

    def augment(self, message: ChatMessage, matches: Sequence[MatchResult]) -> str:
        """Return the message content with the match block appended"""
        return message.content + format_matches(matches)

    def build_messages(
        self,
        conversation: Sequence[ChatMessage],
        matches: Sequence[MatchResult],
    ) -> List[Dict[str, str]]:
        """
        Build the full message list for the completion model.

        Args:
            conversation: Non-empty conversation in chronological order
            matches: Matches retrieved for the last message

        Returns:
            [system prompt, *earlier messages unchanged, augmented last message]
        """
        *history, last = conversation

        messages = [{"role": ChatMessageRole.SYSTEM.value, "content": self.system_prompt}]
        messages.extend(m.to_openai() for m in history)
        # The augmented message always goes out as a user turn
        messages.append({
            "role": ChatMessageRole.USER.value,
            "content": self.augment(last, matches),
        })

        logger.debug(
            f"Built {len(messages)} messages with {len(matches)} matches "
            f"(system prompt v{SYSTEM_PROMPT_VERSION})"
        )
        return messages


# Global prompt builder
_prompt_builder = None


def get_prompt_builder() -> PromptBuilder:
    """Get or create prompt builder instance"""
    global _prompt_builder
    if _prompt_builder is None:
        _prompt_builder = PromptBuilder()
    return _prompt_builder
