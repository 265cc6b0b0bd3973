from pydantic import BaseModel, Field
from enum import Enum


class ChatMessageRole(str, Enum):
    """Chat message role enumeration"""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessage(BaseModel):
    """Single chat message, passed to the completion model as received"""
    role: ChatMessageRole
    content: str = Field(..., description="Message text")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {"role": "user", "content": "Who teaches algorithms well?"}
        },
    }

    def to_openai(self) -> dict:
        """Render as an OpenAI chat message dict"""
        return {"role": self.role.value, "content": self.content}
