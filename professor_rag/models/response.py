from pydantic import BaseModel, Field
from typing import Optional, Union, Dict, Any
from datetime import datetime, timezone
from enum import Enum


class ResponseStatus(str, Enum):
    """Response status enumeration"""
    OK = "ok"
    DEGRADED = "degraded"


class MatchMetadata(BaseModel):
    """Review metadata stored alongside each professor vector"""
    review: str = Field(..., description="Review text")
    subject: str = Field(..., description="Subject taught")
    stars: Union[int, float] = Field(..., description="Star rating")

    model_config = {"extra": "allow"}


class MatchResult(BaseModel):
    """Single nearest-neighbour match returned by the vector index"""
    id: str = Field(..., description="Professor identifier")
    score: Optional[float] = Field(None, description="Similarity score")
    metadata: MatchMetadata

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "Dr. Emily Carter",
                "score": 0.83,
                "metadata": {
                    "review": "Explains algorithms clearly.",
                    "subject": "Computer Science",
                    "stars": 5,
                },
            }
        }
    }


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: ResponseStatus = Field(..., description="Overall status")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Check timestamp",
    )
    embedding_model: str = Field(..., description="Embedding model name")
    llm_model: str = Field(..., description="Completion model name")
    index: Dict[str, Any] = Field(default_factory=dict, description="Vector index details")
