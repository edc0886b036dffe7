# sentiment models: classifier output embedded in mood and journal entries

from typing import Literal
from pydantic import BaseModel, Field

SentimentLabel = Literal["positive", "negative", "neutral"]


class SentimentResult(BaseModel):
    score: float = Field(0.0, ge=-1, le=1, description="-1 very negative .. 1 very positive")
    label: SentimentLabel = "neutral"
    confidence: float = Field(0.5, ge=0, le=1)

    @classmethod
    def neutral(cls) -> "SentimentResult":
        """fallback used whenever the classifier cannot produce a usable answer"""
        return cls(score=0.0, label="neutral", confidence=0.5)
