# sentiment service: classifies free text with gemini
# normalizes the model reply into SentimentResult, neutral on any failure

import logging
from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate

from app.models.sentiment import SentimentResult
from app.services.ai_service import get_llm

logger = logging.getLogger(__name__)

SENTIMENT_PROMPT = ChatPromptTemplate.from_messages([
    ("human", """Analyze the sentiment of the following text and respond with a JSON object containing:
- score: a number between -1 (very negative) and 1 (very positive)
- label: either "positive", "negative", or "neutral"
- confidence: a number between 0 and 1 indicating confidence in the analysis

Text: "{text}"

Respond only with valid JSON."""),
])


class SentimentClassifier:
    """single-attempt sentiment classification with a neutral fallback.

    the llm is created lazily so an unconfigured api key only degrades
    classification instead of breaking app startup.
    """

    def __init__(self, llm: Optional[BaseChatModel] = None):
        self._llm = llm
        self._chain = None

    def _get_chain(self):
        if self._chain is None:
            llm = self._llm or get_llm(temperature=0.0, max_output_tokens=100)
            self._chain = SENTIMENT_PROMPT | llm | JsonOutputParser()
        return self._chain

    async def analyze(self, text: str) -> SentimentResult:
        try:
            raw = await self._get_chain().ainvoke({"text": text})
            return SentimentResult.model_validate(raw)
        except Exception as e:
            # provider errors, bad json and out-of-range values all land here
            logger.warning(f"Sentiment analysis failed, falling back to neutral: {e}")
            return SentimentResult.neutral()


# singleton used by the api
sentiment_classifier = SentimentClassifier()


def get_sentiment_classifier() -> SentimentClassifier:
    """dependency injection for the sentiment classifier"""
    return sentiment_classifier
