# ai service: gemini text generation through langchain
# chat replies, journal prompts, coping suggestions and session summaries
#
# every public method degrades to a fixed fallback when the model call
# fails, so callers never have to handle provider errors themselves.

import logging
from typing import Callable, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser, StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI

from app.config import settings

logger = logging.getLogger(__name__)

LLMFactory = Callable[..., BaseChatModel]


def get_llm(temperature: float = 0.7, max_output_tokens: int = 500) -> ChatGoogleGenerativeAI:
    """create a gemini llm instance. single attempt, callers handle fallbacks."""
    return ChatGoogleGenerativeAI(
        model=settings.GEMINI_MODEL,
        google_api_key=settings.GEMINI_API_KEY,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
        max_retries=1,
        timeout=30,
    )


# fallbacks

CHAT_FALLBACK = "I apologize, but I cannot provide a response at this time. Please try again later."
CHAT_FALLBACK_SUGGESTIONS = [
    "How are you feeling today?",
    "Would you like to talk about something specific?",
]
JOURNAL_PROMPT_FALLBACK = "How are you feeling today? What thoughts are on your mind?"
COPING_FALLBACK = [
    "Take 5 deep breaths",
    "Practice mindfulness meditation",
    "Write down your thoughts",
    "Go for a short walk",
    "Listen to calming music",
]
SESSION_SUMMARY_FALLBACK = (
    "Great job completing your wellness session! Take a moment to appreciate your effort."
)


# language specific content

SYSTEM_PROMPTS = {
    "en": """You are a compassionate mental health AI assistant for young adults in Sri Lanka.
Provide supportive, non-judgmental responses. Focus on:
- Active listening and empathy
- Evidence-based mental health advice
- Encouraging self-care and coping strategies
- Cultural sensitivity to Sri Lankan context
- Crisis awareness (suggest professional help when needed)
Keep responses conversational, supportive, and under 200 words.""",
    "si": """ඔබ ශ්‍රී ලංකාවේ තරුණ වැඩිහිටියන් සඳහා සහායක මානසික සෞඛ්‍ය AI සහායකයෙකි.
සහායක, විනිශ්චය නොකරන ප්‍රතිචාර ලබා දෙන්න. මෙම කරුණු මත අවධානය යොමු කරන්න:
- ක්‍රියාකාරී සවන් දීම සහ සහානුභූතිය
- සාක්ෂි-ආශ්‍රිත මානසික සෞඛ්‍ය උපදෙස්
- ස්වයං රැකවරණය සහ මුහුණ දීමේ උපායන් දිරිමත් කිරීම
- ශ්‍රී ලාංකික සන්දර්භයට සංස්කෘතික සංවේදීතාව
- අර්බුද දැනුවත්භාවය (අවශ්‍ය විට වෘත්තීය උපකාරය යෝජනා කරන්න)
ප්‍රතිචාර සාකච්ඡාකාරී, සහායක සහ වචන 200 ට අඩුවෙන් තබන්න.""",
    "ta": """நீங்கள் இலங்கையின் இளம் வயதினருக்கான அனுதாபமான மனநல AI உதவியாளர்.
ஆதரவான, தீர்ப்பளிக்காத பதில்களை வழங்குங்கள். இந்த விஷயங்களில் கவனம் செலுத்துங்கள்:
- செயலில் கேட்டல் மற்றும் அனுதாபம்
- சான்று-அடிப்படையிலான மனநல ஆலோசனை
- சுய பராமரிப்பு மற்றும் சமாளிக்கும் உத்திகளை ஊக்குவித்தல்
- இலங்கை சூழலுக்கு கலாச்சார உணர்வு
- நெருக்கடி விழிப்புணர்வு (தேவையானபோது தொழில்முறை உதவியை பரிந்துரைக்கவும்)
பதில்களை உரையாடல், ஆதரவான மற்றும் 200 வார்த்தைகளுக்குள் வைத்திருங்கள்.""",
}

# follow-up suggestions attached to every assistant reply
REPLY_SUGGESTIONS = {
    "en": [
        "How are you feeling right now?",
        "What would help you feel better?",
        "Would you like to talk about something specific?",
        "How can I support you today?",
    ],
    "si": [
        "දැන් ඔබට කොහොම දැනෙනවද?",
        "ඔබට හොඳට දැනෙන්න කුමක් උදව් වේද?",
        "ඔබට කිසියම් දෙයක් ගැන කතා කිරීමට අවශ්‍යද?",
        "අද මම ඔබට කොහොම සහාය විය හැකිද?",
    ],
    "ta": [
        "இப்போது உங்களுக்கு எப்படி உணருகிறீர்கள்?",
        "உங்களுக்கு நன்றாக உணர உதவுவது என்ன?",
        "ஏதாவது குறிப்பிட்ட விஷயத்தைப் பற்றி பேச விரும்புகிறீர்களா?",
        "இன்று நான் உங்களுக்கு எப்படி ஆதரவளிக்க முடியும்?",
    ],
}

# conversation starters offered before a chat begins
CHAT_STARTERS = {
    "en": [
        "I'm feeling anxious today",
        "I had a great day!",
        "I'm struggling with motivation",
        "I want to talk about my relationships",
        "I'm feeling overwhelmed",
        "I need help with sleep",
        "I'm dealing with stress at work",
        "I want to practice mindfulness",
    ],
    "si": [
        "අද මට කනස්සල්ලක් දැනෙනවා",
        "අද මට හොඳ දිනයක් ගත වුණා!",
        "මට අභිප්‍රේරණය ගැන ගැටලුවක් තියෙනවා",
        "මට මගේ සම්බන්ධතා ගැන කතා කිරීමට අවශ්‍යයි",
        "මට අධික බරක් දැනෙනවා",
        "මට නින්ද ගැන උදව් අවශ්‍යයි",
        "මට වැඩේ ගැන ආතතියක් තියෙනවා",
        "මට සතිඥානය පුරුදු කිරීමට අවශ්‍යයි",
    ],
    "ta": [
        "இன்று எனக்கு கவலை உள்ளது",
        "இன்று எனக்கு நல்ல நாள்!",
        "எனக்கு உந்துதல் பிரச்சினை உள்ளது",
        "எனது உறவுகளைப் பற்றி பேச விரும்புகிறேன்",
        "எனக்கு அதிக சுமை தெரிகிறது",
        "எனக்கு தூக்கம் பற்றி உதவி தேவை",
        "வேலையில் மன அழுத்தம் உள்ளது",
        "நான் மனநிலை பயிற்சி செய்ய விரும்புகிறேன்",
    ],
}


def _for_language(table: dict, language: Optional[str]):
    return table.get(language or "en", table["en"])


# prompt templates

CHAT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "{system_prompt}"),
    ("human", """Context:
{context}

User message: {message}"""),
])

JOURNAL_PROMPT = ChatPromptTemplate.from_messages([
    ("human", """Generate a thoughtful journaling prompt for someone{mood_clause}{history_clause}.
The prompt should be encouraging, non-judgmental, and help them reflect on their thoughts and feelings.
Keep it under 100 words."""),
])

COPING_PROMPT = ChatPromptTemplate.from_messages([
    ("human", """Based on a mood rating of {mood}/10 and emotions: {emotions}, suggest 3-5 specific coping strategies.
Focus on evidence-based techniques like mindfulness, CBT, breathing exercises, or grounding techniques.
Make suggestions practical and actionable. Respond with a JSON array of strings."""),
])

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("human", """Generate a brief, encouraging summary for an 8-minute wellness session.
Steps completed: {steps}
{mood_line}
Make it positive, reflective, and encouraging. Keep it under 200 words."""),
])


def _mood_clause(mood: Optional[int]) -> str:
    if not mood:
        return ""
    if mood <= 3:
        return " who is feeling low or struggling"
    if mood <= 6:
        return " who is feeling neutral or mixed emotions"
    return " who is feeling positive or good"


class AIService:
    """gemini-backed text generation with fixed fallbacks"""

    def __init__(self, llm_factory: LLMFactory = get_llm):
        self._llm_factory = llm_factory

    async def chat_reply(
        self, message: str, context: str = "", language: str = "en"
    ) -> tuple[str, list[str]]:
        """generate an assistant reply plus follow-up suggestions"""
        try:
            llm = self._llm_factory(temperature=0.7, max_output_tokens=500)
            chain = CHAT_PROMPT | llm | StrOutputParser()
            content = await chain.ainvoke({
                "system_prompt": _for_language(SYSTEM_PROMPTS, language),
                "context": context or "(no earlier messages)",
                "message": message,
            })
            if not content.strip():
                raise ValueError("empty reply")
            return content.strip(), list(_for_language(REPLY_SUGGESTIONS, language))
        except Exception as e:
            logger.error(f"Chat reply generation failed: {e}")
            return CHAT_FALLBACK, list(CHAT_FALLBACK_SUGGESTIONS)

    async def journal_prompt(
        self, mood: Optional[int] = None, previous_entries: Optional[list[str]] = None
    ) -> str:
        """generate a journaling prompt tuned to mood and recent writing"""
        history_clause = ""
        if previous_entries:
            history_clause = f" based on their recent journal entries: {', '.join(previous_entries)}"
        try:
            llm = self._llm_factory(temperature=0.8, max_output_tokens=150)
            chain = JOURNAL_PROMPT | llm | StrOutputParser()
            prompt = await chain.ainvoke({
                "mood_clause": _mood_clause(mood),
                "history_clause": history_clause,
            })
            return prompt.strip() or JOURNAL_PROMPT_FALLBACK
        except Exception as e:
            logger.error(f"Journal prompt generation failed: {e}")
            return JOURNAL_PROMPT_FALLBACK

    async def coping_suggestions(self, mood: int, emotions: list[str], language: str = "en") -> list[str]:
        """ask for 3-5 coping strategies as a json array of strings"""
        try:
            llm = self._llm_factory(temperature=0.6, max_output_tokens=200)
            chain = COPING_PROMPT | llm | JsonOutputParser()
            suggestions = await chain.ainvoke({"mood": mood, "emotions": ", ".join(emotions)})
            if not isinstance(suggestions, list):
                return []
            return [str(s) for s in suggestions]
        except Exception as e:
            logger.error(f"Coping suggestion generation failed: {e}")
            return list(COPING_FALLBACK)

    async def session_summary(
        self, step_titles: list[str], overall_mood: Optional[int] = None, language: str = "en"
    ) -> str:
        """summarize a finished wellness session"""
        try:
            llm = self._llm_factory(temperature=0.7, max_output_tokens=250)
            chain = SUMMARY_PROMPT | llm | StrOutputParser()
            summary = await chain.ainvoke({
                "steps": ", ".join(step_titles) or "none",
                "mood_line": f"Overall mood: {overall_mood}/10" if overall_mood else "",
            })
            return summary.strip() or SESSION_SUMMARY_FALLBACK
        except Exception as e:
            logger.error(f"Session summary generation failed: {e}")
            return SESSION_SUMMARY_FALLBACK

    @staticmethod
    def chat_starters(language: str = "en") -> list[str]:
        return list(_for_language(CHAT_STARTERS, language))


# singleton used by the api
ai_service = AIService()


def get_ai_service() -> AIService:
    """dependency injection for the ai service"""
    return ai_service
