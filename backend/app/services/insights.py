# insight generator: heuristic observations over aggregated analytics
#
# each rule is a (predicate, message) pair. rules in a group are either
# independent (every match fires) or one-of (first match wins). the
# generator is pure: same analytics in, same lists out.

from typing import Callable, NamedTuple, Optional

from app.models.analytics import Insights, JournalAnalytics, MoodAnalytics

ANXIOUS_EMOTIONS = {"anxiety", "worry", "stress"}
LOW_EMOTIONS = {"sadness", "loneliness", "depression"}


class Rule(NamedTuple):
    applies: Callable[..., bool]
    message: Callable[..., str]


def _fixed(text: str) -> Callable[..., str]:
    return lambda *_: text


def _first_match(rules: list[Rule], *args) -> Optional[str]:
    for rule in rules:
        if rule.applies(*args):
            return rule.message(*args)
    return None


def _all_matches(rules: list[Rule], *args) -> list[str]:
    return [rule.message(*args) for rule in rules if rule.applies(*args)]


def _last_three(mood: MoodAnalytics) -> list[float]:
    return mood.mood_trend[-3:]


def _strictly_increasing(values: list[float]) -> bool:
    return len(values) == 3 and values[0] < values[1] < values[2]


def _strictly_decreasing(values: list[float]) -> bool:
    return len(values) == 3 and values[0] > values[1] > values[2]


def _top_emotion(mood: MoodAnalytics) -> Optional[str]:
    return mood.emotion_frequency[0].emotion if mood.emotion_frequency else None


def _positive_ratio(journal: JournalAnalytics) -> Optional[float]:
    total = journal.sentiment_distribution.total
    if not total:
        return None
    return journal.sentiment_distribution.positive / total


# mood

MOOD_LEVEL_RULES = [
    Rule(lambda m: m.average_mood > 7,
         _fixed("You've been feeling quite positive lately! Keep up the great work.")),
    Rule(lambda m: m.average_mood < 4,
         _fixed("You've been going through a tough time. Remember, it's okay to not be okay.")),
    Rule(lambda m: True,
         _fixed("Your mood has been relatively stable. Consider what helps you feel your best.")),
]

MOOD_TREND_RULES = [
    Rule(lambda m: _strictly_increasing(_last_three(m)),
         _fixed("Your mood has been improving over the past few days!")),
    Rule(lambda m: _strictly_decreasing(_last_three(m)),
         _fixed("Your mood has been declining recently. Consider reaching out for support.")),
]

MOOD_EMOTION_RULES = [
    Rule(lambda m: _top_emotion(m) is not None,
         lambda m: f"Your most common emotion lately has been {_top_emotion(m)}."),
]


# journal

JOURNAL_VOLUME_RULES = [
    Rule(lambda j: j.total_entries > 20,
         _fixed("You've been very consistent with journaling! This is great for your mental health.")),
    Rule(lambda j: j.total_entries < 5,
         _fixed("Consider journaling more regularly. Even a few minutes a day can help.")),
]

JOURNAL_LENGTH_RULES = [
    Rule(lambda j: j.average_length > 500,
         _fixed("You write detailed entries, which shows great self-reflection.")),
]

JOURNAL_SENTIMENT_RULES = [
    Rule(lambda j: _positive_ratio(j) is not None and _positive_ratio(j) > 0.6,
         _fixed("Your journal entries tend to be quite positive. This is wonderful!")),
    Rule(lambda j: _positive_ratio(j) is not None and _positive_ratio(j) < 0.3,
         _fixed("Your journal entries have been more negative lately. Consider what might help.")),
]


# recommendations, evaluated over both analytics

RECOMMENDATION_RULES = [
    Rule(lambda m, j: m.average_mood < 5,
         _fixed("Consider trying some coping strategies or reaching out to a trusted person.")),
    Rule(lambda m, j: j.total_entries < 10,
         _fixed("Try journaling for 5-10 minutes each day to build a healthy habit.")),
]

EMOTION_RECOMMENDATION_RULES = [
    Rule(lambda m, j: (_top_emotion(m) or "").lower() in ANXIOUS_EMOTIONS,
         _fixed("Try some breathing exercises or mindfulness techniques to help with anxiety.")),
    Rule(lambda m, j: (_top_emotion(m) or "").lower() in LOW_EMOTIONS,
         _fixed("Consider reaching out to friends or family, or try some uplifting activities.")),
]

CLOSING_RECOMMENDATION = "Remember to be kind to yourself and celebrate small wins."


def mood_insights(mood: MoodAnalytics) -> list[str]:
    insights = [_first_match(MOOD_LEVEL_RULES, mood)]
    if mood.mood_trend:
        insights.append(_first_match(MOOD_TREND_RULES, mood))
    insights.extend(_all_matches(MOOD_EMOTION_RULES, mood))
    return [i for i in insights if i]


def journal_insights(journal: JournalAnalytics) -> list[str]:
    insights = [_first_match(JOURNAL_VOLUME_RULES, journal)]
    insights.extend(_all_matches(JOURNAL_LENGTH_RULES, journal))
    insights.append(_first_match(JOURNAL_SENTIMENT_RULES, journal))
    return [i for i in insights if i]


def recommendations(mood: MoodAnalytics, journal: JournalAnalytics) -> list[str]:
    recs = _all_matches(RECOMMENDATION_RULES, mood, journal)
    emotion_rec = _first_match(EMOTION_RECOMMENDATION_RULES, mood, journal)
    if emotion_rec:
        recs.append(emotion_rec)
    recs.append(CLOSING_RECOMMENDATION)
    return recs


def generate_insights(mood: MoodAnalytics, journal: JournalAnalytics) -> Insights:
    return Insights(
        mood_insights=mood_insights(mood),
        journal_insights=journal_insights(journal),
        recommendations=recommendations(mood, journal),
    )
