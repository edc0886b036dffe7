# keyword tagging for journal entries
# most frequent non-stopword words, recomputed whenever content changes

import re
from collections import Counter

MAX_TAGS = 5
MIN_WORD_LENGTH = 4

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "be", "been", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might",
    "must", "can", "this", "that", "these", "those", "i", "you", "he", "she",
    "it", "we", "they", "me", "him", "her", "us", "them",
})

_NON_WORD = re.compile(r"[^\w\s]")


def extract_tags(content: str, limit: int = MAX_TAGS) -> list[str]:
    """return up to `limit` keywords ordered by frequency, ties by first appearance"""
    words = _NON_WORD.sub("", content.lower()).split()
    counts = Counter(
        w for w in words if len(w) >= MIN_WORD_LENGTH and w not in STOPWORDS
    )
    # Counter.most_common keeps insertion order for equal counts
    return [word for word, _ in counts.most_common(limit)]
