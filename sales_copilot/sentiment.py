import logging

from .schemas import SentimentResult

logger = logging.getLogger(__name__)


POSITIVE_WORDS = ["bom", "ótimo", "excelente", "perfeito", "gosto", "interessante"]
NEGATIVE_WORDS = ["ruim", "caro", "difícil", "problema", "preocupado", "não"]


def analyze_sentiment(text: str) -> SentimentResult:
    """
    Keyword sentiment: each listed word present in the text moves the score by one.

    Presence is a substring check, so repeated words count once.
    """
    lowered = text.lower()
    score = 0
    emotions = []

    for word in POSITIVE_WORDS:
        if word in lowered:
            score += 1
            emotions.append("positive")

    for word in NEGATIVE_WORDS:
        if word in lowered:
            score -= 1
            emotions.append("concern")

    if score > 0:
        sentiment = "positive"
    elif score < 0:
        sentiment = "negative"
    else:
        sentiment = "neutral"

    confidence = min(90, abs(score) * 20 + 50)
    logger.info("Sentiment: %s (%d%% confidence)", sentiment, confidence)

    return SentimentResult(
        sentiment=sentiment,
        confidence=confidence,
        emotions=list(dict.fromkeys(emotions)),
    )
