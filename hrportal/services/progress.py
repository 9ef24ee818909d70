WORDS_FOR_FULL_DAY = 50


def score_daily_progress(accomplishments: str) -> int:
    """Percentage of a full day's report, by word count, capped at 100."""
    word_count = len(accomplishments.split())
    return min(100, round(word_count / WORDS_FOR_FULL_DAY * 100))
