import re
from typing import Tuple, Union
from config.config import Config

MIN_SCORE = 1
MAX_SCORE = 5


def validate_score(value, field: str = 'rating') -> Tuple[bool, Union[int, str]]:
    """Validate a 1-5 score, returning the integer value on success"""
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or value is None:
        return False, f"{field} must be an integer between {MIN_SCORE} and {MAX_SCORE}"

    if isinstance(value, str):
        value = value.strip()
        if not re.match(r'^\d+$', value):
            return False, f"{field} must be an integer between {MIN_SCORE} and {MAX_SCORE}"
        value = int(value)

    if not isinstance(value, int):
        return False, f"{field} must be an integer between {MIN_SCORE} and {MAX_SCORE}"

    if value < MIN_SCORE or value > MAX_SCORE:
        return False, f"{field} must be between {MIN_SCORE} and {MAX_SCORE}"

    return True, value


def validate_comment(comment: str) -> Tuple[bool, str]:
    """Validate review comment, returning the trimmed text on success"""
    if not isinstance(comment, str) or not comment.strip():
        return False, "Comment is required"

    comment = comment.strip()
    if len(comment) < Config.REVIEW_COMMENT_MIN_LENGTH:
        return False, f"Comment must be at least {Config.REVIEW_COMMENT_MIN_LENGTH} characters"

    return True, comment
