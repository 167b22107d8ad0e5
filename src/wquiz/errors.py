class QuizError(Exception):
    """Base class for errors raised by wquiz."""


class ContentUnavailable(QuizError):
    """The quiz content could not be obtained from its source."""


class ShareError(QuizError):
    """Formatting or exporting a result failed."""
