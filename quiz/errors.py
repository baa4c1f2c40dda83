# quiz/errors.py - Failures surfaced to users as ephemeral replies

GENERIC_ERROR_MESSAGE = "There was an error while executing this command!"


class QuizError(Exception):
    """Base class for quiz failures that carry a user-facing message"""

    user_message = GENERIC_ERROR_MESSAGE

    def __init__(self, detail: str = None):
        super().__init__(detail or self.user_message)


class NoQuestionAvailable(QuizError):
    user_message = "Failed to fetch a quiz question. Please try again later."


class NoPendingQuiz(QuizError):
    user_message = "No quiz in progress or answer not provided."


class ChannelNotAllowed(QuizError):
    user_message = "This command can only be used in specific channels."


class PersistenceFailure(QuizError):
    user_message = GENERIC_ERROR_MESSAGE
