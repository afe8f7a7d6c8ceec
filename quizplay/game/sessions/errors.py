class GameSessionError(Exception):
    pass


class QuizNotFoundError(GameSessionError):
    pass


class EmptyQuizError(GameSessionError):
    pass


class PlayerNotFoundError(GameSessionError):
    pass


class EmptyAnswerError(GameSessionError):
    pass


class InvalidAnswerOptionError(GameSessionError):
    pass


class PersistenceError(GameSessionError):
    pass


class SessionCompletionError(GameSessionError):
    pass


class DuelNotFoundError(GameSessionError):
    pass


class DuelAccessError(GameSessionError):
    pass


class SelfDuelError(GameSessionError):
    pass


class DuelInvitationNotFoundError(GameSessionError):
    pass


class DuelInvitationAccessError(GameSessionError):
    pass


class DuelInvitationClosedError(GameSessionError):
    pass


class DuelInvitationExpiredError(GameSessionError):
    pass
