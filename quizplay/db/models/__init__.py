from quizplay.db.models.badges import Badge
from quizplay.db.models.duel_invitations import DuelInvitation
from quizplay.db.models.duels import Duel
from quizplay.db.models.game_answers import GameAnswer
from quizplay.db.models.game_sessions import GameSession
from quizplay.db.models.monthly_rankings import MonthlyRanking
from quizplay.db.models.profiles import Profile
from quizplay.db.models.questions import QuizQuestion
from quizplay.db.models.quizzes import Quiz
from quizplay.db.models.user_badges import UserBadge

__all__ = [
    "Badge",
    "Duel",
    "DuelInvitation",
    "GameAnswer",
    "GameSession",
    "MonthlyRanking",
    "Profile",
    "Quiz",
    "QuizQuestion",
    "UserBadge",
]
