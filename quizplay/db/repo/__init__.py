from quizplay.db.repo.badges_repo import BadgesRepo, UserBadgesRepo
from quizplay.db.repo.duel_invitations_repo import DuelInvitationsRepo
from quizplay.db.repo.duels_repo import DuelsRepo
from quizplay.db.repo.game_answers_repo import GameAnswersRepo
from quizplay.db.repo.game_sessions_repo import GameSessionsRepo
from quizplay.db.repo.monthly_rankings_repo import MonthlyRankingsRepo
from quizplay.db.repo.profiles_repo import ProfilesRepo
from quizplay.db.repo.questions_repo import QuestionsRepo
from quizplay.db.repo.quizzes_repo import QuizzesRepo

__all__ = [
    "BadgesRepo",
    "DuelInvitationsRepo",
    "DuelsRepo",
    "GameAnswersRepo",
    "GameSessionsRepo",
    "MonthlyRankingsRepo",
    "ProfilesRepo",
    "QuestionsRepo",
    "QuizzesRepo",
    "UserBadgesRepo",
]
