from .admin import router as admin_router
from .leaderboard import router as leaderboard_router
from .question_bank import router as question_bank_router
from .quiz import router as quiz_router
from .study_plan import router as study_plan_router
from .user import router as user_router

routes = [
    admin_router,
    user_router,
    quiz_router,
    leaderboard_router,
    study_plan_router,
    question_bank_router,
]
