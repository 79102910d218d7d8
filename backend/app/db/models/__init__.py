"""ORM models exposed for metadata discovery."""
from app.db.models.daily_plan import DailyPlan
from app.db.models.long_term_goal import LongTermGoal
from app.db.models.profile import Profile
from app.db.models.user import User

__all__ = [
    "DailyPlan",
    "LongTermGoal",
    "Profile",
    "User",
]
