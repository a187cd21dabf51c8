from fastapi import APIRouter
from salestrack.api.v1.endpoints.admin import config, integrity, team_radar
from salestrack.api.v1.endpoints.admin import weekday_questions as admin_weekday_questions
from salestrack.api.v1.endpoints.alerts import alerts
from salestrack.api.v1.endpoints.auth import users
from salestrack.api.v1.endpoints.dashboard import progress
from salestrack.api.v1.endpoints.goals import annual_goals, goals, monthly_planning
from salestrack.api.v1.endpoints.leadership import weekly_conversation
from salestrack.api.v1.endpoints.organization import teams
from salestrack.api.v1.endpoints.tracking import daily_entries, weekday_questions

api_router = APIRouter()

# User and organization routes
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(teams.router, prefix="/teams", tags=["Organization"])

# Tracking routes
api_router.include_router(daily_entries.router, prefix="/daily-entries", tags=["Tracking"])
api_router.include_router(weekday_questions.router, prefix="/weekday-questions", tags=["Tracking"])
api_router.include_router(progress.router, prefix="/progress", tags=["Progress"])
api_router.include_router(goals.router, prefix="/goals", tags=["Goals"])

# Leadership / planning routes
api_router.include_router(annual_goals.router, prefix="/admin/annual-goals", tags=["Planning"])
api_router.include_router(monthly_planning.router, prefix="/admin/monthly-planning", tags=["Planning"])
api_router.include_router(weekly_conversation.router, prefix="/admin/leadership", tags=["Leadership"])

# Administration routes
api_router.include_router(config.router, prefix="/admin/config", tags=["Administration"])
api_router.include_router(integrity.router, prefix="/admin/integrity-check", tags=["Administration"])
api_router.include_router(admin_weekday_questions.router, prefix="/admin/weekday-questions", tags=["Administration"])
api_router.include_router(team_radar.router, prefix="/admin/team-radar", tags=["Administration"])
api_router.include_router(alerts.router, prefix="/alerts", tags=["Alerts"])
