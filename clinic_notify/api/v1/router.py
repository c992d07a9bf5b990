"""
API v1 router setup
"""
from fastapi import APIRouter

from clinic_notify.api.v1 import appointments, notifications

api_v1_router = APIRouter()

api_v1_router.include_router(
    notifications.router,
    tags=["Notifications"]
)

api_v1_router.include_router(
    appointments.router,
    tags=["Appointments"]
)
