# clinic_notify/core/exceptions.py
"""Service-layer errors"""
from typing import Optional


class ClinicNotifyError(Exception):
    """Base class for errors raised by the notification service"""


class AppointmentFetchError(ClinicNotifyError):
    """The booking backend returned no usable data this cycle"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ReminderSinkError(ClinicNotifyError):
    """The reminder sink rejected a request"""
