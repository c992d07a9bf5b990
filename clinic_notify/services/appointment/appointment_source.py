# clinic_notify/services/appointment/appointment_source.py
"""Client for the booking backend's appointment list"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from clinic_notify.core.exceptions import AppointmentFetchError

logger = logging.getLogger(__name__)


class AppointmentSource:
    """Fetches the signed-in patient's booked services"""

    def __init__(
            self,
            base_url: str,
            path: str = "/api/booked-services",
            timeout: float = 5.0,
            http_client: Optional[httpx.AsyncClient] = None
    ):
        self.path = path
        self.http_client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            follow_redirects=True
        )

    async def fetch(self, token: str) -> List[Dict[str, Any]]:
        """
        Get the raw appointment list.

        Args:
            token: Bearer token of the patient, passed through unchanged

        Raises:
            AppointmentFetchError: on transport errors, non-2xx responses or
                a body that is not a JSON list
        """
        headers = {"Authorization": f"Bearer {token}"}

        try:
            response = await self.http_client.get(self.path, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"Appointment fetch timed out: {e}")
            raise AppointmentFetchError("Appointment service timed out") from e
        except httpx.RequestError as e:
            logger.error(f"Appointment fetch failed: {e}")
            raise AppointmentFetchError(f"Appointment service unreachable: {str(e)[:200]}") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Appointment fetch returned HTTP {response.status_code}: {response.text[:200]}")
            raise AppointmentFetchError(
                f"Appointment service returned HTTP {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AppointmentFetchError("Appointment service returned invalid JSON") from e

        if data is None:
            return []
        if not isinstance(data, list):
            raise AppointmentFetchError("Appointment service returned an unexpected payload")

        logger.info(f"Fetched {len(data)} appointment(s)")
        return data

    async def close(self) -> None:
        await self.http_client.aclose()
