#!/usr/bin/env python3
"""
Client-side data access through the named database procedures.
The procedures run with the caller's token so the database can check the
client owns the rows it touches.
"""

import logging
from typing import Any, Dict, List

from lib.exceptions import DoseCareError, RemoteProcedureError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

CLIENT_DOSE_STATUSES = ("taken", "skipped")


class ClientProcedures:
    """Remote procedures available to a signed-in client"""

    def __init__(self, supabase: SupabaseClient, client_id: str, access_token: str):
        self.supabase = supabase
        self.client_id = client_id
        self.access_token = access_token

    async def _call(self, name: str, params: Dict[str, Any]) -> Any:
        return await self.supabase.rpc(name, params, access_token=self.access_token)

    async def get_medications(self) -> List[Dict[str, Any]]:
        return await self._call("get_client_medications", {"client_id": self.client_id}) or []

    async def get_dose_records(self) -> List[Dict[str, Any]]:
        return await self._call("get_client_dose_records", {"client_id": self.client_id}) or []

    async def update_missed_doses(self) -> bool:
        """Mark overdue pending doses as missed. Failures are logged only."""
        try:
            await self._call("update_missed_doses_for_client", {"client_id": self.client_id})
            return True
        except RemoteProcedureError as e:
            logger.warning(f"⚠️ Could not update missed doses for {self.client_id}: {e.message}")
            return False

    async def update_dose_status(self, dose_id: str, new_status: str) -> Any:
        if new_status not in CLIENT_DOSE_STATUSES:
            raise DoseCareError(f"Invalid status: {new_status}")
        result = await self._call("update_client_dose_status", {
            "client_id": self.client_id,
            "dose_id": dose_id,
            "new_status": new_status,
        })
        logger.info(f"💊 Client {self.client_id} marked dose {dose_id} {new_status}")
        return result

    async def delete_medication(self, medication_id: str) -> bool:
        result = await self._call("delete_client_medication", {
            "p_medication_id": medication_id,
            "p_client_id": self.client_id,
        })
        return bool(result)
