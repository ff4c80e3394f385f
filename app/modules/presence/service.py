from supabase import Client
from app.core.utils import parse_timestamp, utc_now, utc_now_iso
from app.modules.presence.schemas import PresenceResponse, PresenceWithProfileResponse
from datetime import datetime, timedelta
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class PresenceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def heartbeat(self, user_id: str, session_id: Optional[str] = None) -> PresenceResponse:
        """Mark the user online now"""
        try:
            now = utc_now_iso()
            result = self.supabase.table("user_presence").upsert({
                "user_id": user_id,
                "is_online": True,
                "last_seen": now,
                "session_id": session_id,
                "updated_at": now,
            }, on_conflict="user_id").execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update presence")
            return PresenceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def go_offline(self, user_id: str) -> PresenceResponse:
        try:
            now = utc_now_iso()
            result = self.supabase.table("user_presence").upsert({
                "user_id": user_id,
                "is_online": False,
                "last_seen": now,
                "session_id": None,
                "updated_at": now,
            }, on_conflict="user_id").execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update presence")
            return PresenceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_presence(self) -> List[PresenceWithProfileResponse]:
        """Every presence row with profile info, online users first, then most recently seen"""
        try:
            result = self.supabase.table("user_presence").select("*").execute()
            rows = result.data or []
            if not rows:
                return []

            profiles = self.supabase.table("profiles")\
                .select("id, email, first_name, last_name, role, workspace_id")\
                .in_("id", [row["user_id"] for row in rows])\
                .execute()
            by_id = {p["id"]: p for p in profiles.data or []}

            rows.sort(key=lambda row: parse_timestamp(row["last_seen"]), reverse=True)
            rows.sort(key=lambda row: not row.get("is_online"))

            listing = []
            for row in rows:
                profile = {k: v for k, v in by_id.get(row["user_id"], {}).items() if k != "id"}
                listing.append(PresenceWithProfileResponse(**row, **profile))
            return listing
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_stale_offline(self, timeout_seconds: int, now: Optional[datetime] = None) -> List[str]:
        """Flip users offline whose last heartbeat is older than the timeout; returns their ids"""
        cutoff = (now or utc_now()) - timedelta(seconds=timeout_seconds)
        result = self.supabase.table("user_presence")\
            .select("user_id, last_seen")\
            .eq("is_online", True)\
            .execute()
        stale = [row["user_id"] for row in result.data or [] if parse_timestamp(row["last_seen"]) < cutoff]
        if stale:
            self.supabase.table("user_presence")\
                .update({"is_online": False, "updated_at": utc_now_iso()})\
                .in_("user_id", stale)\
                .execute()
        return stale
