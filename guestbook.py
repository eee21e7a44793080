# guestbook.py — Supabase guestbook table (id, name, message, created_at)
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from errors import GuestbookError
from results import LoadResult
from stores import QUERY_ERRORS

log = logging.getLogger(__name__)


def normalize_rows(rows, tz: ZoneInfo):
    """created_at (UTC ISO) -> local 'YYYY-MM-DD HH:MM'"""
    out = []
    for r in rows:
        iso = r.get("created_at") or ""
        try:
            dt_utc = datetime.fromisoformat(iso.replace("Z", "+00:00"))
            date_str = dt_utc.astimezone(tz).strftime("%Y-%m-%d %H:%M")
        except ValueError:
            date_str = iso.replace("T", " ").replace("Z", "")[:16]
        out.append(
            {
                "name": r.get("name", ""),
                "message": r.get("message", ""),
                "date": date_str,
            }
        )
    return out


class Guestbook:
    def __init__(self, client, table: str = "guestbook", tz: str = "UTC"):
        self.client = client
        self.table = table
        self.tz = ZoneInfo(tz)

    def list_entries(self, limit: int = 200):
        """Newest first."""
        try:
            res = (
                self.client.table(self.table)
                .select("id,name,message,created_at")
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except QUERY_ERRORS as exc:
            raise GuestbookError(f"Could not load guestbook: {exc}") from exc
        return res.data or []

    def add_entry(self, name: str, message: str):
        name, message = (name or "").strip(), (message or "").strip()
        if not name or not message:
            raise ValueError("Both name and message are required")
        try:
            self.client.table(self.table).insert({"name": name, "message": message}).execute()
        except QUERY_ERRORS as exc:
            raise GuestbookError(f"Could not save guestbook entry: {exc}") from exc
        log.info("Guestbook entry added by %s", name)

    def entries(self, limit: int = 200):
        return normalize_rows(self.list_entries(limit), self.tz)

    def load_entries(self, limit: int = 200) -> LoadResult:
        try:
            return LoadResult(items=self.entries(limit))
        except GuestbookError as exc:
            log.exception("Guestbook load failed")
            return LoadResult(error=str(exc))
