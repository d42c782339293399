"""Inactivity notifications written to a JSON file."""
import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from ..core.logging import BusinessLogger
from ..schemas.user import InactiveUsersEvent

logger = BusinessLogger()


class NotificationListener:
    """Appends one record per inactivity event to a JSON array file."""

    def __init__(self, file_path: str):
        self.file_path = Path(file_path)
        self._lock = asyncio.Lock()

    async def handle_inactive_users(self, event: InactiveUsersEvent) -> None:
        emails = ", ".join(user.email for user in event.users)
        notification = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": f"Inactive users detected: {emails}",
            "users": [
                {
                    "id": user.id,
                    "email": user.email,
                    "last_login": user.last_login.isoformat() if user.last_login else None,
                }
                for user in event.users
            ],
        }
        logger.log_inactive_users_notified(
            notification["message"],
            emails=[user.email for user in event.users],
            file_path=str(self.file_path)
        )

        async with self._lock:
            await asyncio.to_thread(self._append, notification)

    def read_all(self) -> List[Dict[str, Any]]:
        """Stored notifications; an absent or unreadable file reads as empty."""
        try:
            data = json.loads(self.file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.log_notifications_file_reset(str(self.file_path), str(e))
            return []
        return data if isinstance(data, list) else []

    def _append(self, notification: Dict[str, Any]) -> None:
        notifications = self.read_all()
        notifications.append(notification)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        self.file_path.write_text(json.dumps(notifications, indent=2), encoding="utf-8")
