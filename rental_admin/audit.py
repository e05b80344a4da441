"""Admin audit trail."""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from rental_admin.models import AuditLogEntry


def sanitize(value: Any) -> Any:
    """
    Strip what does not belong in the audit JSON column.

    Drops None, binary blobs (receipt images) and strings holding serialized JSON;
    containers left empty collapse to None so they are dropped by their parent too.
    """
    if value is None or isinstance(value, (bytes, bytearray, memoryview)):
        return None

    if isinstance(value, dict):
        cleaned = {}
        for key, val in value.items():
            clean_val = sanitize(val)
            if clean_val is not None:
                cleaned[key] = clean_val
        return cleaned or None

    if isinstance(value, (list, tuple)):
        return [v for v in (sanitize(item) for item in value) if v is not None]

    if isinstance(value, str) and value.startswith(("{", "[")):
        try:
            json.loads(value)
        except ValueError:
            return value
        return None

    return value


def sanitize_details(details: Any) -> dict[str, Any] | None:
    if isinstance(details, dict):
        return sanitize(details)
    cleaned = sanitize(details)
    return None if cleaned is None else {"value": cleaned}


class DatabaseAuditLog:
    async def record(
        self,
        admin_id: int,
        admin_name: str,
        admin_role: str,
        action: str,
        details: dict[str, Any],
    ) -> bool:
        cleaned = sanitize_details(details)
        if not cleaned:
            logger.debug("Audit '{}' has no details left after sanitizing", action)
            return True
        await AuditLogEntry.create(
            admin_id=admin_id,
            admin_name=admin_name,
            admin_role=admin_role,
            action=action,
            details=cleaned,
        )
        return True


audit_log = DatabaseAuditLog()
