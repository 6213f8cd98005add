"""
Event logging for stock, ledger and order changes.

Emits one JSON line per business event on the "audit" logger so operators
can follow what happened to stock. Nothing here is persisted by the app.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

# Separate logger for business events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


class AuditLog:
    """Central logging for state-changing events."""

    @staticmethod
    def log_action(
        action: str,  # "create", "merge", "update", "delete", "complete", "restore"
        resource_type: str,  # "inventory", "invoice", "order", "snapshot"
        resource_id: Optional[str],
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a state-changing action.

        Usage:
            AuditLog.log_action("create", "invoice", record.id, changes={"total": 110.0})
            AuditLog.log_action("delete", "inventory", item_id, changes={"item": "Blue Denim"})
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": f"{resource_type}.{action}",
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_rejected(
        action: str,
        resource_type: str,
        resource_id: Optional[str],
        reason: str,
    ):
        """
        Log a rejected transition (completing a finished order, saving a short plan).

        Usage:
            AuditLog.log_rejected("complete", "order", order.id, "Order already COMPLETED")
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_severity": "WARNING",
            "event_type": f"{resource_type}.{action}.rejected",
            "resource_id": resource_id,
            "reason": reason,
        }

        audit_logger.warning(json.dumps(log_entry, default=str))
