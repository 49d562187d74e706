import logging
from typing import Any, Dict, Optional

from grok_trends.config import TrendsConfig, get_trends_config
from grok_trends.models.story import utcnow

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


def build_audit_entry(action: str, actor: str, target: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    metadata = metadata or {}
    return {
        "action": action,
        "actor": actor,
        "target": target,
        "timestamp": utcnow(),
        "metadata": metadata,
        "ipAddress": metadata.get("ipAddress"),
        "userAgent": metadata.get("userAgent"),
    }


class AuditService:
    """Appends entries to the audit log collection without ever raising."""

    def __init__(self, store, config: Optional[TrendsConfig] = None):
        self.store = store
        self.config = config or get_trends_config()

    def append(self, action: str, actor: str, target: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        try:
            self.store.create(
                self.config.audit_logs_collection,
                build_audit_entry(action, actor or SYSTEM_ACTOR, target, metadata),
            )
        except Exception as e:
            logger.warning(f"Failed to write audit log '{action}' for {target}: {e}")
