"""
Directive audit log

Records every directive the chat backend sent and what the widget did with
it (JSON Lines), so directives the client does not understand can be
reviewed with the backend owner.
"""

import logging
import json
import aiofiles
from typing import Optional
from pathlib import Path
from datetime import datetime

logger = logging.getLogger(__name__)


class DirectiveAuditLog:
    """Append-only JSONL log of applied and ignored directives"""

    def __init__(self, log_dir: Path):
        """
        Args:
            log_dir: Directory holding directive_audit.jsonl
        """
        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.audit_file = log_dir / "directive_audit.jsonl"

        logger.info(f"DirectiveAuditLog initialized (log_dir={log_dir})")

    async def record(
        self,
        visitor_id: Optional[str],
        kind: str,
        value: str,
        outcome: str
    ):
        """
        Append one record

        Args:
            visitor_id: Visitor whose turn carried the directive
            kind: "navigate" / "action"
            value: Captured path or action name
            outcome: "applied" / "noop" / "ignored"
        """
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "visitor_id": visitor_id,
            "kind": kind,
            "value": value,
            "outcome": outcome
        }

        try:
            async with aiofiles.open(self.audit_file, 'a', encoding='utf-8') as f:
                await f.write(json.dumps(log_entry, ensure_ascii=False) + '\n')
        except OSError as e:
            logger.error(f"Failed to write directive audit log: {e}")

    async def read_all(self) -> list:
        """Read back every record (oldest first)"""
        if not self.audit_file.exists():
            return []

        async with aiofiles.open(self.audit_file, 'r', encoding='utf-8') as f:
            content = await f.read()

        return [json.loads(line) for line in content.splitlines() if line.strip()]


# Global singleton
_audit_log: Optional[DirectiveAuditLog] = None


def get_directive_audit_log() -> DirectiveAuditLog:
    """Get the DirectiveAuditLog singleton"""
    global _audit_log

    if _audit_log is None:
        from ..config.settings import get_settings

        _audit_log = DirectiveAuditLog(Path(get_settings().AUDIT_LOG_DIR))

    return _audit_log
