from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..core.enums import AuditAction
from .model import AuditEvent, AuditPage
from .repository import AuditRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AuditService:
    """Write-only audit sink.

    Recording is best-effort: a failed write is logged and never propagates
    into the business operation that triggered it.
    """

    def __init__(self, audit: AuditRepository, *, clock=None):
        self._audit = audit
        self._clock = clock or _utcnow

    def record(
        self,
        *,
        actor_id: Optional[int],
        company_id: Optional[int],
        action: AuditAction | str,
        target: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        event = AuditEvent(
            actor_id=actor_id,
            company_id=company_id,
            action=action.value if isinstance(action, AuditAction) else str(action),
            target=target,
            details=dict(details or {}),
            created_at=self._clock(),
        )
        try:
            self._audit.append(event)
        except Exception:
            logger.exception("Failed to write audit event %s on %s", event.action, event.target)

    def list_events(self, *, company_id: int, action: Optional[str] = None, page: int = 1, limit: int = 20) -> AuditPage:
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), 100)
        events = self._audit.list_for_company(
            company_id=int(company_id),
            action=action or None,
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = self._audit.count_for_company(company_id=int(company_id), action=action or None)
        return AuditPage(events=list(events), total=total, page=page, limit=limit)
