from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class AuditEvent:
    actor_id: Optional[int]
    company_id: Optional[int]
    action: str
    target: str
    details: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    audit_id: Optional[int] = None


@dataclass(frozen=True)
class AuditPage:
    events: list[AuditEvent]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
