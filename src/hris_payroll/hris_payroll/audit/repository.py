from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AuditEvent


class AuditRepository(Protocol):
    def append(self, event: AuditEvent) -> int:
        raise NotImplementedError

    def list_for_company(
        self,
        *,
        company_id: int,
        action: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[AuditEvent]:
        raise NotImplementedError

    def count_for_company(self, *, company_id: int, action: Optional[str] = None) -> int:
        raise NotImplementedError
