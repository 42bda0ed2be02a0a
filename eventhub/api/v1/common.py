from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from eventhub.api.v1.schemas.common import PaginationOut
from eventhub.core.config import settings
from eventhub.db import get_db
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import ValidationError

DBSession = Annotated[Session, Depends(get_db)]


def parse_id(raw: str, label: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ValidationError(ErrorCode.VALIDATION_FAILED.value, f"Invalid {label} ID") from None


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    def out(self, total: int) -> PaginationOut:
        return PaginationOut(page=self.page, limit=self.limit, total=total)


def page_params(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
) -> PageParams:
    return PageParams(page=page, limit=limit)


Pagination = Annotated[PageParams, Depends(page_params)]
