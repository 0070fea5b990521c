"""Policy I/O models."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class PolicyRead(BaseModel):
    key: str
    title: str
    version: str
    effective_date: date
    content: str


class PolicyListResponse(BaseModel):
    current_version: str
    accepted_version: Optional[str]
    needs_acceptance: bool
    policies: List[PolicyRead]


class PolicyAccept(BaseModel):
    version: str
