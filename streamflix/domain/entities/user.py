from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


UserRole = Literal["user", "admin"]


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class LocalCredentials:
    user: User
    password_hash: str
