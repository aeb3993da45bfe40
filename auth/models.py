"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in blog/models.py -- dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered account.

    password_hash is a self-describing bcrypt digest (salt and cost are part of
    the string). It never leaves the service layer: response models in
    api/models.py have no field for it.

    id is None before the record is written to the database.
    """

    username: str
    email: str
    password_hash: str
    id: int | None = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""


@dataclass(frozen=True)
class Identity:
    """The acting identity decoded from a verified bearer token.

    subject_id is authoritative for the request: handlers receive this object
    as an explicit parameter and must never take the acting user id from the
    request body or path.
    """

    subject_id: int
    display_name: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None
