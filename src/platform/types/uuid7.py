"""
Time-ordered identifiers.

Rows are keyed by UUID7 so that primary-key order follows creation order.
Generated with uuid_utils and handed out as stdlib ``uuid.UUID`` so that
pydantic, SQLAlchemy's ``Uuid`` type and asyncpg accept them unchanged.
"""

import uuid

import uuid_utils


def new_uuid7() -> uuid.UUID:
    return uuid.UUID(str(uuid_utils.uuid7()))
