"""공용 컬럼 타입 — Shared column types.

JSON 문서 컬럼은 PostgreSQL에서 JSONB, 그 외(SQLite 테스트)에서는 JSON으로 매핑.
JSON document columns map to JSONB on PostgreSQL and plain JSON elsewhere.
"""

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

JSONDocument = JSON().with_variant(JSONB(), "postgresql")
