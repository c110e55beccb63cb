"""
Persistence Gateway

Generic create / read / update / delete against one collection (table), with
equality filters, case-insensitive pattern search, ordering, limits, counts
and extra SQL criteria (used by services for ownership scoping).

Every public method returns a ServiceResult. SQLAlchemy failures become
PersistenceError envelopes; "no row when one was required" becomes a
NotFoundError envelope. Rows come back as plain dicts (see
SerializableMixin.to_dict), ids and timestamps as strings.

Usage:
    niches = CollectionGateway(Niche)

    result = niches.find({"user_id": user_id}, order_by="created_at")
    if result.success:
        rows = result.data
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Type
from uuid import UUID

from sqlalchemy import DateTime, Uuid, false, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from nichelab.errors import NicheLabError, NotFoundError, PersistenceError
from nichelab.results import ServiceResult
from .models import Base
from .session import get_db_context, get_session_factory

logger = logging.getLogger(__name__)

Filters = Optional[Dict[str, Any]]
Criteria = Optional[Sequence[Any]]
Search = Optional[Tuple[str, Sequence[str]]]

# Columns the gateway manages itself; callers never write them directly
_IMMUTABLE = ("id", "created_at")


def to_uuid(value: Any) -> UUID:
    """Coerce an id (str or UUID) to UUID, raising PersistenceError when malformed."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise PersistenceError(f"Invalid identifier: {value!r}", details={"value": str(value)})


def _parse_uuid(value: Any) -> Optional[UUID]:
    """UUID for a filter value, None when it cannot be one."""
    try:
        return to_uuid(value)
    except PersistenceError:
        return None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CollectionGateway:
    """CRUD access to a single mapped table."""

    def __init__(self, model: Type[Base], session_factory: Optional[sessionmaker] = None):
        self.model = model
        self._session_factory = session_factory

    @property
    def name(self) -> str:
        return self.model.__tablename__

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _factory(self) -> sessionmaker:
        return self._session_factory or get_session_factory()

    def _column(self, key: str):
        column = self.model.__table__.columns.get(key)
        if column is None:
            raise PersistenceError(
                f"Column '{key}' does not exist on {self.name}",
                details={"collection": self.name, "column": key},
            )
        return column

    def _coerce(self, key: str, value: Any) -> Any:
        column = self._column(key)
        if value is None:
            return None
        if isinstance(column.type, Uuid):
            if isinstance(value, (list, tuple, set)):
                return [to_uuid(v) for v in value]
            return to_uuid(value)
        if isinstance(column.type, DateTime) and isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                raise PersistenceError(f"Invalid timestamp for {key}: {value!r}")
        return value

    def _clean(self, record: Dict[str, Any], allow_id: bool = False) -> Dict[str, Any]:
        cleaned = {}
        for key, value in record.items():
            if key in _IMMUTABLE and not (allow_id and key == "id"):
                continue
            cleaned[key] = self._coerce(key, value)
        return cleaned

    def _where(self, filters: Filters, criteria: Criteria, search: Search = None) -> List[Any]:
        clauses = []
        for key, value in (filters or {}).items():
            table_column = self._column(key)
            column = getattr(self.model, table_column.key)
            if value is not None and isinstance(table_column.type, Uuid):
                clauses.append(self._id_clause(column, value))
                continue
            value = self._coerce(key, value)
            if isinstance(value, (list, tuple, set)):
                clauses.append(column.in_(list(value)))
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == value)

        if search:
            query, fields = search
            pattern = f"%{_escape_like(query)}%"
            clauses.append(or_(*[
                getattr(self.model, self._column(field).key).ilike(pattern, escape="\\")
                for field in fields
            ]))

        clauses.extend(criteria or [])
        return clauses

    @staticmethod
    def _id_clause(column, value: Any):
        # A malformed id matches no row
        if isinstance(value, (list, tuple, set)):
            return column.in_([u for u in map(_parse_uuid, value) if u is not None])
        parsed = _parse_uuid(value)
        return column == parsed if parsed is not None else false()

    def _select(self, filters: Filters, criteria: Criteria, search: Search = None):
        return select(self.model).where(*self._where(filters, criteria, search))

    def run(self, operation: str, work: Callable[[Session], Any]) -> ServiceResult:
        """
        Run ``work(db)`` in one transaction and wrap the outcome.

        Args:
            operation: Short verb used in error messages ("create", "update")
            work: Callable receiving the session; its return value becomes data
        """
        try:
            with get_db_context(self._factory()) as db:
                return ServiceResult.ok(work(db))
        except NicheLabError as e:
            if not isinstance(e, NotFoundError):
                logger.warning(f"{operation} on {self.name} failed: {e.message}")
            return ServiceResult.fail(e)
        except SQLAlchemyError as e:
            reason = str(getattr(e, "orig", None) or e)
            logger.error(f"{operation} on {self.name} failed: {reason}")
            return ServiceResult.fail(PersistenceError(
                f"Failed to {operation} {self.name}: {reason}",
                details={"collection": self.name, "operation": operation},
            ))

    # =========================================================================
    # WRITES
    # =========================================================================

    def create(self, record: Dict[str, Any]) -> ServiceResult:
        """Insert one row and return it."""
        def work(db: Session):
            row = self.model(**self._clean(record, allow_id=True))
            db.add(row)
            db.flush()
            db.refresh(row)
            return row.to_dict()

        return self.run("create", work)

    def create_many(self, records: Iterable[Dict[str, Any]]) -> ServiceResult:
        """Insert many rows in one transaction; all or nothing."""
        def work(db: Session):
            rows = [self.model(**self._clean(record, allow_id=True)) for record in records]
            db.add_all(rows)
            db.flush()
            for row in rows:
                db.refresh(row)
            return [row.to_dict() for row in rows]

        return self.run("create", work)

    def update(self, filters: Filters, patch: Dict[str, Any], criteria: Criteria = None) -> ServiceResult:
        """Update the single row matching filters/criteria and return it."""
        def work(db: Session):
            row = db.execute(self._select(filters, criteria).limit(1)).scalars().first()
            if row is None:
                raise NotFoundError(f"No {self.name} row matched", details={"collection": self.name})
            for key, value in self._clean(patch).items():
                setattr(row, key, value)
            db.flush()
            db.refresh(row)
            return row.to_dict()

        return self.run("update", work)

    def update_each(self, patches: Sequence[Dict[str, Any]], criteria: Criteria = None) -> ServiceResult:
        """
        Apply per-row patches keyed by ``id`` in one transaction.

        Every id must match (within ``criteria``) or nothing is written.
        """
        def work(db: Session):
            updated = []
            for patch in patches:
                if "id" not in patch:
                    raise PersistenceError("Each update requires an id")
                changes = {k: v for k, v in patch.items() if k != "id"}
                row = db.execute(
                    self._select({"id": patch["id"]}, criteria).limit(1)
                ).scalars().first()
                if row is None:
                    raise NotFoundError(
                        f"No {self.name} row with id {patch['id']}",
                        details={"collection": self.name, "id": str(patch["id"])},
                    )
                for key, value in self._clean(changes).items():
                    setattr(row, key, value)
                updated.append(row)
            db.flush()
            return [row.to_dict() for row in updated]

        return self.run("update", work)

    def delete(self, filters: Filters, criteria: Criteria = None, require_match: bool = True) -> ServiceResult:
        """
        Delete matching rows (ORM cascades apply).

        Returns {"deleted": True, "count": n}. With ``require_match`` an empty
        match is a NotFoundError.
        """
        def work(db: Session):
            rows = db.execute(self._select(filters, criteria)).scalars().all()
            if not rows and require_match:
                raise NotFoundError(f"No {self.name} row matched", details={"collection": self.name})
            for row in rows:
                db.delete(row)
            return {"deleted": True, "count": len(rows)}

        return self.run("delete", work)

    # =========================================================================
    # READS
    # =========================================================================

    def find(
        self,
        filters: Filters = None,
        criteria: Criteria = None,
        search: Search = None,
        order_by: Optional[str] = "created_at",
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> ServiceResult:
        """Return matching rows as a list of dicts."""
        def work(db: Session):
            stmt = self._select(filters, criteria, search)
            if order_by:
                column = getattr(self.model, self._column(order_by).key)
                stmt = stmt.order_by(column.desc() if descending else column.asc())
            if limit is not None:
                stmt = stmt.limit(limit)
            return [row.to_dict() for row in db.execute(stmt).scalars().all()]

        return self.run("read", work)

    def find_one(self, filters: Filters = None, criteria: Criteria = None) -> ServiceResult:
        """Return exactly one row, or a NotFoundError envelope."""
        def work(db: Session):
            row = db.execute(self._select(filters, criteria).limit(1)).scalars().first()
            if row is None:
                raise NotFoundError(f"No {self.name} row matched", details={"collection": self.name})
            return row.to_dict()

        return self.run("read", work)

    def count(self, filters: Filters = None, criteria: Criteria = None) -> ServiceResult:
        def work(db: Session):
            stmt = select(func.count()).select_from(self.model).where(*self._where(filters, criteria))
            return db.execute(stmt).scalar_one()

        return self.run("count", work)
