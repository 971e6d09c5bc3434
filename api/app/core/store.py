"""
Document store adapter.

Exposes the small capability set the services rely on (get, equality / set
membership queries, create, merge update, delete, atomic increment and
all-or-nothing batches) on top of a SQLModel session. Every table model is a
"collection"; a single write commits immediately unless it runs inside
``batch()``, in which case it only becomes visible when the whole batch
commits.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from app.core.exceptions import NotFoundError, StoreError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)
Predicate = Tuple[str, str, Any]

SUPPORTED_OPERATORS = ("==", "in")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive values (SQLite drops the offset on read) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DocumentStore:
    """Collection-oriented access to the database used by every service."""

    def __init__(self, session: Session):
        self.session = session
        self._batch_depth = 0

    @staticmethod
    def server_timestamp() -> datetime:
        """Timestamp used for created_at / updated_at fields."""
        return utc_now()

    @property
    def in_batch(self) -> bool:
        return self._batch_depth > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, model: Type[ModelT], doc_id: Any) -> Optional[ModelT]:
        if doc_id is None:
            return None
        try:
            return self.session.get(model, doc_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {model.__name__} {doc_id}: {e}") from e

    def query(
        self,
        model: Type[ModelT],
        predicates: Optional[Sequence[Predicate]] = None,
    ) -> List[ModelT]:
        """Return every document of ``model`` matching all predicates.

        Predicates are ``(field, op, value)`` tuples where ``op`` is ``"=="``
        or ``"in"``. Results are unordered; callers sort.
        """
        statement = select(model)
        for field, op, value in predicates or []:
            column = getattr(model, field)
            if op == "==":
                statement = statement.where(column.is_(None) if value is None else column == value)
            elif op == "in":
                values = list(value)
                if not values:
                    return []
                statement = statement.where(column.in_(values))  # type: ignore[attr-defined]
            else:
                raise ValueError(
                    f"Unsupported operator {op!r}, expected one of {SUPPORTED_OPERATORS}"
                )
        try:
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to query {model.__name__}: {e}") from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, instance: ModelT) -> ModelT:
        """Persist a new document. Inside a batch the id is assigned on flush."""
        self.session.add(instance)
        self._commit()
        if not self.in_batch:
            self.session.refresh(instance)
        return instance

    def update(self, model: Type[ModelT], doc_id: Any, fields: dict) -> ModelT:
        """Merge ``fields`` into an existing document."""
        instance = self.get(model, doc_id)
        if instance is None:
            raise NotFoundError(f"{model.__name__} {doc_id} not found")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.session.add(instance)
        self._commit()
        return instance

    def delete(self, model: Type[ModelT], doc_id: Any) -> bool:
        """Delete a document; returns False when it was already absent."""
        instance = self.get(model, doc_id)
        if instance is None:
            return False
        self.session.delete(instance)
        self._commit()
        return True

    def delete_many(self, instances: Iterable[SQLModel]) -> int:
        count = 0
        for instance in instances:
            self.session.delete(instance)
            count += 1
        self._commit()
        return count

    def increment(
        self,
        model: Type[ModelT],
        doc_id: Any,
        field: str,
        delta: int,
        **extra: Any,
    ) -> bool:
        """Atomically add ``delta`` to a numeric field.

        The new value is computed by the database (``field = field + delta``)
        so concurrent increments commute. Returns False if the document does
        not exist.
        """
        instance = self.get(model, doc_id)
        if instance is None:
            return False
        setattr(instance, field, getattr(model, field) + delta)
        for key, value in extra.items():
            setattr(instance, key, value)
        self.session.add(instance)
        self._commit()
        return True

    @contextmanager
    def batch(self) -> Iterator["DocumentStore"]:
        """Group writes so that they all apply or none do."""
        self._batch_depth += 1
        try:
            yield self
            if self._batch_depth == 1:
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Batch rolled back: {e}")
            raise StoreError(f"Batch commit failed: {e}") from e
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._batch_depth -= 1

    def _commit(self) -> None:
        if self.in_batch:
            # Assigns ids and emits SQL without ending the transaction
            self.session.flush()
            return
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Store write failed: {e}") from e
