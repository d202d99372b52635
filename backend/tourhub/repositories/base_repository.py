# backend/tourhub/repositories/base_repository.py
"""
Base Repository Pattern for Tourhub

Provides the foundation for all repository classes with:
- Common CRUD operations
- Type safety with generics
- Transaction support (managed by services)
- Criteria dictionaries translated to SQL filters

Criteria dictionaries are what the tenant and admin filter builders
produce. Supported forms:

    {"status": "Confirmed"}                     equality (None -> IS NULL)
    {"created_at": {"$gte": a, "$lte": b}}      range / comparison operators
    {"id": {"$in": [...]}}                      membership
    {"$or": [{...}, {...}]}                     disjunction of sub-criteria
    {"tour.tenant_id": "acme"}                  column on a related model

Repositories never commit; the service layer owns the transaction.
"""

from contextlib import contextmanager
import logging
from typing import Any, Dict, Generic, Iterator, List, Mapping, Optional, Set, Type, TypeVar

from sqlalchemy import and_, false, or_, true
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)

_OPERATORS = {
    "$eq": lambda col, v: col.is_(None) if v is None else col == v,
    "$ne": lambda col, v: col.isnot(None) if v is None else col != v,
    "$gt": lambda col, v: col > v,
    "$gte": lambda col, v: col >= v,
    "$lt": lambda col, v: col < v,
    "$lte": lambda col, v: col <= v,
    "$in": lambda col, v: col.in_(list(v)) if v else false(),
    "$nin": lambda col, v: ~col.in_(list(v)) if v else true(),
}


class BaseRepository(Generic[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Context manager that commits/rolls back the underlying session."""
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.logger.error("Repository transaction failed: %s", exc)
            self.db.rollback()
            raise
        except Exception:
            self.db.rollback()
            raise

    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            self.logger.error("Error getting %s by id %s: %s", self.model.__name__, id, e)
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def get_all(self, skip: int = 0, limit: int = 100) -> List[T]:
        """
        Retrieve all entities with pagination.

        Default limit of 100 to prevent memory issues.
        """
        try:
            return self.db.query(self.model).offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            self.logger.error("Error getting all %s: %s", self.model.__name__, e)
            raise RepositoryException(f"Failed to retrieve {self.model.__name__} list: {str(e)}")

    def create(self, **kwargs) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.logger.error("Integrity error creating %s: %s", self.model.__name__, exc, exc_info=True)
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error("Error creating %s: %s", self.model.__name__, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def flush(self) -> None:
        """Flush pending ORM changes."""
        self.db.flush()

    def update(self, id: str, **kwargs) -> Optional[T]:
        """
        Update an existing entity.

        Only updates provided fields, preserves others.
        """
        try:
            entity = self.get_by_id(id)
            if not entity:
                return None

            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)

            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error("Error updating %s %s: %s", self.model.__name__, id, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to update {self.model.__name__}: {str(e)}")

    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns False if entity not found, raises exception for constraint violations.
        """
        try:
            entity = self.get_by_id(id)
            if not entity:
                return False

            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as e:
            self.logger.error("Cannot delete %s %s due to constraints: %s", self.model.__name__, id, e)
            self.db.rollback()
            raise RepositoryException(f"Cannot delete due to existing references: {str(e)}")
        except SQLAlchemyError as e:
            self.logger.error("Error deleting %s %s: %s", self.model.__name__, id, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}")

    def delete_many(self, ids: List[str]) -> int:
        """Delete every entity whose id is in ``ids``; returns the number removed."""
        if not ids:
            return 0
        try:
            deleted = (
                self.db.query(self.model)
                .filter(self.model.id.in_(list(ids)))
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return int(deleted or 0)
        except SQLAlchemyError as e:
            self.logger.error("Error bulk deleting %s: %s", self.model.__name__, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__} records: {str(e)}")

    def exists(self, **kwargs) -> bool:
        """Check if an entity exists with given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first() is not None
        except SQLAlchemyError as e:
            self.logger.error("Error checking existence: %s", e)
            raise RepositoryException(f"Failed to check existence: {str(e)}")

    def count(self, **kwargs) -> int:
        """Count entities matching given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).count()
        except SQLAlchemyError as e:
            self.logger.error("Error counting records: %s", e)
            raise RepositoryException(f"Failed to count records: {str(e)}")

    def find_by(self, **kwargs) -> List[T]:
        """
        Find entities by given criteria.

        Args:
            **kwargs: Filter criteria (exact match)

        Returns:
            List of matching entities
        """
        try:
            return self.db.query(self.model).filter_by(**kwargs).all()
        except SQLAlchemyError as e:
            self.logger.error("Error finding by criteria: %s", e)
            raise RepositoryException(f"Failed to find records: {str(e)}")

    def find_one_by(self, **kwargs) -> Optional[T]:
        """
        Find a single entity by given criteria.

        Args:
            **kwargs: Filter criteria (exact match)

        Returns:
            First matching entity or None
        """
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error("Error finding one by criteria: %s", e)
            raise RepositoryException(f"Failed to find record: {str(e)}")

    def bulk_create(self, entities: List[Dict[str, Any]]) -> List[T]:
        """
        Create multiple entities efficiently.

        Args:
            entities: List of entity data dictionaries

        Returns:
            List of created entities
        """
        try:
            db_entities = [self.model(**data) for data in entities]
            self.db.add_all(db_entities)
            self.db.flush()
            return db_entities
        except SQLAlchemyError as e:
            self.logger.error("Error bulk creating: %s", e)
            raise RepositoryException(f"Failed to bulk create: {str(e)}")

    # Criteria helpers

    def find_by_criteria(
        self,
        criteria: Mapping[str, Any],
        *,
        order_by: Optional[List[Any]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[T]:
        """Find entities matching a criteria dictionary."""
        query = self.apply_criteria(self._build_query(), criteria)
        if order_by:
            query = query.order_by(*order_by)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return self._execute_query(query)

    def count_by_criteria(self, criteria: Mapping[str, Any]) -> int:
        query = self.apply_criteria(self._build_query(), criteria)
        try:
            return query.count()
        except SQLAlchemyError as e:
            self.logger.error("Error counting by criteria: %s", e)
            raise RepositoryException(f"Failed to count records: {str(e)}")

    def apply_criteria(self, query: Query, criteria: Mapping[str, Any]) -> Query:
        """Add the filters (and joins) a criteria dictionary needs to ``query``."""
        joins: Set[str] = set()
        clause = self._criteria_clause(criteria, joins)
        for relationship_name in sorted(joins):
            query = query.outerjoin(getattr(self.model, relationship_name))
        if clause is not None:
            query = query.filter(clause)
        return query

    def _criteria_clause(self, criteria: Mapping[str, Any], joins: Set[str]) -> Any:
        clauses = []
        for key, value in criteria.items():
            if key == "$or":
                branches = [self._criteria_clause(sub, joins) for sub in value]
                branches = [branch for branch in branches if branch is not None]
                clauses.append(or_(*branches) if branches else false())
                continue
            if key == "$and":
                branches = [self._criteria_clause(sub, joins) for sub in value]
                clauses.extend(branch for branch in branches if branch is not None)
                continue

            column = self._resolve_column(key, joins)
            if isinstance(value, Mapping):
                for op, operand in value.items():
                    if op not in _OPERATORS:
                        raise RepositoryException(f"Unsupported criteria operator: {op}")
                    clauses.append(_OPERATORS[op](column, operand))
            else:
                clauses.append(_OPERATORS["$eq"](column, value))

        if not clauses:
            return None
        return and_(*clauses) if len(clauses) > 1 else clauses[0]

    def _resolve_column(self, key: str, joins: Set[str]) -> Any:
        relationship_name, _, column_name = key.rpartition(".")
        if not relationship_name:
            return getattr(self.model, key)
        target = getattr(self.model, relationship_name).property.mapper.class_
        joins.add(relationship_name)
        return getattr(target, column_name)

    # Protected helper methods for use by subclasses

    def _build_query(self) -> Query:
        """Get base query for the model."""
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        """Execute query with error handling."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error("Query execution error: %s", e)
            raise RepositoryException(f"Query failed: {str(e)}")

    def _execute_scalar(self, query: Query) -> Any:
        """Execute scalar query with error handling."""
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            self.logger.error("Scalar query error: %s", e)
            raise RepositoryException(f"Scalar query failed: {str(e)}")

