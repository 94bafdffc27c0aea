# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Generic entity service with paginated search and envelope results.

Each concrete service (branches, users, students, ...) subclasses
``EntityService`` and declares its model, schemas and searchable fields.
The base class provides ``list``, ``get``, ``create``, ``update`` and
``delete`` and guarantees that none of them raises: every outcome,
including database failures and timeouts, comes back as an ``Envelope``.

``ServiceBase`` carries the envelope boundary and query helpers on their
own, for services whose operations are not plain CRUD (messaging).

Inside an operation, failures are signalled by raising one of the
``EntityServiceError`` subclasses below; ``_guard`` converts them, along
with SQLAlchemy errors, into failed envelopes.

Example:
    >>> service = BranchService(db)
    >>> result = await service.list(page=1, limit=10, search="Main")
    >>> result.pagination.total
    1
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, ClassVar, Generic, Mapping, TypeVar
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from src.core.config import get_settings
from src.infrastructure.database.models.base import Base
from src.models.common import Envelope, ErrorKind, Pagination

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

Payload = Mapping[str, Any] | BaseModel | None


class EntityServiceError(Exception):
    """Base exception for entity service failures.

    Raised inside service operations and converted to a failed envelope
    at the service boundary. Never escapes a public service method.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.PERSISTENCE_UNAVAILABLE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EntityServiceError):
    """Raised when input is missing or malformed. Nothing has been written."""

    kind = ErrorKind.VALIDATION_ERROR


class NotFoundError(EntityServiceError):
    """Raised when a lookup by id finds no row."""

    kind = ErrorKind.NOT_FOUND


class ConstraintViolationError(EntityServiceError):
    """Raised when a write would break uniqueness or referential integrity."""

    kind = ErrorKind.CONSTRAINT_VIOLATION


class PersistenceUnavailableError(EntityServiceError):
    """Raised when the database cannot be reached or does not answer in time."""

    kind = ErrorKind.PERSISTENCE_UNAVAILABLE


def describe_validation_error(exc: SchemaValidationError) -> str:
    """Turn a pydantic validation error into one human-readable message.

    Missing or blank required fields are reported together as
    ``"<field>, <field> required"``. Any other problem is reported per field.
    """
    missing: list[str] = []
    invalid: list[str] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "payload"
        value = error.get("input")
        blank = value is None or (isinstance(value, str) and not value.strip())
        if error["type"] == "missing" or (error["type"] == "string_too_short" and blank):
            missing.append(field)
        elif error["type"] == "string_type" and value is None:
            missing.append(field)
        else:
            invalid.append(f"{field}: {error['msg']}")

    if missing:
        return f"{', '.join(missing)} required"
    return "; ".join(invalid)


def coerce_positive_int(value: Any, default: int) -> int:
    """Parse a positive integer, falling back to ``default`` on bad input."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def contains_pattern(term: str) -> str:
    """ILIKE pattern matching ``term`` literally anywhere in the value."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _database_message(error: DBAPIError) -> str:
    original = error.orig if error.orig is not None else error
    text = str(original).strip()
    return text.splitlines()[0] if text else type(original).__name__


class ServiceBase(Generic[ModelT]):
    """Envelope boundary and query helpers shared by every domain service.

    Attributes:
        _db: Async database session.
        _timeout: Deadline in seconds for one public operation, or None.
        _actor_id: Id of the user on whose behalf the service acts, if known.
    """

    model: ClassVar[type[Base]]
    entity_name: ClassVar[str]

    def __init__(
        self,
        db: AsyncSession,
        timeout: float | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            db: Async database session.
            timeout: Per-operation deadline in seconds. Defaults to
                ``settings.service.operation_timeout_seconds``.
            actor_id: User performing the operations; recorded on rows
                that track their author.
        """
        service_settings = get_settings().service
        self._db = db
        self._timeout = (
            timeout if timeout is not None else service_settings.operation_timeout_seconds
        )
        self._default_limit = service_settings.default_page_size
        self._max_limit = service_settings.max_page_size
        self._actor_id = actor_id

    @property
    def not_found_message(self) -> str:
        return f"{self.entity_name} not found"

    # =========================================================================
    # Boundary
    # =========================================================================

    async def _guard(
        self,
        action: str,
        operation: Callable[[], Awaitable[Envelope]],
    ) -> Envelope:
        """Run one operation and convert every failure into an envelope."""
        try:
            return await asyncio.wait_for(operation(), timeout=self._timeout)
        except EntityServiceError as e:
            if isinstance(e, PersistenceUnavailableError):
                await self._rollback()
            logger.warning("%s %s rejected: %s", self.entity_name, action, e.message)
            return Envelope.fail(e.message, e.kind)
        except TimeoutError:
            await self._rollback()
            logger.error(
                "%s %s timed out after %.1fs", self.entity_name, action, self._timeout
            )
            return Envelope.fail(
                f"{self.entity_name} {action} timed out",
                ErrorKind.PERSISTENCE_UNAVAILABLE,
            )
        except IntegrityError as e:
            await self._rollback()
            message = _database_message(e)
            logger.warning("%s %s violated a constraint: %s", self.entity_name, action, message)
            return Envelope.fail(message, ErrorKind.CONSTRAINT_VIOLATION)
        except (OperationalError, InterfaceError) as e:
            await self._rollback()
            logger.error("%s %s: database unavailable: %s", self.entity_name, action, e)
            return Envelope.fail(
                f"Database unavailable: {_database_message(e)}",
                ErrorKind.PERSISTENCE_UNAVAILABLE,
            )
        except DBAPIError as e:
            await self._rollback()
            kind = (
                ErrorKind.PERSISTENCE_UNAVAILABLE
                if e.connection_invalidated
                else ErrorKind.CONSTRAINT_VIOLATION
            )
            logger.error("%s %s failed: %s", self.entity_name, action, e)
            return Envelope.fail(_database_message(e), kind)
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error("%s %s failed: %s", self.entity_name, action, e)
            return Envelope.fail(str(e), ErrorKind.CONSTRAINT_VIOLATION)
        except Exception:
            await self._rollback()
            logger.exception("Unexpected error during %s %s", self.entity_name, action)
            return Envelope.fail(
                f"Unexpected error while processing {self.entity_name.lower()} {action}",
                ErrorKind.PERSISTENCE_UNAVAILABLE,
            )

    async def _rollback(self) -> None:
        try:
            await self._db.rollback()
        except SQLAlchemyError as e:
            logger.warning("Rollback failed: %s", e)

    # =========================================================================
    # Shared helpers
    # =========================================================================

    def _validate(self, schema: type[BaseModel], payload: Payload) -> BaseModel:
        """Validate a loosely typed payload against a request schema.

        Raises:
            ValidationError: With a message naming the offending fields.
        """
        if isinstance(payload, schema):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_unset=True)
        try:
            return schema.model_validate(payload if payload is not None else {})
        except SchemaValidationError as e:
            raise ValidationError(describe_validation_error(e)) from e

    def _page_params(self, page: Any, limit: Any) -> tuple[int, int]:
        page_number = coerce_positive_int(page, 1)
        page_size = min(coerce_positive_int(limit, self._default_limit), self._max_limit)
        return page_number, page_size

    def _coerce_id(self, entity_id: Any, message: str | None = None) -> str:
        """Normalize an id; ids that cannot be UUIDs cannot match any row.

        Raises:
            NotFoundError: If the id is not a UUID.
        """
        try:
            return str(UUID(str(entity_id)))
        except ValueError:
            raise NotFoundError(message or self.not_found_message) from None

    async def _find(
        self,
        model: type[Base],
        entity_id: Any,
        message: str,
        options: tuple = (),
    ) -> Any:
        """Fetch one row of ``model`` by id.

        Raises:
            NotFoundError: With ``message`` if no row matches.
        """
        key = self._coerce_id(entity_id, message)
        stmt = select(model).where(model.id == key)
        if options:
            stmt = stmt.options(*options)
        result = await self._db.execute(stmt)
        entity = result.scalar_one_or_none()
        if entity is None:
            raise NotFoundError(message)
        return entity

    async def _load(self, entity_id: Any, options: tuple = ()) -> Any:
        return await self._find(self.model, entity_id, self.not_found_message, options)

    async def _exists(self, model: type[Base], *conditions: Any) -> bool:
        stmt = select(model.id).where(*conditions).limit(1)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _count(self, model: type[Base], *conditions: Any) -> int:
        stmt = select(func.count()).select_from(model).where(*conditions)
        result = await self._db.execute(stmt)
        return result.scalar() or 0

    async def _paginate(
        self,
        stmt: Select,
        page: Any,
        limit: Any,
        order_by: tuple,
        convert: Callable[[Any], BaseModel],
        options: tuple = (),
        message: str | None = None,
    ) -> Envelope:
        """Count ``stmt``, fetch one page of it and wrap both in an envelope.

        Loader ``options`` apply to the page query only; the count runs over
        the bare predicate.
        """
        page_number, page_size = self._page_params(page, limit)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        count_result = await self._db.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = stmt.order_by(*order_by)
        stmt = stmt.limit(page_size).offset((page_number - 1) * page_size)
        if options:
            stmt = stmt.options(*options)
        result = await self._db.execute(stmt)
        rows = result.scalars().all()

        return Envelope.ok(
            data=[convert(row) for row in rows],
            message=message,
            pagination=Pagination.build(page_number, page_size, total),
        )

    async def _all(self, stmt: Select, convert: Callable[[Any], BaseModel]) -> list[BaseModel]:
        result = await self._db.execute(stmt)
        return [convert(row) for row in result.scalars().all()]


class EntityService(ServiceBase[ModelT]):
    """CRUD over one model with search, pagination and envelope results.

    Subclasses set the class attributes and override the ``_before_*``
    hooks for entity-specific checks.
    """

    search_fields: ClassVar[tuple[str, ...]] = ()
    create_schema: ClassVar[type[BaseModel]]
    update_schema: ClassVar[type[BaseModel]]
    response_schema: ClassVar[type[BaseModel]]
    detail_schema: ClassVar[type[BaseModel] | None] = None
    soft_delete: ClassVar[bool] = False
    active_only: ClassVar[bool] = False

    # =========================================================================
    # Hooks
    # =========================================================================

    def _base_query(self) -> Select:
        """Statement the list query starts from."""
        return select(self.model)

    def _list_options(self) -> tuple:
        """Loader options applied to the list page query."""
        return ()

    def _detail_options(self) -> tuple:
        """Loader options applied when fetching one record for ``get``."""
        return ()

    async def _build(self, request: BaseModel) -> Base:
        """Create the ORM object for a validated create request.

        Runs inside the create transaction; related rows added here are
        committed together with the new entity.
        """
        return self.model(**request.model_dump())

    async def _before_create(self, request: BaseModel) -> None:
        """Check uniqueness and references before a create."""

    async def _before_update(self, entity: Base, changes: dict[str, Any]) -> None:
        """Check uniqueness and references before an update."""

    async def _before_delete(self, entity: Base) -> None:
        """Refuse a physical delete while dependents exist."""

    def _to_response(self, entity: Base) -> BaseModel:
        return self.response_schema.model_validate(entity)

    def _to_detail(self, entity: Base) -> BaseModel:
        schema = self.detail_schema or self.response_schema
        return schema.model_validate(entity)

    def _conditions(self, search: str | None, filters: Mapping[str, Any]) -> list:
        """Build the filter predicate shared by the page and count queries."""
        conditions = []
        if self.active_only:
            conditions.append(self.model.is_active.is_(True))
        for name, value in filters.items():
            if value is not None:
                conditions.append(getattr(self.model, name) == value)
        term = search.strip() if search else ""
        if term and self.search_fields:
            pattern = contains_pattern(term)
            columns = [getattr(self.model, field) for field in self.search_fields]
            conditions.append(or_(*(column.ilike(pattern, escape="\\") for column in columns)))
        return conditions

    def _changes(self, request: BaseModel) -> dict[str, Any]:
        """Fields explicitly set on an update.

        Nulls are dropped for fields that are required or defaulted on create,
        since their columns never hold null.
        """
        not_nullable = {
            name
            for name, field in self.create_schema.model_fields.items()
            if field.default is not None
        }
        return {
            name: value
            for name, value in request.model_dump(exclude_unset=True).items()
            if value is not None or name not in not_nullable
        }

    # =========================================================================
    # Operation bodies
    # =========================================================================

    async def _list(self, page: Any, limit: Any, search: str | None, filters: dict) -> Envelope:
        stmt = self._base_query().where(*self._conditions(search, filters))
        return await self._paginate(
            stmt,
            page,
            limit,
            order_by=(self.model.created_at.desc(), self.model.id.desc()),
            convert=self._to_response,
            options=self._list_options(),
        )

    async def _get(self, entity_id: Any) -> Envelope:
        entity = await self._load(entity_id, self._detail_options())
        return Envelope.ok(data=self._to_detail(entity))

    async def _create(self, payload: Payload) -> Envelope:
        request = self._validate(self.create_schema, payload)
        await self._before_create(request)

        entity = await self._build(request)
        self._db.add(entity)
        await self._db.commit()
        await self._db.refresh(entity)

        logger.info("%s created: %s", self.entity_name, entity.id)
        return Envelope.ok(
            data=self._to_response(entity),
            message=f"{self.entity_name} created successfully",
        )

    async def _update(self, entity_id: Any, payload: Payload) -> Envelope:
        request = self._validate(self.update_schema, payload)
        entity = await self._load(entity_id)
        changes = self._changes(request)
        await self._before_update(entity, changes)

        for name, value in changes.items():
            setattr(entity, name, value)
        await self._db.commit()
        await self._db.refresh(entity)

        logger.info("%s updated: %s (%s)", self.entity_name, entity.id, ", ".join(changes))
        return Envelope.ok(
            data=self._to_response(entity),
            message=f"{self.entity_name} updated successfully",
        )

    async def _delete(self, entity_id: Any) -> Envelope:
        entity = await self._load(entity_id)
        if self.soft_delete:
            entity.is_active = False
        else:
            await self._before_delete(entity)
            await self._db.delete(entity)
        await self._db.commit()

        logger.info(
            "%s %s: %s",
            self.entity_name,
            "deactivated" if self.soft_delete else "deleted",
            entity.id,
        )
        return Envelope.ok(message=f"{self.entity_name} deleted successfully")

    # =========================================================================
    # Public API
    # =========================================================================

    async def get(self, entity_id: str | UUID) -> Envelope:
        """Fetch one record with its related summaries."""
        return await self._guard("get", lambda: self._get(entity_id))

    async def create(self, payload: Payload) -> Envelope:
        """Validate ``payload`` and insert a new record."""
        return await self._guard("create", lambda: self._create(payload))

    async def update(self, entity_id: str | UUID, payload: Payload) -> Envelope:
        """Apply the whitelisted fields of ``payload`` to an existing record."""
        return await self._guard("update", lambda: self._update(entity_id, payload))

    async def delete(self, entity_id: str | UUID) -> Envelope:
        """Remove a record, physically or by clearing ``is_active``."""
        return await self._guard("delete", lambda: self._delete(entity_id))

    async def list(
        self,
        page: Any = 1,
        limit: Any = None,
        search: str | None = None,
        **filters: Any,
    ) -> Envelope:
        """Return one page of records matching ``search`` and ``filters``.

        Args:
            page: 1-based page number; invalid values fall back to 1.
            limit: Page size; invalid values fall back to the default and
                large values are capped.
            search: Case-insensitive substring matched against the
                searchable fields.
            **filters: Column equality filters; None values are ignored.
        """
        return await self._guard("list", lambda: self._list(page, limit, search, filters))
