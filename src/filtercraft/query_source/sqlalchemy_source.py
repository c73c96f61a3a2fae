import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import Field
from sqlalchemy import Select, func, select
from sqlalchemy.orm import RelationshipProperty, Session, selectinload

from ..errors import UnsupportedExpressionError
from ..expressions import Lambda
from .base import QuerySource, T
from .sqlalchemy_translator import SQLAlchemyExpressionTranslator

logger = logging.getLogger(__name__)


class SQLAlchemyQuerySource(QuerySource[T]):
    """
    Query source backed by a SQLAlchemy ``Select`` over a mapped entity.

    Predicates are translated to SQL when attached; the statement is only
    executed by ``to_list``, ``first`` or ``count``.

    Example:
        ```python
        with Session(engine) as session:
            orders = (
                SQLAlchemyQuerySource(session, Order)
                .include("customer")
                .where_and_conditions(
                    lambda o: o.customer.first_name == "John",
                    lambda o: o.product_name == "Onion"
                )
                .to_list()
            )
        ```
    """

    session: Session
    entity: type
    statement: Select
    joins: Dict[Tuple[str, ...], Any] = Field(default_factory=dict, repr=False)

    def __init__(self, session: Session, entity: type, statement: Optional[Select] = None, **kwargs):
        super().__init__(
            session=session,
            entity=entity,
            statement=statement if statement is not None else select(entity),
            **kwargs
        )

    @property
    def dialect_name(self) -> str:
        bind = self.session.bind
        return bind.dialect.name if bind is not None else "default"

    def _apply_predicate(self, predicate: Lambda) -> "SQLAlchemyQuerySource[T]":
        translator = SQLAlchemyExpressionTranslator(
            self.entity,
            joins=self.joins,
            dialect_name=self.dialect_name
        )
        clause = translator.translate(predicate)

        statement = self.statement
        for relationship in translator.new_joins:
            statement = statement.outerjoin(relationship)
        statement = statement.where(clause)

        return self.model_copy(update={"statement": statement, "joins": translator.joins})

    def _load_options(self) -> list:
        options = []
        for path in self.includes:
            entity = self.entity
            loader = None
            for name in path:
                attr = getattr(entity, name, None)
                prop = getattr(attr, "property", None)
                if not isinstance(prop, RelationshipProperty):
                    raise UnsupportedExpressionError(
                        f"Cannot include '{'.'.join(path)}': '{name}' is not a relationship"
                    )
                loader = selectinload(attr) if loader is None else loader.selectinload(attr)
                entity = prop.mapper.class_
            options.append(loader)
        return options

    def compiled_statement(self) -> Select:
        """The statement that materialization will execute."""
        options = self._load_options()
        return self.statement.options(*options) if options else self.statement

    def to_list(self) -> List[T]:
        results = list(self.session.scalars(self.compiled_statement()).all())
        logger.debug(f"Query on {self.entity.__name__} returned {len(results)} rows")
        return results

    def first(self) -> Optional[T]:
        return self.session.scalars(self.compiled_statement().limit(1)).first()

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(self.statement.subquery()))
