import logging
from typing import Any, Callable, List, Sequence, Tuple

from pydantic import Field

from ..expressions import Lambda
from .base import QuerySource, T
from .memory_evaluator import compile_lambda

logger = logging.getLogger(__name__)


class InMemoryQuerySource(QuerySource[T]):
    """
    Query source over a Python sequence.

    Predicates are compiled to callables when attached and evaluated when
    the source is materialized. ``include`` is recorded but has no effect,
    since in-memory objects are already fully navigable.

    Example:
        ```python
        source = InMemoryQuerySource(items=orders)
        recent = source.where_date_time_between(lambda o: o.date_time, start, end).to_list()
        ```
    """

    items: Sequence[Any] = Field(default_factory=list, description="Backing collection")
    predicates: Tuple[Lambda, ...] = ()
    compiled: Tuple[Callable[[Any], Any], ...] = Field(default=(), exclude=True, repr=False)

    def _apply_predicate(self, predicate: Lambda) -> "InMemoryQuerySource[T]":
        return self.model_copy(update={
            "predicates": self.predicates + (predicate,),
            "compiled": self.compiled + (compile_lambda(predicate),),
        })

    def to_list(self) -> List[T]:
        results = [item for item in self.items if all(f(item) for f in self.compiled)]
        logger.debug(f"In-memory query matched {len(results)} of {len(self.items)} items")
        return results
