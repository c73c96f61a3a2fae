import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Generic, List, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict

from .. import filtering
from ..builder import LambdaLike, as_lambda
from ..errors import UnsupportedExpressionError
from ..expressions import Lambda, MemberAccess, Parameter

logger = logging.getLogger(__name__)

T = TypeVar('T')


def member_path(accessor: Union[str, LambdaLike]) -> Tuple[str, ...]:
    """
    Resolve a navigation path such as ``"customer"`` or ``lambda o: o.customer.address``.

    Returns:
        The attribute names along the path, e.g. ``("customer", "address")``
    """
    if isinstance(accessor, str):
        return tuple(accessor.split("."))

    lam = as_lambda(accessor)
    path = []
    node = lam.body
    while isinstance(node, MemberAccess):
        path.append(node.member)
        node = node.target
    if not path or not isinstance(node, Parameter) or node != lam.parameter:
        raise UnsupportedExpressionError(f"Not a member path: {lam}")
    return tuple(reversed(path))


class QuerySource(BaseModel, ABC, Generic[T]):
    """
    Abstract base class for lazily evaluated, composable queries.

    Every stage (``where``, ``include`` and the filter builders) returns a
    new source and leaves the original untouched. Nothing runs against the
    backing store until ``to_list``, ``first`` or ``count`` is called.
    """

    includes: Tuple[Tuple[str, ...], ...] = ()

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
    )

    def where(self, predicate: LambdaLike) -> "QuerySource[T]":
        """
        Attach a predicate as an additional filter stage.

        Args:
            predicate: A ``Lambda`` or a callable such as ``lambda o: o.age > 3``

        Returns:
            A new source with the filter attached
        """
        predicate = as_lambda(predicate)
        logger.debug(f"{type(self).__name__}: where {predicate}")
        return self._apply_predicate(predicate)

    def include(self, *paths: Union[str, LambdaLike]) -> "QuerySource[T]":
        """Eagerly load the related entities reached through ``paths``."""
        includes = self.includes + tuple(member_path(p) for p in paths)
        return self.model_copy(update={"includes": includes})

    @abstractmethod
    def _apply_predicate(self, predicate: Lambda) -> "QuerySource[T]":
        """Return a copy of this source filtered by ``predicate``."""
        pass

    @abstractmethod
    def to_list(self) -> List[T]:
        """Execute the query and return all matching entities."""
        pass

    def first(self) -> Optional[T]:
        """Return the first matching entity, or None."""
        items = self.to_list()
        return items[0] if items else None

    def count(self) -> int:
        """Return the number of matching entities."""
        return len(self.to_list())

    # Filter builders, see filtercraft.filtering

    def where_or_conditions(self, *predicates: LambdaLike) -> "QuerySource[T]":
        return filtering.where_or_conditions(self, *predicates)

    def where_and_conditions(self, *predicates: LambdaLike) -> "QuerySource[T]":
        return filtering.where_and_conditions(self, *predicates)

    def where_between(self, selector: LambdaLike, lower: Any, upper: Any) -> "QuerySource[T]":
        return filtering.where_between(self, selector, lower, upper)

    def where_date_time_between(self, selector: LambdaLike, start: date, end: date) -> "QuerySource[T]":
        return filtering.where_date_time_between(self, selector, start, end)

    def where_any_property_contains_text(self, search_text: str, *properties: LambdaLike) -> "QuerySource[T]":
        return filtering.where_any_property_contains_text(self, search_text, *properties)
