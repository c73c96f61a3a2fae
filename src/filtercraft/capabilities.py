"""
Registry of scalar methods usable inside ``MethodCall`` nodes.

Builders resolve the methods they need once, before any tree is built, so a
missing capability fails at setup time rather than per row.
"""
import logging
from typing import Callable, Dict, Optional, Tuple

from .errors import CapabilityMissingError

logger = logging.getLogger(__name__)

CONTAINS = "contains"
STARTSWITH = "startswith"
ENDSWITH = "endswith"

_METHODS: Dict[Tuple[type, str], Callable[..., bool]] = {
    (str, CONTAINS): str.__contains__,
    (str, STARTSWITH): str.startswith,
    (str, ENDSWITH): str.endswith,
}


def register_method(scalar_type: type, name: str, func: Callable[..., bool]) -> None:
    """Make ``name`` callable on values of ``scalar_type``."""
    logger.debug(f"Registering method '{name}' for {scalar_type.__name__}")
    _METHODS[(scalar_type, name)] = func


def find_method(scalar_type: type, name: str) -> Optional[Callable[..., bool]]:
    """Like ``resolve_method``, but returns None when nothing is registered."""
    for klass in scalar_type.__mro__:
        func = _METHODS.get((klass, name))
        if func is not None:
            return func
    return None


def resolve_method(scalar_type: type, name: str) -> Callable[..., bool]:
    """
    Look up the implementation of ``name`` for ``scalar_type``.

    Base classes are searched in MRO order, so a ``str`` subclass finds the
    ``str`` implementations.

    Raises:
        CapabilityMissingError: If no implementation is registered
    """
    func = find_method(scalar_type, name)
    if func is None:
        raise CapabilityMissingError(scalar_type, name)
    return func
