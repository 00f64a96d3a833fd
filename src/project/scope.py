"""Effective dependency scope used when deciding which edges to follow."""

from constants import Scope
from project.models import DependencyEdge

# Scopes that keep their meaning even when widening is requested.
_NEVER_WIDENED = (Scope.SYSTEM, Scope.TEST)


def effective_scope(scope: Scope, widen_scope: bool = False) -> Scope:
    """Return the scope to record for an edge.

    With ``widen_scope`` every scope other than system/test becomes provided,
    normalising upstream POMs that forget to mark framework dependencies.
    """
    if widen_scope and scope not in _NEVER_WIDENED:
        return Scope.PROVIDED
    return scope


def is_candidate(edge: DependencyEdge, widen_scope: bool = False) -> bool:
    """True when an edge should be followed transitively (provided, not optional)."""
    return not edge.optional and effective_scope(edge.scope, widen_scope) is Scope.PROVIDED
