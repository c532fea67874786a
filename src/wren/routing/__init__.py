"""Routing: route descriptors, middleware scopes, and a compiled trie.

Routes are bound into scopes during ``build()`` and compiled into an
immutable lookup structure before the server accepts traffic.
"""

from wren.routing.route import Endpoint, Handler, Route, RouteMatch
from wren.routing.router import Router, Scope

__all__ = ["Endpoint", "Handler", "Route", "RouteMatch", "Router", "Scope"]
