"""
Routing subsystem

Public API:
    - RouteResolver, RouteDecision, RouteAction: topic classification and routing
    - Dispatcher: per-message decode -> route -> publish pipeline
"""

from .resolver import RouteResolver, RouteDecision, RouteAction
from .dispatcher import Dispatcher

__all__ = [
    'RouteResolver',
    'RouteDecision',
    'RouteAction',
    'Dispatcher',
]
