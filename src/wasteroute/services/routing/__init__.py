"""Route drafting services."""

from .adjustments import Overrides
from .editor import EditorBusyError, RouteEditor
from .materializer import materialize_route
from .persistence import build_schedule_payload
from .request_builder import RouteValidationError, build_optimization_request

__all__ = [
    "Overrides",
    "RouteEditor",
    "EditorBusyError",
    "materialize_route",
    "build_schedule_payload",
    "RouteValidationError",
    "build_optimization_request",
]
