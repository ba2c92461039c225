"""Order workflow error taxonomy.

These are raised by the pure domain code and translated into API errors at
the route layer.
"""


class OrderWorkflowError(Exception):
    """Base class for order workflow failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidTransition(OrderWorkflowError):
    """The requested status change is not an edge of the transition table.

    Covers transitions to the current status and any attempt to leave a
    terminal status.
    """

    def __init__(self, current: str, target: str, message: str | None = None) -> None:
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot move order from '{current}' to '{target}'")


class Forbidden(OrderWorkflowError):
    """The actor is not allowed to perform this transition."""


class ClaimConflict(OrderWorkflowError):
    """Another delivery partner claimed the order first."""

    def __init__(self, order_id: str, message: str = "Order no longer available") -> None:
        self.order_id = order_id
        super().__init__(message)


class UnreachableCandidate(OrderWorkflowError):
    """A candidate order's restaurant has no usable coordinate.

    Recovered inside the matcher: the candidate is dropped, the match goes on.
    """

    def __init__(self, order_id: str, restaurant_id: str) -> None:
        self.order_id = order_id
        self.restaurant_id = restaurant_id
        super().__init__(f"Restaurant {restaurant_id} for order {order_id} has no valid coordinate")
