"""
Exceptions raised by the planning engine.

Only malformed input is an error. An unaffordable budget or a trimming pass
that runs out of iterations still produces a plan.
"""


class PlanningError(Exception):
    """Base exception for planning errors"""


class InvalidInputError(PlanningError, ValueError):
    """Raised when scalar inputs, device lists or plans are malformed"""


class InvalidDeviceError(InvalidInputError):
    """Raised when a device record violates its field constraints"""

    def __init__(self, message: str, device_id: str = None):
        super().__init__(message)
        self.device_id = device_id
