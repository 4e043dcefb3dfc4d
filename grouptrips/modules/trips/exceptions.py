"""Trip creation exceptions."""


class TripError(Exception):
    """Base class for trip domain errors."""


class TripCreationError(TripError):
    """Raised when the trip row could not be created."""


class JoinCodeConflictError(TripError):
    """Raised by repositories when the generated join code is already taken."""


class JoinCodeExhaustedError(TripCreationError):
    """Raised when every join code attempt collided with an existing trip."""


class CheckoutTokenConflictError(TripError):
    """Raised by repositories when a trip already exists for the checkout token."""


class MembershipCreationError(TripError):
    """Raised when the owner membership row could not be inserted."""


class CreationTimeoutError(TripError):
    """Raised when trip creation did not finish in time; the write may still land."""
