class FoodDeliveryError(Exception):
    """Base class for errors raised by the catalog, order and payment layers."""


class NotFound(FoodDeliveryError):
    pass


class InvalidArgument(FoodDeliveryError):
    pass


class InvalidTransition(InvalidArgument):
    """Raised when an order status change would move the order backwards."""


class StorageFailure(FoodDeliveryError):
    pass


class UpstreamFailure(FoodDeliveryError):
    pass


__all__ = [
    "FoodDeliveryError",
    "NotFound",
    "InvalidArgument",
    "InvalidTransition",
    "StorageFailure",
    "UpstreamFailure",
]
