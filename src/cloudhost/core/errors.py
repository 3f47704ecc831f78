# cloudhost/core/errors.py


class CloudhostError(Exception):
    """Base class for errors reported to the user with a non-zero exit."""


class ValidationError(CloudhostError):
    """Invalid input that invalidates the whole command (bad --org, bad value)."""


class NotWritableError(CloudhostError):
    def __init__(self, property_name: str):
        super().__init__(f"Property not writable: {property_name}")
        self.property_name = property_name


class SubscriptionNotFoundError(CloudhostError):
    def __init__(self, subscription_id):
        super().__init__(f"Subscription not found: {subscription_id}")
        self.subscription_id = subscription_id
