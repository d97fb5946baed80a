from .subscriber_repository import SubscriberRepository

__all__ = [
    "SubscriberRepository",
]
