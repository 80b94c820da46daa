from .publisher import EventPublisher
from .scheduling_events import EmailRequested

__all__ = ["EmailRequested", "EventPublisher"]
