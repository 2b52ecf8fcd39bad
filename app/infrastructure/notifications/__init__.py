from app.infrastructure.notifications.logging_notifier import LoggingBookingNotifier

__all__ = ["LoggingBookingNotifier"]
