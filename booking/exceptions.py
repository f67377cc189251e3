class BookingError(ValueError):
    """Base for reservation errors; views turn ``status_code`` into the HTTP status."""
    status_code = 400
    default_message = "Reservation could not be processed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidSlot(BookingError):
    default_message = "Invalid date or hour."


class PastSlot(BookingError):
    default_message = "Reservations cannot be created on past dates."


class CourtNotFound(BookingError):
    status_code = 404
    default_message = "Court not found."


class SlotUnavailable(BookingError):
    status_code = 409
    default_message = "This court is already reserved at that time."


class InvalidTransition(BookingError):
    status_code = 409
    default_message = "Status change not allowed."


class InvalidPaymentType(BookingError):
    default_message = "Unknown payment type."
