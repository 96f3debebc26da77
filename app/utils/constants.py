class ResponseMessages:
    """Standard API response messages"""

    # Success messages
    SUCCESS = "Success"
    CREATED = "Created successfully"
    UPDATED = "Updated successfully"
    DELETED = "Deleted successfully"


# Application Constants
class AppConstants:
    # Validation Limits
    MAX_EVENT_NAME_LENGTH = 255
    MAX_VENUE_LENGTH = 255
    MAX_DESCRIPTION_LENGTH = 2000
    MAX_CATEGORY_LENGTH = 100
    MIN_EVENT_CAPACITY = 1

    # Fields an organizer may change while an event is pending
    EDITABLE_EVENT_FIELDS = (
        "event_name",
        "date_time",
        "venue",
        "description",
        "max_students",
        "total_budget",
    )

    # Reports
    REPORT_MONTHS = 6
    REPORT_TOP_EVENTS = 5

    # Financial
    CURRENCY_DECIMAL_PLACES = 2
