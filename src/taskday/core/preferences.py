"""User preference values - no I/O dependencies."""

DEFAULT_COMPLETED_WINDOW = 7

COMPLETED_VISIBILITY_DAYS = {
    "none": 0,
    "1day": 1,
    "7days": 7,
    "30days": 30,
}


def completed_window_days(preferences: dict, default: int = DEFAULT_COMPLETED_WINDOW) -> int:
    """
    Completed-task retention window in days from a preferences mapping.

    Accepts an explicit ``completedTaskWindow`` integer or the
    ``completedTaskVisibility`` labels used by the settings screen.
    """
    window = preferences.get("completedTaskWindow")
    if isinstance(window, int) and not isinstance(window, bool) and window >= 0:
        return window
    visibility = preferences.get("completedTaskVisibility")
    return COMPLETED_VISIBILITY_DAYS.get(visibility, default)
