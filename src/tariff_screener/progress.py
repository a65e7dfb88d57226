"""Progress policy — maps the current screen to a completion percentage."""

from tariff_screener.constants import PROGRESS_BY_SCREEN
from tariff_screener.models.screen import Screen


def progress_for(screen: Screen | str) -> int:
    """Return the progress (0-100) shown while ``screen`` is current.

    Total over any input: unknown screens and strings yield 0.
    """
    if not isinstance(screen, Screen):
        try:
            screen = Screen(screen)
        except ValueError:
            return 0
    return PROGRESS_BY_SCREEN.get(screen, 0)
