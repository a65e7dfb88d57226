"""Text rendering for screener views.

Provides ``ScreenRenderer``, a Jinja2-based renderer that turns a
``ScreenerView`` into a plain-text screen, dispatching on the screen kind.
"""

from tariff_screener.render.manager import ScreenRenderer, progress_bar

__all__ = ["ScreenRenderer", "progress_bar"]
