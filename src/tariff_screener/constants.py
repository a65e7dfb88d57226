"""Screener constants shared across the SDK.

These values are referenced by the progress policy, the processing
sequencer, and the controller.  The stage interval can be overridden via
an environment variable so demos and simulations can run the processing
interstitial faster without code changes.
"""

import os

from tariff_screener.models.screen import Screen

# Completion percentage shown for each screen.  Screens missing here
# (there are none today) fall back to 0 in progress_for().
PROGRESS_BY_SCREEN: dict[Screen, int] = {
    Screen.ENTRY: 0,
    Screen.QUALIFICATION: 15,
    Screen.SUPPLY_CHAIN: 35,
    Screen.DOCUMENTS: 50,
    Screen.TIMELINE: 75,
    Screen.PROCESSING: 90,
    Screen.OUTCOME: 100,
    Screen.LEAD_CAPTURE: 100,
    Screen.FALLBACK_QUALIFICATION: 100,
    Screen.FALLBACK_SUPPLIER: 100,
    Screen.FALLBACK_DOMESTIC: 100,
}

# Status messages of the processing interstitial, in display order.
# Message i is shown at i * STAGE_INTERVAL_MS; completion follows the last
# message after one more interval.
PROCESSING_MESSAGES: tuple[str, ...] = (
    "Cross-referencing Harmonized Tariff Schedule (HTS) exemptions...",
    "Verifying Importer of Record stipulations...",
    "Calculating 314-day liquidation windows based on CBP guidelines...",
    "Building your protective recovery plan...",
)

# Milliseconds between processing stages.
# Overridable via SCREENER_STAGE_INTERVAL_MS env var.
STAGE_INTERVAL_MS = int(os.getenv("SCREENER_STAGE_INTERVAL_MS", "1200"))

# The answer that drives recommendation tracks.
TIMELINE_KEY = "timeline"
