"""Concrete lead sinks.

  - MemoryLeadSink: keeps leads in a list (development and tests)
  - FormLeadSink:   submits to a Google-Forms-style ``formResponse`` URL,
                    one query parameter per form field

Neither raises for delivery failures; both report through the boolean
return value as :class:`~tariff_screener.interfaces.LeadSink` requires.
"""

from __future__ import annotations

import logging

import httpx

from tariff_screener.interfaces import LeadSink
from tariff_screener.models.lead import LeadRecord

logger = logging.getLogger(__name__)

# Placeholder form field ids; real deployments override them with the ids
# of their own form (see ServerSettings.lead_form_fields).
DEFAULT_FORM_FIELDS: dict[str, str] = {
    "email": "entry.111111",
    "qualification": "entry.222222",
    "supply_chain": "entry.333333",
    "documents": "entry.444444",
    "timeline": "entry.555555",
}

# Sent for questions the user never answered.
UNANSWERED = "unknown"


class MemoryLeadSink(LeadSink):
    """Collects leads in memory.  ``fail=True`` makes every submit fail."""

    def __init__(self, *, fail: bool = False) -> None:
        self.leads: list[LeadRecord] = []
        self.fail = fail

    async def submit(self, lead: LeadRecord) -> bool:
        if self.fail:
            logger.warning("MemoryLeadSink rejecting lead (fail=True)")
            return False
        self.leads.append(lead)
        logger.info("Lead captured in memory (%d total)", len(self.leads))
        return True


class FormLeadSink(LeadSink):
    """Submits leads as query parameters to a form-response endpoint.

    Args:
        form_url: the ``.../formResponse`` URL
        field_ids: maps record field name -> form parameter name; missing
            entries fall back to :data:`DEFAULT_FORM_FIELDS`
        client: optional shared ``httpx.AsyncClient``; a short-lived client
            is created per submission when omitted
        timeout: request timeout in seconds (ignored with a shared client)
    """

    def __init__(
        self,
        form_url: str,
        field_ids: dict[str, str] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = form_url
        self._fields = {**DEFAULT_FORM_FIELDS, **(field_ids or {})}
        self._client = client
        self._timeout = timeout

    def build_params(self, lead: LeadRecord) -> dict[str, str]:
        """Map a lead onto form parameters; unanswered fields become "unknown"."""
        data = lead.model_dump()
        return {
            param: (data.get(name) or UNANSWERED)
            for name, param in self._fields.items()
        }

    async def submit(self, lead: LeadRecord) -> bool:
        params = self.build_params(lead)
        try:
            if self._client is not None:
                resp = await self._client.get(self._url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(self._url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Lead submission failed: %s", exc)
            return False

        if resp.status_code >= 400:
            logger.warning("Lead submission rejected: HTTP %d", resp.status_code)
            return False
        logger.info("Lead submitted to form endpoint (HTTP %d)", resp.status_code)
        return True
