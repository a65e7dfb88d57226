"""Abstract interface for the lead-capture collaborator.

The screener core never knows how a lead is delivered.  It only needs a
yes/no answer: on success the session resets, on failure the user sees an
error and may resubmit by hand.

Typical integration flow::

    sink: LeadSink = FormLeadSink(form_url, field_ids)
    result = await controller.submit_lead("ops@acme.com", sink)
    if not result.ok:
        show(result.error)
"""

from abc import ABC, abstractmethod

from tariff_screener.models.lead import LeadRecord


class LeadSink(ABC):
    """Accepts captured leads.

    Implementations must not raise for delivery problems; they report them
    by returning ``False``.
    """

    @abstractmethod
    async def submit(self, lead: LeadRecord) -> bool:
        """Deliver ``lead``.

        Parameters
        ----------
        lead:
            The email plus the session's answers.  Unanswered questions
            are ``None``.

        Returns
        -------
        bool
            ``True`` if the lead was accepted, ``False`` otherwise.
        """
        ...
