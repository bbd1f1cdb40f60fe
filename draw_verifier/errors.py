"""Errors that end a single scan attempt.

Every error here is reported back to the operator as retryable; none of them
touch schedule state.
"""

from __future__ import annotations


class TicketValidationError(ValueError):
    code = "invalid_ticket"


class MalformedPayload(TicketValidationError):
    code = "malformed_payload"


class InvalidTicketStructure(TicketValidationError):
    code = "invalid_ticket_structure"


class InvalidAmount(TicketValidationError):
    code = "invalid_amount"
