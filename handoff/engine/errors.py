"""Exception hierarchy for the handoff pipeline."""

from __future__ import annotations


class HandoffError(Exception):
    """Base class for every failure raised by the pipeline."""


class AuthenticationFailure(HandoffError):
    """Provider credentials are missing or rejected."""


class RateLimitExceeded(HandoffError):
    """Provider-side throttling or exhausted quota."""


class UnknownProcessingFault(HandoffError):
    """Catch-all for processing failures."""


class ChunkDecodeError(UnknownProcessingFault):
    """An asset could not be decoded into pixels."""


class ChunkLimitExceeded(UnknownProcessingFault):
    """An asset needs more slices than the configured cap allows."""


class BlueprintValidationError(UnknownProcessingFault):
    """The staging reply does not conform to the Blueprint schema."""


class PipelineStateError(HandoffError):
    """An operation is not allowed in the controller's current state."""


class ResourceSaturatedError(HandoffError):
    """Ingested assets exceed the memory ceiling; initiation is blocked."""


class NotFoundError(HandoffError):
    """No asset or checkpoint carries the requested id."""
