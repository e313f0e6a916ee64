"""Error kinds raised while a generation run is in flight.

Every one of these is caught at the top of ``AnimationPipeline.run`` and
turned into a ``Failed`` status on the record.
"""


class AnimationError(Exception):
    """Base class for all run failures."""


class NotFoundError(AnimationError):
    """The record id does not resolve in the record store."""


class ValidationError(AnimationError):
    """A required input is missing or invalid. No external call was made."""


class SubmissionError(AnimationError):
    """The generation API rejected the job or returned a malformed response."""


class PollError(AnimationError):
    """A status check could not be completed or was malformed."""


class ResultError(AnimationError):
    """The job completed but its output could not be obtained."""


class GenerationFailedError(AnimationError):
    """The generation API reported the job as failed."""


class GenerationTimeoutError(AnimationError, TimeoutError):
    """The poll budget ran out before the job reached a terminal state."""
