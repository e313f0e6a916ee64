"""Wan 2.2 Animate generation service.

Takes an Airtable record id from a webhook, submits the record's image and
driving video to WaveSpeed's Wan 2.2 Animate model, polls until the job
finishes, and writes the result back onto the record.
"""

from animate_generation.config import AnimateConfig
from animate_generation.airtable import AnimationAirtableClient
from animate_generation.animator import Animator
from animate_generation.pipeline import AnimationPipeline, GenerationInputs, PipelineResult
from animate_generation.errors import (
    AnimationError,
    NotFoundError,
    ValidationError,
    SubmissionError,
    PollError,
    ResultError,
    GenerationFailedError,
    GenerationTimeoutError,
)

__all__ = [
    "AnimateConfig",
    "AnimationAirtableClient",
    "Animator",
    "AnimationPipeline",
    "GenerationInputs",
    "PipelineResult",
    "AnimationError",
    "NotFoundError",
    "ValidationError",
    "SubmissionError",
    "PollError",
    "ResultError",
    "GenerationFailedError",
    "GenerationTimeoutError",
]
