"""Animation generation orchestrator.

One run per Airtable record:
1. Fetch the record and validate its inputs
2. Mark it "Generating..." and submit the job to WaveSpeed
3. Persist the job id ("Processing...") before any status check
4. Poll every ``poll_interval`` seconds, up to ``max_attempts`` checks
5. Write the output video and "Completed", or "Failed" with the reason
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from animate_generation.airtable import AnimationAirtableClient
from animate_generation.animator import Animator
from animate_generation.config import (
    DEFAULT_SEED,
    MODE_SOURCE_FIXED,
    MODES,
    OUTPUT_UPLOAD,
    OUTPUT_URL,
    RESOLUTIONS,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_GENERATING,
    STATUS_PROCESSING,
    AnimateConfig,
)
from animate_generation.errors import (
    GenerationFailedError,
    GenerationTimeoutError,
    ResultError,
    ValidationError,
)

logger = logging.getLogger(__name__)

JOB_COMPLETED = "completed"
JOB_FAILED = "failed"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _first_url(value: Any) -> Optional[str]:
    """First URL of an attachment list, or the value itself if it is a URL string."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list) and value:
        first = value[0]
        if isinstance(first, dict):
            return first.get("url") or None
        if isinstance(first, str):
            return first.strip() or None
    return None


def _resolve_seed(value: Any) -> int:
    if value is None or value == "":
        return DEFAULT_SEED
    if isinstance(value, bool):
        raise ValidationError(f"Seed must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"Seed must be an integer, got {value!r}")


@dataclass
class GenerationInputs:
    """Validated inputs for one WaveSpeed submission."""
    image: str
    video: str
    mode: str
    resolution: str
    seed: int = DEFAULT_SEED
    prompt: str = ""

    def to_payload(self) -> dict:
        payload = {
            "image": self.image,
            "video": self.video,
            "mode": self.mode,
            "resolution": self.resolution,
            "seed": self.seed,
        }
        # WaveSpeed treats a missing prompt differently from an empty one
        if self.prompt:
            payload["prompt"] = self.prompt
        return payload


@dataclass
class PipelineResult:
    """Outcome of one run, mirroring what was written to the record."""
    record_id: str
    status: str
    job_id: Optional[str] = None
    output_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_COMPLETED


class AnimationPipeline:
    """Runs the fetch / submit / poll / write-back cycle for a record."""

    def __init__(
        self,
        config: AnimateConfig,
        airtable: Optional[AnimationAirtableClient] = None,
        animator: Optional[Animator] = None,
    ):
        self.config = config
        self.airtable = airtable or AnimationAirtableClient(config)
        self.animator = animator or Animator(config)

    def resolve_inputs(self, fields: dict) -> GenerationInputs:
        """Pull submission inputs out of a record's fields.

        Raises:
            ValidationError: if an input is missing or outside what the API accepts.
        """
        image = _first_url(fields.get("input_image"))
        video = _first_url(fields.get("input_video"))

        logger.info(f"Input image: {'Found' if image else 'Missing'}")
        logger.info(f"Input video: {'Found' if video else 'Missing'}")

        if not image:
            raise ValidationError("No input image found")
        if not video:
            raise ValidationError("No input video found")

        if self.config.mode_source == MODE_SOURCE_FIXED:
            mode = self.config.default_mode
            resolution = self.config.default_resolution
        else:
            mode = fields.get("mode") or self.config.default_mode
            resolution = fields.get("resolution") or self.config.default_resolution

        if mode not in MODES:
            raise ValidationError(f"Unsupported mode {mode!r}, expected one of {', '.join(MODES)}")
        if resolution not in RESOLUTIONS:
            raise ValidationError(
                f"Unsupported resolution {resolution!r}, expected one of {', '.join(RESOLUTIONS)}"
            )

        prompt = fields.get("prompt") or ""
        if not isinstance(prompt, str):
            prompt = str(prompt)

        return GenerationInputs(
            image=image,
            video=video,
            mode=mode,
            resolution=resolution,
            seed=_resolve_seed(fields.get("seed")),
            prompt=prompt.strip(),
        )

    async def run(self, record_id: str) -> PipelineResult:
        """Process one record end to end. Never raises; the outcome lands on the record."""
        logger.info("=" * 60)
        logger.info(f"Starting animation generation for record: {record_id}")

        result = PipelineResult(record_id=record_id, status=STATUS_GENERATING)
        try:
            fields = await self.airtable.find(record_id)
            inputs = self.resolve_inputs(fields)
            logger.info(f"Mode: {inputs.mode}")
            logger.info(f"Resolution: {inputs.resolution}")

            await self.airtable.update(record_id, {
                "status": STATUS_GENERATING,
                "error_log": f"Started at {_now()}\nMode: {inputs.mode}\nResolution: {inputs.resolution}",
            })

            logger.info("Submitting to WaveSpeed API...")
            job_id = await self.animator.submit(inputs.to_payload())
            result.job_id = job_id
            logger.info(f"Job submitted successfully! Job ID: {job_id}")

            # Must land before the first status check so the job stays traceable
            await self.airtable.update(record_id, {
                "job_id": job_id,
                "status": STATUS_PROCESSING,
                "error_log": f"Job ID: {job_id}\nSubmitted at {_now()}",
            })
            result.status = STATUS_PROCESSING

            video_url, elapsed = await self.poll(record_id, job_id)
            result.output_url = video_url
            await self.store_output(record_id, job_id, video_url, elapsed)

            result.status = STATUS_COMPLETED
            logger.info(f"SUCCESS! Animation saved to record {record_id}")

        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"ERROR: {message}")
            result.status = STATUS_FAILED
            result.error = message
            # An uploaded attachment may already sit on the record; output_video is success-only
            clear_output = result.output_url is not None and self.config.output_storage == OUTPUT_UPLOAD
            result.output_url = None
            await self._record_failure(record_id, message, clear_output=clear_output)

        logger.info("=" * 60)
        return result

    async def poll(self, record_id: str, job_id: str) -> tuple[str, int]:
        """Wait for a job to finish.

        Sleeps before every check, so the first check happens one interval
        after submission.

        Returns:
            (first output URL, seconds elapsed since polling started)
        """
        max_attempts = self.config.max_attempts
        start = time.monotonic()

        for attempt in range(1, max_attempts + 1):
            await asyncio.sleep(self.config.poll_interval)

            elapsed = int(time.monotonic() - start)
            logger.info(f"Polling attempt {attempt}/{max_attempts} ({elapsed}s elapsed)...")

            await self._report_progress(record_id, {
                "status": f"Generating... {elapsed}s elapsed",
                "error_log": f"Job ID: {job_id}\nProcessing... (attempt {attempt}/{max_attempts})",
            })

            job = await self.animator.get_result(job_id)
            status = job.status.lower()
            logger.info(f"Current status: {status}")

            if status == JOB_COMPLETED:
                if not job.outputs or not job.outputs[0]:
                    raise ResultError("No video URL in completed response")
                logger.info(f"Animation completed! Video URL: {job.outputs[0]}")
                return job.outputs[0], elapsed

            if status == JOB_FAILED:
                raise GenerationFailedError(f"Generation failed: {job.error or 'Unknown error'}")

        raise GenerationTimeoutError("Timeout: Animation generation took too long")

    async def store_output(self, record_id: str, job_id: str, video_url: str, elapsed: int) -> None:
        """Write the finished video and the Completed status to the record."""
        fields = {
            "status": STATUS_COMPLETED,
            "error_log": f"Completed at {_now()}\nTotal time: {elapsed}s\nVideo: {video_url}",
        }

        storage = self.config.output_storage
        if storage == OUTPUT_UPLOAD:
            logger.info("Downloading video...")
            content = await self.animator.download(video_url)
            await self.airtable.upload_attachment(
                record_id,
                "output_video",
                f"{job_id}.mp4",
                content,
                "video/mp4",
            )
        elif storage == OUTPUT_URL:
            fields["output_video"] = video_url
        else:
            fields["output_video"] = [{"url": video_url}]

        await self.airtable.update(record_id, fields)

    async def _report_progress(self, record_id: str, fields: dict) -> None:
        """Progress writes are telemetry only; losing one does not stop the run."""
        try:
            await self.airtable.update(record_id, fields)
        except Exception as e:
            logger.warning(f"Could not write progress for {record_id}: {e}")

    async def _record_failure(self, record_id: str, message: str, clear_output: bool = False) -> None:
        fields = {
            "status": STATUS_FAILED,
            "error_log": f"Error: {message}\nTime: {_now()}",
        }
        if clear_output:
            fields["output_video"] = []
        try:
            await self.airtable.update(record_id, fields)
        except Exception:
            logger.exception(f"Failed to update error in Airtable for {record_id}")
