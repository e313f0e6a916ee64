"""Video animation via WaveSpeed Wan 2.2 Animate: submits jobs and checks their results."""

import logging
from typing import Optional

import httpx
import pydantic

from animate_generation.config import SUBMIT_SUCCESS_CODE, AnimateConfig
from animate_generation.errors import PollError, ResultError, SubmissionError
from animate_generation.schemas import ResultData, ResultResponse, SubmitResponse

logger = logging.getLogger(__name__)


class Animator:
    """Thin async client for the WaveSpeed prediction API.

    Each call opens its own ``httpx.AsyncClient``. No call is retried: a
    failure surfaces as one of the typed errors and ends the run.
    """

    def __init__(
        self,
        config: AnimateConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = config.wavespeed_api_key
        if not self.api_key:
            raise ValueError("WAVESPEED_API_KEY not found in configuration")
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.config.http_timeout)

    async def submit(self, payload: dict) -> str:
        """Submit a generation job.

        Args:
            payload: ``{image, video, mode, resolution, seed}`` plus ``prompt``
                when one was given.

        Returns:
            The job id assigned by WaveSpeed.

        Raises:
            SubmissionError: on transport failure, a non-2xx status, a body
                whose ``code`` is not 200, or a success body without an id.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with self._client() as client:
                response = await client.post(self.config.submit_url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise SubmissionError(f"API error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None
        logger.info(f"Submit response ({response.status_code}): {body}")

        try:
            result = SubmitResponse.model_validate(body)
        except pydantic.ValidationError:
            result = SubmitResponse()

        if not response.is_success or result.code != SUBMIT_SUCCESS_CODE:
            raise SubmissionError(f"API error: {result.message or 'Unknown error'}")

        if result.data is None or not result.data.id:
            raise SubmissionError("API error: no job id in submit response")

        return result.data.id

    async def get_result(self, job_id: str) -> ResultData:
        """Fetch the current state of a job.

        Raises:
            PollError: on transport failure, a non-2xx status, or a body that
                does not carry ``data.status``.
        """
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with self._client() as client:
                response = await client.get(self.config.result_url(job_id), headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise PollError(f"Status check failed for job {job_id}: {e}") from e

        try:
            return ResultResponse.model_validate(response.json()).data
        except (ValueError, pydantic.ValidationError) as e:
            raise PollError(f"Malformed status response for job {job_id}") from e

    async def download(self, url: str) -> bytes:
        """Download a finished video."""
        try:
            async with self._client() as client:
                response = await client.get(url, follow_redirects=True)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ResultError(f"Could not download output video: {e}") from e
        return response.content
