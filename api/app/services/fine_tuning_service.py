"""Fine-tuning job submission for the persona model."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple, Union

from openai import AsyncOpenAI, OpenAIError

from app.core.config import Settings
from app.core.exceptions import ExternalAPIError, TrainingFileNotFoundError
from app.services.training.dataset_builder import (
    MIN_TRAINING_EXAMPLES,
    count_training_examples,
)

logger = logging.getLogger(__name__)


@dataclass
class FineTuningJobStatus:
    job_id: str
    status: str
    fine_tuned_model: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    @property
    def failed(self) -> bool:
        return self.status == "failed"


class FineTuningService:
    """Uploads the training file and manages OpenAI fine-tuning jobs."""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.settings = settings
        self.client = client or AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT,
            max_retries=settings.OPENAI_MAX_RETRIES,
        )

    async def upload_training_file(self, path: Union[str, Path]) -> str:
        """Upload a JSONL training file and return its file ID.

        Raises:
            TrainingFileNotFoundError: If the file is missing or has no examples
            ExternalAPIError: If the upload fails
        """
        path = Path(path)
        examples = count_training_examples(path)
        if examples == 0:
            raise TrainingFileNotFoundError(str(path))
        if examples < MIN_TRAINING_EXAMPLES:
            logger.warning(
                f"Training file has only {examples} examples; the API requires "
                f"at least {MIN_TRAINING_EXAMPLES}"
            )

        logger.info(f"Uploading training file {path} ({examples} examples)...")
        try:
            with open(path, "rb") as f:
                uploaded = await self.client.files.create(file=f, purpose="fine-tune")
        except OpenAIError as e:
            logger.error(f"Error uploading training file: {e}")
            raise ExternalAPIError("openai", "training file upload failed") from e

        logger.info(f"File uploaded successfully. File ID: {uploaded.id}")
        return uploaded.id

    async def create_job(self, file_id: str) -> str:
        """Create a fine-tuning job for an uploaded file and return its ID."""
        logger.info(
            f"Creating fine-tuning job on {self.settings.FINE_TUNE_BASE_MODEL}..."
        )
        try:
            job = await self.client.fine_tuning.jobs.create(
                training_file=file_id,
                model=self.settings.FINE_TUNE_BASE_MODEL,
                hyperparameters={"n_epochs": self.settings.FINE_TUNE_EPOCHS},
            )
        except OpenAIError as e:
            logger.error(f"Error creating fine-tuning job: {e}")
            raise ExternalAPIError("openai", "fine-tuning job creation failed") from e

        logger.info(f"Fine-tuning job created successfully. Job ID: {job.id}")
        return job.id

    async def get_job_status(self, job_id: str) -> FineTuningJobStatus:
        try:
            job = await self.client.fine_tuning.jobs.retrieve(job_id)
        except OpenAIError as e:
            logger.error(f"Error checking job status: {e}")
            raise ExternalAPIError("openai", "fine-tuning job lookup failed") from e

        error = None
        if job.error is not None and getattr(job.error, "message", None):
            error = job.error.message
        return FineTuningJobStatus(
            job_id=job.id,
            status=job.status,
            fine_tuned_model=job.fine_tuned_model,
            error=error,
        )

    def save_job_record(self, job_id: str, file_id: str) -> Path:
        """Persist the submitted job so its status can be checked later."""
        self.settings.ensure_data_dirs()
        path = Path(self.settings.FINE_TUNING_JOB_FILE_PATH)
        record = {
            "job_id": job_id,
            "file_id": file_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2)
        logger.info(f"Saved fine-tuning job record to {path}")
        return path

    async def start(self, path: Union[str, Path]) -> Tuple[str, str]:
        """Upload the training file, create the job and record it.

        Returns:
            Tuple of (job_id, file_id)
        """
        file_id = await self.upload_training_file(path)
        job_id = await self.create_job(file_id)
        self.save_job_record(job_id, file_id)
        return job_id, file_id
