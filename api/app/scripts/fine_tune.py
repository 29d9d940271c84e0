"""
Script to fine-tune an OpenAI model on the processed AMA data.

Without arguments it uploads DATA_DIR/processed_data.jsonl, creates a
fine-tuning job and records the job in fine_tuning_job.json. With --status
it reports on an existing job.

Example usage:
    $ python -m app.scripts.fine_tune
    $ python -m app.scripts.fine_tune --status ftjob-abc123

Environment variables:
    OPENAI_API_KEY: API key for OpenAI (required)
    FINE_TUNE_BASE_MODEL: Base model to fine-tune (default: gpt-3.5-turbo)
    FINE_TUNE_EPOCHS: Number of training epochs (default: 3)
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from app.core.config import Settings, get_settings
from app.core.exceptions import BaseAppException
from app.services.fine_tuning_service import FineTuningService

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def check_status(service: FineTuningService, job_id: str) -> bool:
    status = await service.get_job_status(job_id)
    logger.info(f"Job status: {status.status}")

    if status.succeeded:
        logger.info(f"Fine-tuned model ID: {status.fine_tuned_model}")
        logger.info(
            "Set OPENAI_MODEL_ID to this model ID in your .env file to use it in the app."
        )
    elif status.failed:
        logger.error(f"Job failed. Error: {status.error}")
    return not status.failed


async def main(
    status_job_id: Optional[str] = None,
    settings: Optional[Settings] = None,
    service: Optional[FineTuningService] = None,
) -> bool:
    """Start a fine-tuning job or check an existing one.

    Returns:
        True on success, False if configuration or any API step failed
    """
    settings = settings or get_settings()
    if not settings.OPENAI_API_KEY:
        logger.error("OPENAI_API_KEY environment variable not set.")
        logger.error("Please create a .env file with your OpenAI API key.")
        return False

    service = service or FineTuningService(settings)
    try:
        if status_job_id:
            return await check_status(service, status_job_id)

        job_id, _ = await service.start(settings.PROCESSED_DATA_FILE_PATH)
        logger.info(
            f"Run this script with --status {job_id} to check the status of "
            "your fine-tuning job."
        )
        return True
    except BaseAppException as e:
        logger.error(f"Fine-tuning failed: {e.detail}")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Fine-tune an OpenAI model on the processed AMA data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--status", metavar="JOB_ID", help="Check the status of a fine-tuning job"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    succeeded = asyncio.run(main(status_job_id=args.status))
    sys.exit(0 if succeeded else 1)
