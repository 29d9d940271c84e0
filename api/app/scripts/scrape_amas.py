"""
Script to build the fine-tuning dataset from Hacker News immigration AMAs.

It:
1. Searches Hacker News for the persona's "Ask Me Anything" threads
2. Fetches each thread's full comment tree
3. Extracts question/answer pairs answered by the persona
4. Deduplicates the pairs across threads
5. Writes raw_amas.json and processed_data.jsonl into DATA_DIR

Example usage:
    $ python -m app.scripts.scrape_amas
    $ python -m app.scripts.scrape_amas --output-dir /tmp/amas --debug
    $ python -m app.scripts.scrape_amas --from-raw

Environment variables:
    DATA_DIR: Directory for data files (default: api/data)
    TARGET_AUTHOR_ALIASES: Comma-separated usernames of the persona
    HN_SEARCH_QUERY: Search query for the AMA stories
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from app.core.config import Settings, get_settings
from app.core.exceptions import BaseAppException
from app.integrations.hn_api import HackerNewsAPI
from app.models.training import QAPair
from app.prompts import training_system_prompt
from app.services.training import (
    ThreadExtractor,
    deduplicate_pairs,
    load_raw_pairs,
    parse_thread,
    write_raw_pairs,
    write_training_file,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def collect_qa_pairs(
    hn_api: HackerNewsAPI, extractor: ThreadExtractor
) -> List[QAPair]:
    """Fetch every AMA thread and extract its pairs in thread order.

    A thread that cannot be fetched is skipped; a failed search propagates.
    """
    threads = await hn_api.search_ama_threads()
    all_pairs: List[QAPair] = []

    for hit in threads:
        object_id = hit.get("objectID")
        title = hit.get("title")
        if not object_id:
            logger.warning(f"Skipping search hit without objectID: {title}")
            continue

        logger.info(f"Processing thread: {title} (ID: {object_id})")
        try:
            data = await hn_api.fetch_thread(object_id)
        except BaseAppException as e:
            logger.error(f"Could not fetch thread {object_id}, skipping: {e.detail}")
            continue

        pairs = extractor.extract(parse_thread(data))
        logger.info(f"Extracted {len(pairs)} QA pairs from this thread.")
        all_pairs.extend(pairs)

    return all_pairs


def save_dataset(pairs: List[QAPair], settings: Settings, output_dir: str) -> int:
    """Write the raw pair dump and the JSONL training file."""
    write_raw_pairs(pairs, os.path.join(output_dir, "raw_amas.json"))
    return write_training_file(
        pairs,
        os.path.join(output_dir, "processed_data.jsonl"),
        training_system_prompt(settings.PERSONA_NAME),
    )


async def main(
    output_dir: Optional[str] = None,
    from_raw: bool = False,
    settings: Optional[Settings] = None,
    hn_api: Optional[HackerNewsAPI] = None,
) -> Optional[int]:
    """Run the scrape and return the number of training examples written.

    Args:
        output_dir: Directory for the output files (defaults to DATA_DIR)
        from_raw: Rebuild the training file from an existing raw_amas.json
            instead of scraping again

    Returns:
        Number of training examples, or None if the search failed
    """
    settings = settings or get_settings()
    output_dir = output_dir or settings.DATA_DIR
    os.makedirs(output_dir, exist_ok=True)

    if from_raw:
        raw_path = os.path.join(output_dir, "raw_amas.json")
        logger.info(f"Rebuilding training file from {raw_path}")
        try:
            pairs = load_raw_pairs(raw_path)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Could not read {raw_path}: {e}")
            return None
        return write_training_file(
            pairs,
            os.path.join(output_dir, "processed_data.jsonl"),
            training_system_prompt(settings.PERSONA_NAME),
        )

    logger.info(f"Starting to scrape {settings.PERSONA_NAME} AMAs from Hacker News...")
    hn_api = hn_api or HackerNewsAPI(settings)
    extractor = ThreadExtractor(settings.TARGET_AUTHOR_ALIASES)

    try:
        pairs = await collect_qa_pairs(hn_api, extractor)
    except BaseAppException as e:
        logger.error(f"AMA search failed: {e.detail}")
        return None
    finally:
        await hn_api.cleanup()

    unique_pairs = deduplicate_pairs(pairs, key_length=settings.DEDUP_KEY_LENGTH)
    logger.info(
        f"Kept {len(unique_pairs)} unique QA pairs out of {len(pairs)} extracted"
    )
    return save_dataset(unique_pairs, settings, output_dir)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Build a fine-tuning dataset from Hacker News immigration AMAs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--output-dir", help="Directory for output files (default: DATA_DIR)"
    )
    parser.add_argument(
        "--from-raw",
        action="store_true",
        help="Rebuild processed_data.jsonl from an existing raw_amas.json",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    result = asyncio.run(main(output_dir=args.output_dir, from_raw=args.from_raw))
    sys.exit(0 if result is not None else 1)
