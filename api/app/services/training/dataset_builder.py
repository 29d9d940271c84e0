"""Writers for the raw AMA pair dump and the chat fine-tuning file."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from app.models.training import QAPair

logger = logging.getLogger(__name__)

# Minimum number of examples accepted by the fine-tuning API
MIN_TRAINING_EXAMPLES = 10


def to_chat_record(pair: QAPair, system_prompt: str) -> Dict[str, Any]:
    """Wrap a pair into a system/user/assistant chat example."""
    return {
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": pair.question},
            {"role": "assistant", "content": pair.answer},
        ]
    }


def write_raw_pairs(pairs: Iterable[QAPair], path: Union[str, Path]) -> int:
    """Write pairs as a JSON array. Returns the number of pairs written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = [pair.to_dict() for pair in pairs]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
    logger.info(f"Saved {len(records)} QA pairs to {path}")
    return len(records)


def write_training_file(
    pairs: Iterable[QAPair], path: Union[str, Path], system_prompt: str
) -> int:
    """Write one chat record per line. Returns the number of records."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for pair in pairs:
            f.write(json.dumps(to_chat_record(pair, system_prompt), ensure_ascii=False))
            f.write("\n")
            count += 1
    logger.info(f"Saved {count} training examples to {path}")
    if count < MIN_TRAINING_EXAMPLES:
        logger.warning(
            f"Only {count} training examples written; fine-tuning requires "
            f"at least {MIN_TRAINING_EXAMPLES}"
        )
    return count


def load_raw_pairs(path: Union[str, Path]) -> List[QAPair]:
    """Read pairs previously written by ``write_raw_pairs``."""
    with open(path, encoding="utf-8") as f:
        records = json.load(f)
    return [QAPair(**record) for record in records]


def count_training_examples(path: Union[str, Path]) -> int:
    """Count non-blank lines of a JSONL training file (0 if missing)."""
    path = Path(path)
    if not path.exists():
        return 0
    with open(path, encoding="utf-8") as f:
        return sum(1 for line in f if line.strip())
