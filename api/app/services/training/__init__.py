"""Training data pipeline: Q&A extraction from AMA threads and dataset files."""

from app.models.training import Comment, QAPair, Thread
from app.services.training.dataset_builder import (
    count_training_examples,
    load_raw_pairs,
    to_chat_record,
    write_raw_pairs,
    write_training_file,
)
from app.services.training.thread_extractor import (
    ExtractionIssue,
    ThreadExtractor,
    decode_html_entities,
    deduplicate_pairs,
    parse_thread,
)

__all__ = [
    "Comment",
    "ExtractionIssue",
    "QAPair",
    "Thread",
    "ThreadExtractor",
    "count_training_examples",
    "decode_html_entities",
    "deduplicate_pairs",
    "load_raw_pairs",
    "parse_thread",
    "to_chat_record",
    "write_raw_pairs",
    "write_training_file",
]
