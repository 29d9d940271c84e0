"""Tests for the raw dump and fine-tuning file writers."""

import json
import logging

import pytest
from app.models.training import QAPair
from app.prompts import training_system_prompt
from app.services.training.dataset_builder import (
    count_training_examples,
    load_raw_pairs,
    to_chat_record,
    write_raw_pairs,
    write_training_file,
)


@pytest.fixture
def pairs():
    return [
        QAPair(
            question="How long does EB-2 take?",
            answer="About 1-2 years for most nationalities.",
            timestamp="2023-05-01T15:10:00.000Z",
            thread_id=1,
            thread_title="Ask Me Anything",
        ),
        QAPair(
            question="Can I travel on advance parole?",
            answer="Yes, once it is approved.",
            timestamp="2023-05-01T15:20:00.000Z",
            thread_id=1,
            thread_title="Ask Me Anything",
        ),
    ]


class TestToChatRecord:
    def test_three_messages_in_order(self, pairs):
        record = to_chat_record(pairs[0], "SYSTEM")

        assert record == {
            "messages": [
                {"role": "system", "content": "SYSTEM"},
                {"role": "user", "content": "How long does EB-2 take?"},
                {
                    "role": "assistant",
                    "content": "About 1-2 years for most nationalities.",
                },
            ]
        }

    def test_training_prompt_names_persona(self):
        prompt = training_system_prompt("Peter Roberts")
        assert prompt.startswith("You are Peter Roberts, an immigration attorney")
        assert "informational purposes only" in prompt


class TestWriters:
    def test_write_raw_pairs(self, pairs, tmp_path):
        path = tmp_path / "nested" / "raw_amas.json"

        count = write_raw_pairs(pairs, path)

        assert count == 2
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0] == {
            "question": "How long does EB-2 take?",
            "answer": "About 1-2 years for most nationalities.",
            "timestamp": "2023-05-01T15:10:00.000Z",
            "thread_id": 1,
            "thread_title": "Ask Me Anything",
        }

    def test_load_raw_pairs_reads_what_was_written(self, pairs, tmp_path):
        path = tmp_path / "raw_amas.json"
        write_raw_pairs(pairs, path)
        assert load_raw_pairs(path) == pairs

    def test_write_training_file_one_record_per_line(self, pairs, tmp_path):
        path = tmp_path / "processed_data.jsonl"

        count = write_training_file(pairs, path, "SYSTEM")

        lines = path.read_text(encoding="utf-8").splitlines()
        assert count == 2
        assert len(lines) == 2
        records = [json.loads(line) for line in lines]
        assert [r["messages"][1]["content"] for r in records] == [
            "How long does EB-2 take?",
            "Can I travel on advance parole?",
        ]
        assert count_training_examples(path) == 2

    def test_small_training_file_warns(self, pairs, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            write_training_file(pairs, tmp_path / "small.jsonl", "SYSTEM")
        assert "at least 10" in caplog.text

    def test_count_missing_file(self, tmp_path):
        assert count_training_examples(tmp_path / "missing.jsonl") == 0

    def test_count_ignores_blank_lines(self, tmp_path):
        path = tmp_path / "data.jsonl"
        path.write_text('{"a": 1}\n\n{"b": 2}\n   \n', encoding="utf-8")
        assert count_training_examples(path) == 2
