"""Tests for the scrape and fine-tune command line scripts."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from app.core.exceptions import ExternalAPIError, ResourceNotFoundError
from app.scripts import fine_tune, scrape_amas
from app.services.fine_tuning_service import FineTuningJobStatus


@pytest.fixture
def settings(test_settings, tmp_path):
    return test_settings.model_copy(update={"DATA_DIR": str(tmp_path)})


@pytest.fixture
def fake_hn_api(sample_thread_data):
    hn_api = MagicMock()
    hn_api.search_ama_threads = AsyncMock(
        return_value=[
            {"objectID": "1", "title": sample_thread_data["title"]},
            {"objectID": None, "title": "No id"},
            {"objectID": "2", "title": "Deleted thread"},
            {"objectID": "3", "title": "Repost of the first AMA"},
        ]
    )

    async def fetch_thread(object_id):
        if object_id == "2":
            raise ResourceNotFoundError("Hacker News item", object_id)
        return sample_thread_data

    hn_api.fetch_thread = AsyncMock(side_effect=fetch_thread)
    hn_api.cleanup = AsyncMock()
    return hn_api


class TestScrapeAmas:
    @pytest.mark.asyncio
    async def test_writes_deduplicated_dataset(self, settings, fake_hn_api, tmp_path):
        written = await scrape_amas.main(settings=settings, hn_api=fake_hn_api)

        # Threads 1 and 3 carry the same two pairs
        assert written == 2
        raw = json.loads((tmp_path / "raw_amas.json").read_text(encoding="utf-8"))
        assert [pair["question"] for pair in raw] == [
            "How long does EB-2 take?",
            "Can I change employers on an H-1B & keep my status?",
        ]
        lines = (tmp_path / "processed_data.jsonl").read_text().splitlines()
        record = json.loads(lines[0])
        assert [m["role"] for m in record["messages"]] == [
            "system",
            "user",
            "assistant",
        ]
        assert record["messages"][0]["content"].startswith("You are Peter Roberts")
        fake_hn_api.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_output_dir_override(self, settings, fake_hn_api, tmp_path):
        out = tmp_path / "elsewhere"

        await scrape_amas.main(
            output_dir=str(out), settings=settings, hn_api=fake_hn_api
        )

        assert (out / "raw_amas.json").exists()
        assert (out / "processed_data.jsonl").exists()

    @pytest.mark.asyncio
    async def test_thread_with_bad_body_is_skipped(
        self, settings, fake_hn_api, sample_thread_data
    ):
        async def fetch_thread(object_id):
            if object_id == "1":
                raise ExternalAPIError("hackernews", "items/1: invalid JSON")
            return sample_thread_data

        fake_hn_api.fetch_thread.side_effect = fetch_thread

        written = await scrape_amas.main(settings=settings, hn_api=fake_hn_api)

        # Thread 3 still contributes its pairs
        assert written == 2

    @pytest.mark.asyncio
    async def test_search_failure(self, settings, fake_hn_api, tmp_path):
        fake_hn_api.search_ama_threads.side_effect = ExternalAPIError(
            "hackernews", "timeout"
        )

        assert await scrape_amas.main(settings=settings, hn_api=fake_hn_api) is None
        assert not (tmp_path / "raw_amas.json").exists()
        fake_hn_api.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rebuild_from_raw(self, settings, fake_hn_api, tmp_path):
        await scrape_amas.main(settings=settings, hn_api=fake_hn_api)
        (tmp_path / "processed_data.jsonl").unlink()

        written = await scrape_amas.main(settings=settings, from_raw=True)

        assert written == 2
        assert (tmp_path / "processed_data.jsonl").exists()

    @pytest.mark.asyncio
    async def test_rebuild_without_raw_file(self, settings):
        assert await scrape_amas.main(settings=settings, from_raw=True) is None


class TestFineTuneScript:
    @pytest.fixture
    def service(self):
        service = MagicMock()
        service.start = AsyncMock(return_value=("ftjob-1", "file-1"))
        service.get_job_status = AsyncMock()
        return service

    @pytest.mark.asyncio
    async def test_requires_api_key(self, settings, service):
        no_key = settings.model_copy(update={"OPENAI_API_KEY": ""})

        assert await fine_tune.main(settings=no_key, service=service) is False
        service.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_starts_job(self, settings, service):
        assert await fine_tune.main(settings=settings, service=service) is True
        service.start.assert_awaited_once_with(settings.PROCESSED_DATA_FILE_PATH)

    @pytest.mark.asyncio
    async def test_start_failure(self, settings, service):
        service.start.side_effect = ExternalAPIError("openai", "upload failed")
        assert await fine_tune.main(settings=settings, service=service) is False

    @pytest.mark.asyncio
    async def test_status_running(self, settings, service):
        service.get_job_status.return_value = FineTuningJobStatus(
            job_id="ftjob-1", status="running"
        )

        ok = await fine_tune.main(
            status_job_id="ftjob-1", settings=settings, service=service
        )

        assert ok is True
        service.get_job_status.assert_awaited_once_with("ftjob-1")

    @pytest.mark.asyncio
    async def test_status_failed(self, settings, service, caplog):
        service.get_job_status.return_value = FineTuningJobStatus(
            job_id="ftjob-1", status="failed", error="bad data"
        )

        ok = await fine_tune.main(
            status_job_id="ftjob-1", settings=settings, service=service
        )

        assert ok is False
        assert "bad data" in caplog.text
