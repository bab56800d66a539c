"""Render callback endpoint tests."""

from __future__ import annotations

import os
import unittest

from fastapi.testclient import TestClient

from maklerpro_api.adapters.telegram import RecordingMessenger
from maklerpro_api.core.config import get_settings
from maklerpro_api.main import create_app
from maklerpro_api.schemas.job import VideoJobStatus

_CALLBACK_PATH = "/api/video-callback"


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "MAKLER_DATASTORE_BACKEND",
        "MAKLER_CALLBACK_SECRET",
        "TELEGRAM_BOT_TOKEN",
        "SUPABASE_URL",
        "VITE_SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        for key in self._env_keys:
            os.environ.pop(key, None)
        os.environ["MAKLER_DATASTORE_BACKEND"] = "memory"
        os.environ["TELEGRAM_BOT_TOKEN"] = "test-bot-token"
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class VideoCallbackApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)
        self.store = self.app.state.store
        self.storage = self.app.state.storage
        self.messenger: RecordingMessenger = self.app.state.messenger

    def test_non_post_is_method_not_allowed(self) -> None:
        response = self.client.get(_CALLBACK_PATH)

        self.assertEqual(response.status_code, 405)

    def test_unknown_job_returns_404_without_side_effects(self) -> None:
        response = self.client.post(
            _CALLBACK_PATH,
            json={"id": "job-unknown", "status": "done", "url": "https://cdn.example/x.mp4"},
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"code": "JOB_NOT_FOUND", "message": "Job not found"})
        self.assertEqual(self.storage.store_calls, 0)
        self.assertEqual(self.store.job_write_count, 0)
        self.assertEqual(self.messenger.sent, [])

    def test_done_callback_example_completes_job(self) -> None:
        self.store.create_job(
            external_id="job-42",
            owner_id="u1",
            status=VideoJobStatus.RENDERING,
            config={"aspectRatio": "9:16", "images": [{"url": "https://img.example/1.jpg"}], "transition": "fade"},
        )
        self.store.telegram_ids["u1"] = "1001"

        response = self.client.post(
            _CALLBACK_PATH,
            json={
                "type": "render",
                "action": "render",
                "id": "job-42",
                "owner": "shotstack-owner",
                "status": "done",
                "url": "https://cdn.example/job-42.mp4",
                "completed": "2026-03-01T10:01:00Z",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, "OK")
        record = self.store.jobs["job-42"]
        self.assertEqual(record.status, VideoJobStatus.COMPLETED)
        self.assertEqual(record.result_url, "https://storage.local/videos/slideshows/u1/job-42.mp4")
        self.assertIn("slideshows/u1/job-42.mp4", self.storage.objects)
        history = self.store.history_for_owner("u1")
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].data.url, record.result_url)
        self.assertEqual(len(self.messenger.sent), 1)
        self.assertEqual(self.messenger.sent[0].chat_id, "1001")

    def test_redelivered_done_callback_is_idempotent(self) -> None:
        self.store.create_job(external_id="job-42", owner_id="u1", status=VideoJobStatus.SAVING)
        payload = {"id": "job-42", "status": "done", "url": "https://cdn.example/job-42.mp4"}

        first = self.client.post(_CALLBACK_PATH, json=payload)
        record = self.store.jobs["job-42"]
        result_url, completed_at = record.result_url, record.completed_at
        second = self.client.post(_CALLBACK_PATH, json=payload)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(record.result_url, result_url)
        self.assertEqual(record.completed_at, completed_at)
        self.assertEqual(len(self.store.history), 1)

    def test_fetch_failure_returns_500_and_keeps_prior_status(self) -> None:
        self.store.create_job(external_id="job-42", owner_id="u1", status=VideoJobStatus.SAVING)
        self.storage.unreachable_urls.add("https://cdn.example/job-42.mp4")

        response = self.client.post(
            _CALLBACK_PATH,
            json={"id": "job-42", "status": "done", "url": "https://cdn.example/job-42.mp4"},
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"code": "UPSTREAM_FETCH_FAILED", "message": "Internal error"})
        self.assertEqual(self.store.jobs["job-42"].status, VideoJobStatus.SAVING)
        self.assertEqual(self.store.history, [])

    def test_missing_identity_still_completes_and_records_history(self) -> None:
        self.store.create_job(external_id="job-42", owner_id="u1")

        response = self.client.post(
            _CALLBACK_PATH,
            json={"id": "job-42", "status": "done", "url": "https://cdn.example/job-42.mp4"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.store.jobs["job-42"].status, VideoJobStatus.COMPLETED)
        self.assertEqual(len(self.store.history_for_owner("u1")), 1)
        self.assertEqual(self.messenger.sent, [])

    def test_failed_callback_records_error_detail(self) -> None:
        self.store.create_job(external_id="job-42", owner_id="u1", status=VideoJobStatus.RENDERING)

        response = self.client.post(_CALLBACK_PATH, json={"id": "job-42", "status": "failed"})

        self.assertEqual(response.status_code, 200)
        record = self.store.jobs["job-42"]
        self.assertEqual(record.status, VideoJobStatus.FAILED)
        self.assertEqual(record.error_detail, "Unknown error")

    def test_intermediate_callback_updates_status_only(self) -> None:
        self.store.create_job(external_id="job-42", owner_id="u1")

        response = self.client.post(_CALLBACK_PATH, json={"id": "job-42", "status": "fetching"})

        self.assertEqual(response.status_code, 200)
        record = self.store.jobs["job-42"]
        self.assertEqual(record.status, VideoJobStatus.FETCHING)
        self.assertIsNone(record.result_url)
        self.assertIsNone(record.error_detail)

    def test_datastore_failure_returns_500(self) -> None:
        self.store.create_job(external_id="job-42", owner_id="u1")
        self.store.datastore_failure_message = "connection reset"

        response = self.client.post(_CALLBACK_PATH, json={"id": "job-42", "status": "rendering"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "DATASTORE_ERROR")

    def test_malformed_payloads_return_500_without_processing(self) -> None:
        self.store.create_job(external_id="job-42", owner_id="u1")
        cases = {
            "invalid_json": {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
            "missing_id": {"json": {"status": "done", "url": "https://cdn.example/x.mp4"}},
            "missing_status": {"json": {"id": "job-42"}},
            "unknown_status": {"json": {"id": "job-42", "status": "exploded"}},
        }
        for name, kwargs in cases.items():
            with self.subTest(case=name):
                response = self.client.post(_CALLBACK_PATH, **kwargs)
                self.assertEqual(response.status_code, 500)
                self.assertEqual(response.json()["code"], "INVALID_CALLBACK_PAYLOAD")

        self.assertEqual(self.store.jobs["job-42"].status, VideoJobStatus.QUEUED)
        self.assertEqual(self.store.job_write_count, 0)


class VideoCallbackSecretTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        os.environ["MAKLER_CALLBACK_SECRET"] = "render-secret"
        get_settings.cache_clear()
        self.app = create_app()
        self.client = TestClient(self.app)
        self.app.state.store.create_job(external_id="job-42", owner_id="u1")

    def test_missing_or_wrong_secret_is_rejected(self) -> None:
        missing = self.client.post(_CALLBACK_PATH, json={"id": "job-42", "status": "rendering"})
        wrong = self.client.post(
            _CALLBACK_PATH,
            headers={"X-Callback-Secret": "nope"},
            json={"id": "job-42", "status": "rendering"},
        )

        self.assertEqual(missing.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(missing.json()["code"], "UNAUTHORIZED")
        self.assertEqual(self.app.state.store.jobs["job-42"].status, VideoJobStatus.QUEUED)

    def test_secret_accepted_from_header_or_query_token(self) -> None:
        by_header = self.client.post(
            _CALLBACK_PATH,
            headers={"X-Callback-Secret": "render-secret"},
            json={"id": "job-42", "status": "fetching"},
        )
        by_query = self.client.post(
            f"{_CALLBACK_PATH}?token=render-secret",
            json={"id": "job-42", "status": "rendering"},
        )

        self.assertEqual(by_header.status_code, 200)
        self.assertEqual(by_query.status_code, 200)
        self.assertEqual(self.app.state.store.jobs["job-42"].status, VideoJobStatus.RENDERING)

    def test_non_ascii_secret_is_rejected_as_unauthorized(self) -> None:
        response = self.client.post(
            f"{_CALLBACK_PATH}?token=%C3%A9",
            json={"id": "job-42", "status": "rendering"},
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHORIZED")
        self.assertEqual(self.app.state.store.jobs["job-42"].status, VideoJobStatus.QUEUED)

    def test_malformed_payload_with_valid_secret_returns_500(self) -> None:
        response = self.client.post(
            _CALLBACK_PATH,
            headers={"X-Callback-Secret": "render-secret"},
            json={"id": "job-42"},
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "INVALID_CALLBACK_PAYLOAD")


if __name__ == "__main__":
    unittest.main()
