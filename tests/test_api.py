import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient
from helpers import make_session_factory

from shelfarr.database import get_db
from shelfarr.main import app


class OrganizationApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.library = Path(self.tmp.name)
        session_factory = make_session_factory()

        def override_get_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        # No context manager: the lifespan (database init, scheduler) stays off
        self.client = TestClient(app)
        self.client.put("/api/v1/organization/settings", json={"library_path": str(self.library)})

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.tmp.cleanup()

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json()["status"], "healthy")

    def test_settings(self) -> None:
        response = self.client.get("/api/v1/organization/settings")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["library_path"], str(self.library))

        response = self.client.put("/api/v1/organization/settings", json={"reverse_indexing_cron": "*/5 * * * *"})
        self.assertEqual(response.json()["reverse_indexing_cron"], "*/5 * * * *")

    def test_invalid_cron_is_rejected(self) -> None:
        response = self.client.put("/api/v1/organization/settings", json={"reverse_indexing_cron": "hourly"})
        self.assertEqual(response.status_code, 400)

    def test_rule_lifecycle(self) -> None:
        response = self.client.post(
            "/api/v1/organization/rules",
            json={
                "content_type": "GAME",
                "platform": "SNES",
                "folder_name_pattern": "{title}",
                "file_name_pattern": "{title} ({platform})",
            },
        )
        self.assertEqual(response.status_code, 201)
        rule_id = response.json()["id"]

        response = self.client.get("/api/v1/organization/rules/GAME", params={"platform": "SNES"})
        self.assertEqual(response.json()["id"], rule_id)

        response = self.client.put(f"/api/v1/organization/rules/{rule_id}", json={"base_path": "/roms"})
        self.assertEqual(response.json()["base_path"], "/roms")

        self.assertEqual(self.client.delete(f"/api/v1/organization/rules/{rule_id}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/v1/organization/rules/{rule_id}").status_code, 404)

    def test_invalid_rule_template(self) -> None:
        response = self.client.post(
            "/api/v1/organization/rules",
            json={"content_type": "MOVIE", "folder_name_pattern": "{nope}", "file_name_pattern": "{title}"},
        )
        self.assertEqual(response.status_code, 400)

    def test_preview_path(self) -> None:
        response = self.client.post(
            "/api/v1/organization/preview-path",
            json={"content_type": "TV_SHOW", "title": "Breaking Bad", "season": 1, "episode": 2},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["full_path"],
            str(self.library / "tv-shows" / "Breaking Bad" / "Season 01" / "Breaking Bad - S01E02.mkv"),
        )

    def test_organize_file(self) -> None:
        source = self.library / "incoming.mkv"
        source.write_bytes(b"x")

        response = self.client.post(
            "/api/v1/organization/organize",
            json={"path": str(source), "content_type": "MOVIE", "title": "Heat", "year": 1995},
        )

        self.assertTrue(response.json()["success"])
        self.assertTrue((self.library / "movies" / "Heat (1995)" / "Heat (1995).mkv").exists())

    def test_extract_metadata(self) -> None:
        response = self.client.get(
            "/api/v1/organization/extract-metadata",
            params={"file_name": "Inception (2010) - 1080p.mkv", "content_type": "MOVIE"},
        )
        self.assertEqual(response.json()["title"], "Inception")
        self.assertEqual(response.json()["year"], 2010)

    def test_reverse_index_and_queue(self) -> None:
        folder = self.library / "games" / "Doom (PC)"
        folder.mkdir(parents=True)
        (folder / "doom.iso").write_bytes(b"x")

        self.assertFalse(self.client.get("/api/v1/organization/reverse-index/status").json()["is_running"])

        response = self.client.post("/api/v1/organization/reverse-index")
        self.assertTrue(response.json()["success"])
        self.assertEqual(response.json()["results"]["queued_folders"], 1)

        queue = self.client.get("/api/v1/organization/queue").json()
        self.assertEqual(queue["total"], 1)
        item_id = queue["items"][0]["id"]

        stats = self.client.get("/api/v1/organization/queue/stats").json()
        self.assertEqual(stats["pending"], 1)

        response = self.client.post(f"/api/v1/organization/queue/{item_id}/skip")
        self.assertEqual(response.json()["message"], "Item skipped successfully")

        skipped = self.client.get("/api/v1/organization/queue", params={"status": ["SKIPPED"]}).json()
        self.assertEqual(skipped["total"], 1)

        response = self.client.post(f"/api/v1/organization/queue/{item_id}/process")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"], "Queue item is SKIPPED and cannot be processed")
        self.assertEqual(self.client.post(f"/api/v1/organization/queue/{item_id}/skip").status_code, 409)

        response = self.client.delete(f"/api/v1/organization/queue/{item_id}")
        self.assertTrue(response.json()["success"])

    def test_unknown_queue_item(self) -> None:
        self.assertEqual(self.client.post("/api/v1/organization/queue/missing/process").status_code, 404)
        self.assertEqual(self.client.post("/api/v1/organization/queue/missing/skip").status_code, 404)
        self.assertEqual(self.client.delete("/api/v1/organization/queue/missing").status_code, 404)

    def test_season_scan(self) -> None:
        response = self.client.post("/api/v1/organization/season-scan")
        self.assertEqual(response.json()["seasons_scanned"], 0)


if __name__ == "__main__":
    unittest.main()
