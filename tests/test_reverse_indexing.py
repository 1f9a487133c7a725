import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, patch

from helpers import make_session_factory, silent_catalog

from shelfarr.models import (
    ContentRequest,
    ContentType,
    OrganizeQueueItem,
    OrganizeQueueStatus,
    OrganizedFile,
    RequestStatus,
)
from shelfarr.schemas.organization import OrganizationResult
from shelfarr.schemas.organize_queue import QueueItemSelections
from shelfarr.services.external_apis import ExternalApiResponse
from shelfarr.services.reverse_indexing_service import ReverseIndexingService, ScanGuard


class ReverseIndexingTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.library = Path(self.tmp.name)
        self.db = make_session_factory()()
        self.catalog = silent_catalog()
        self.guard = ScanGuard()
        self.service = ReverseIndexingService(self.db, catalog=self.catalog, guard=self.guard)
        self.service.rules.update_settings({"library_path": str(self.library)})

    def tearDown(self) -> None:
        self.db.close()
        self.tmp.cleanup()

    def make_file(self, relative: str, content: bytes = b"data") -> Path:
        path = self.library / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def queue_items(self):
        return self.db.query(OrganizeQueueItem).all()


class ScanTestCase(ReverseIndexingTestCase):
    async def test_well_named_movie_is_auto_imported(self) -> None:
        movie = self.make_file("movies/Inception (2010)/Inception.mkv")

        response = await self.service.trigger_reverse_indexing()

        self.assertTrue(response.success)
        self.assertEqual(response.results.total_folders, 1)
        self.assertEqual(response.results.new_folders, 1)
        self.assertEqual(response.results.auto_imported, 1)
        self.assertIn("Found 1 folders, processed 1 new folders", response.message)

        request = self.db.query(ContentRequest).one()
        self.assertEqual((request.title, request.year), ("Inception", 2010))
        self.assertEqual(request.status, RequestStatus.COMPLETED.value)
        self.assertEqual(request.found_indexer, "Reverse Index")
        self.assertIsNotNone(request.expires_at)

        record = self.db.query(OrganizedFile).one()
        self.assertEqual(record.organized_path, str(movie))
        self.assertTrue(record.is_reverse_indexed)
        self.assertEqual(record.request_id, request.id)
        self.assertTrue(movie.exists())
        self.assertEqual(self.queue_items(), [])

    async def test_rescan_of_imported_folder_is_not_new(self) -> None:
        self.make_file("movies/Inception (2010)/Inception.mkv")
        await self.service.trigger_reverse_indexing()

        response = await self.service.trigger_reverse_indexing()

        self.assertEqual(response.results.total_folders, 1)
        self.assertEqual(response.results.new_folders, 0)
        self.assertEqual(self.db.query(ContentRequest).count(), 1)
        self.assertEqual(self.db.query(OrganizedFile).count(), 1)

    async def test_tv_show_is_queued_with_season(self) -> None:
        self.make_file("tv-shows/Breaking Bad/Season 1/Breaking Bad - S01E01.mkv")
        self.make_file("tv-shows/Breaking Bad/Season 2/Breaking Bad - S02E01.mkv")

        response = await self.service.trigger_reverse_indexing()

        self.assertEqual(response.results.queued_folders, 1)
        item = self.db.query(OrganizeQueueItem).one()
        self.assertEqual(item.content_type, ContentType.TV_SHOW.value)
        self.assertEqual(item.detected_title, "Breaking Bad")
        self.assertEqual(item.detected_season, 1)
        self.assertEqual(item.status, OrganizeQueueStatus.PENDING.value)
        self.assertEqual(self.db.query(ContentRequest).count(), 0)

    async def test_rescan_does_not_duplicate_queue_items(self) -> None:
        self.make_file("games/Super Mario 64 (N64)/mario.z64")

        await self.service.trigger_reverse_indexing()
        response = await self.service.trigger_reverse_indexing()

        self.assertEqual(response.results.queued_folders, 0)
        self.assertEqual(len(self.queue_items()), 1)
        self.assertEqual(self.queue_items()[0].detected_platform, "N64")

    async def test_completed_item_is_requeued_and_skipped_item_stays(self) -> None:
        self.make_file("games/Doom (PC)/doom.iso")
        self.make_file("games/Quake (PC)/quake.iso")
        await self.service.trigger_reverse_indexing()

        items = {item.detected_title: item for item in self.queue_items()}
        items["Doom"].status = OrganizeQueueStatus.COMPLETED.value
        items["Doom"].detected_title = "stale"
        items["Quake"].status = OrganizeQueueStatus.SKIPPED.value
        self.db.commit()

        response = await self.service.trigger_reverse_indexing()

        self.assertEqual(response.results.queued_folders, 1)
        self.db.expire_all()
        statuses = {item.detected_title: item.status for item in self.queue_items()}
        self.assertEqual(statuses["Doom"], OrganizeQueueStatus.PENDING.value)
        self.assertEqual(statuses["Quake"], OrganizeQueueStatus.SKIPPED.value)

    async def test_open_request_is_completed(self) -> None:
        self.db.add(
            ContentRequest(
                content_type=ContentType.MOVIE.value,
                title="Inception",
                year=2010,
                status=RequestStatus.DOWNLOADING.value,
            )
        )
        self.db.commit()
        self.make_file("movies/Inception (2010)/Inception.mkv")

        response = await self.service.trigger_reverse_indexing()

        self.assertEqual(response.results.new_folders, 1)
        self.assertEqual(response.results.auto_imported, 0)
        request = self.db.query(ContentRequest).one()
        self.assertEqual(request.status, RequestStatus.COMPLETED.value)
        self.assertIsNotNone(request.completed_at)
        self.assertEqual(self.db.query(OrganizedFile).one().request_id, request.id)

    async def test_catalog_details_enrich_the_request(self) -> None:
        self.catalog.best_match = AsyncMock(
            return_value={"title": "The Matrix", "year": 1999, "tmdb_id": 603, "genre": ["Action", "Sci-Fi"]}
        )
        self.make_file("movies/the matrix/matrix.mkv")

        response = await self.service.trigger_reverse_indexing()

        self.assertEqual(response.results.auto_imported, 1)
        request = self.db.query(ContentRequest).one()
        self.assertEqual((request.title, request.year, request.tmdb_id), ("The Matrix", 1999, 603))
        self.assertEqual(request.genre, "Action, Sci-Fi")

    async def test_catalog_failure_keeps_detected_metadata(self) -> None:
        self.catalog.best_match = AsyncMock(side_effect=RuntimeError("catalog down"))
        self.make_file("movies/Heat (1995)/heat.mkv")

        response = await self.service.trigger_reverse_indexing()

        self.assertTrue(response.success)
        self.assertEqual(response.results.auto_imported, 1)
        self.assertEqual(self.db.query(ContentRequest).one().title, "Heat")

    async def test_folders_without_media_are_ignored(self) -> None:
        self.make_file("movies/Notes/readme.nfo")
        self.make_file("tv-shows/Empty Show/Extras/info.txt")

        response = await self.service.trigger_reverse_indexing()

        self.assertEqual(response.results.total_folders, 0)

    async def test_missing_library_directories(self) -> None:
        self.service.rules.update_settings({"library_path": str(self.library / "absent")})
        response = await self.service.trigger_reverse_indexing()
        self.assertTrue(response.success)
        self.assertEqual(response.results.total_folders, 0)


class ScanGuardTestCase(ReverseIndexingTestCase):
    async def test_concurrent_trigger_is_rejected(self) -> None:
        self.assertTrue(self.guard.try_begin_scan())
        try:
            self.assertTrue(self.service.get_status().is_running)
            response = await self.service.trigger_reverse_indexing()
            self.assertFalse(response.success)
            self.assertEqual(response.message, "Reverse indexing is already running")
            self.assertIsNone(await self.service.run_reverse_indexing())
        finally:
            self.guard.end_scan()

        self.assertFalse(self.service.get_status().is_running)

    async def test_guard_is_released_after_failure(self) -> None:
        with patch.object(self.service, "scan_library_directories", side_effect=RuntimeError("disk gone")):
            response = await self.service.trigger_reverse_indexing()

        self.assertFalse(response.success)
        self.assertEqual(response.message, "Reverse indexing failed: disk gone")
        self.assertFalse(self.guard.is_running)

    async def test_scheduled_scan_honours_disable_flag(self) -> None:
        self.make_file("movies/Inception (2010)/Inception.mkv")
        self.service.rules.update_settings({"enable_reverse_indexing": False})

        self.assertIsNone(await self.service.run_reverse_indexing())
        self.assertEqual(self.db.query(ContentRequest).count(), 0)

        manual = await self.service.trigger_reverse_indexing()
        self.assertEqual(manual.results.auto_imported, 1)


class QueueTestCase(ReverseIndexingTestCase):
    async def queue_folder(self, *files: str) -> OrganizeQueueItem:
        for name in files:
            self.make_file(name)
        await self.service.trigger_reverse_indexing()
        return self.db.query(OrganizeQueueItem).order_by(OrganizeQueueItem.created_at.desc()).first()

    async def test_process_movie_with_user_selection(self) -> None:
        item = await self.queue_folder("movies/random stuff/file.mkv")
        self.assertEqual(item.detected_title, "random stuff")

        result = await self.service.process_organize_queue_item(
            item.id, QueueItemSelections(selected_title="Heat", selected_year=1995)
        )

        self.assertTrue(result.success)
        self.assertEqual(result.message, "Item processed successfully")
        target = self.library / "movies" / "Heat (1995)" / "Heat (1995).mkv"
        self.assertTrue(target.exists())
        self.assertFalse((self.library / "movies" / "random stuff").exists())

        self.db.refresh(item)
        self.assertEqual(item.status, OrganizeQueueStatus.COMPLETED.value)
        self.assertEqual(item.selected_title, "Heat")
        self.assertIsNotNone(item.processed_at)

        request = self.db.query(ContentRequest).one()
        self.assertEqual(request.status, RequestStatus.COMPLETED.value)
        record = self.db.query(OrganizedFile).one()
        self.assertEqual((record.organized_path, record.request_id), (str(target), request.id))

    async def test_selected_catalog_entry_fills_ids(self) -> None:
        self.catalog.get_details = AsyncMock(
            return_value=ExternalApiResponse(
                success=True,
                data={"title": "Heat", "year": 1995, "tmdb_id": 949, "imdb_id": "tt0113277", "genre": ["Crime"]},
            )
        )
        item = await self.queue_folder("movies/heat rip/heat.mkv")

        await self.service.process_organize_queue_item(
            item.id, QueueItemSelections(selected_tmdb_id="949", selected_title="Heat")
        )

        self.catalog.get_details.assert_awaited_once_with(ContentType.MOVIE, "949")
        request = self.db.query(ContentRequest).one()
        self.assertEqual((request.title, request.year), ("Heat", 1995))
        self.assertEqual((request.tmdb_id, request.imdb_id, request.genre), (949, "tt0113277", "Crime"))

    async def test_process_tv_show_keeps_episode_numbers(self) -> None:
        item = await self.queue_folder(
            "tv-shows/Breaking Bad/Season 1/Breaking Bad - S01E01.mkv",
            "tv-shows/Breaking Bad/Season 2/Breaking Bad - S02E03.mkv",
        )

        result = await self.service.process_organize_queue_item(item.id)

        self.assertTrue(result.success)
        show = self.library / "tv-shows" / "Breaking Bad"
        self.assertTrue((show / "Season 01" / "Breaking Bad - S01E01.mkv").exists())
        self.assertTrue((show / "Season 02" / "Breaking Bad - S02E03.mkv").exists())
        self.assertFalse((show / "Season 1").exists())

        request = self.db.query(ContentRequest).one()
        self.assertEqual(request.status, RequestStatus.PENDING.value)
        self.assertTrue(request.is_ongoing)

        records = self.db.query(OrganizedFile).order_by(OrganizedFile.season).all()
        self.assertEqual([(r.season, r.episode) for r in records], [(1, 1), (2, 3)])
        self.assertTrue(all(not r.is_reverse_indexed for r in records))

    async def test_failed_placement_marks_item_failed(self) -> None:
        item = await self.queue_folder("games/Doom (PC)/doom.iso")
        failure = OrganizationResult(success=False, original_path="doom.iso", error="disk full")

        with patch.object(self.service.files, "organize_file", return_value=failure):
            result = await self.service.process_organize_queue_item(item.id)

        self.assertFalse(result.success)
        self.assertIn("disk full", result.error)
        self.db.refresh(item)
        self.assertEqual(item.status, OrganizeQueueStatus.FAILED.value)
        self.assertIn("disk full", item.error_message)

    async def test_skip_and_delete(self) -> None:
        item = await self.queue_folder("games/Doom (PC)/doom.iso")

        skipped = self.service.skip_organize_queue_item(item.id)
        self.assertEqual(skipped.message, "Item skipped successfully")
        self.db.refresh(item)
        self.assertEqual(item.status, OrganizeQueueStatus.SKIPPED.value)

        deleted = self.service.delete_organize_queue_item(item.id)
        self.assertEqual(deleted.message, "Item deleted successfully")
        self.assertEqual(self.queue_items(), [])
        self.assertTrue((self.library / "games" / "Doom (PC)" / "doom.iso").exists())

    async def test_completed_item_is_final(self) -> None:
        item = await self.queue_folder("movies/random stuff/file.mkv")
        selections = QueueItemSelections(selected_title="Heat", selected_year=1995)
        self.assertTrue((await self.service.process_organize_queue_item(item.id, selections)).success)

        again = await self.service.process_organize_queue_item(item.id, selections)
        self.assertFalse(again.success)
        self.assertEqual(again.message, "Queue item is COMPLETED and cannot be processed")
        self.assertEqual(again.error, "Invalid queue item state")

        skipped = self.service.skip_organize_queue_item(item.id)
        self.assertFalse(skipped.success)
        self.assertEqual(skipped.message, "Queue item is COMPLETED and cannot be skipped")

        self.db.refresh(item)
        self.assertEqual(item.status, OrganizeQueueStatus.COMPLETED.value)
        self.assertEqual(self.db.query(ContentRequest).count(), 1)
        self.assertEqual(self.db.query(OrganizedFile).count(), 1)

    async def test_skipped_item_is_final(self) -> None:
        item = await self.queue_folder("games/Doom (PC)/doom.iso")
        self.assertTrue(self.service.skip_organize_queue_item(item.id).success)

        self.assertFalse(self.service.skip_organize_queue_item(item.id).success)
        processed = await self.service.process_organize_queue_item(item.id)
        self.assertEqual(processed.message, "Queue item is SKIPPED and cannot be processed")

        self.db.refresh(item)
        self.assertEqual(item.status, OrganizeQueueStatus.SKIPPED.value)
        self.assertEqual(self.db.query(ContentRequest).count(), 0)
        self.assertTrue((self.library / "games" / "Doom (PC)" / "doom.iso").exists())

    async def test_item_being_processed_is_not_picked_up_twice(self) -> None:
        item = await self.queue_folder("games/Doom (PC)/doom.iso")
        item.status = OrganizeQueueStatus.PROCESSING.value
        self.db.commit()

        self.assertFalse((await self.service.process_organize_queue_item(item.id)).success)
        self.assertFalse(self.service.skip_organize_queue_item(item.id).success)
        self.db.refresh(item)
        self.assertEqual(item.status, OrganizeQueueStatus.PROCESSING.value)

    async def test_failed_item_can_be_retried(self) -> None:
        item = await self.queue_folder("games/Doom (PC)/doom.iso")
        failure = OrganizationResult(success=False, original_path="doom.iso", error="disk full")
        with patch.object(self.service.files, "organize_file", return_value=failure):
            await self.service.process_organize_queue_item(item.id)

        result = await self.service.process_organize_queue_item(item.id)

        self.assertTrue(result.success)
        self.db.refresh(item)
        self.assertEqual(item.status, OrganizeQueueStatus.COMPLETED.value)

    async def test_sibling_files_with_one_target_are_both_kept(self) -> None:
        self.make_file("movies/heat rip/heat cd1.mkv", b"one")
        self.make_file("movies/heat rip/heat cd2.mkv", b"two")
        item = await self.queue_folder()

        result = await self.service.process_organize_queue_item(
            item.id, QueueItemSelections(selected_title="Heat", selected_year=1995)
        )

        self.assertTrue(result.success)
        folder = self.library / "movies" / "Heat (1995)"
        self.assertEqual((folder / "Heat (1995).mkv").read_bytes(), b"one")
        self.assertEqual((folder / "Heat (1995) - part2.mkv").read_bytes(), b"two")
        paths = sorted(record.organized_path for record in self.db.query(OrganizedFile))
        self.assertEqual(paths, [str(folder / "Heat (1995) - part2.mkv"), str(folder / "Heat (1995).mkv")])

    async def test_unknown_item(self) -> None:
        for result in (
            await self.service.process_organize_queue_item("missing"),
            self.service.skip_organize_queue_item("missing"),
            self.service.delete_organize_queue_item("missing"),
        ):
            self.assertFalse(result.success)
            self.assertEqual(result.message, "Queue item not found")

    async def test_listing_and_stats(self) -> None:
        await self.queue_folder("games/Doom (PC)/doom.iso", "games/Quake (PC)/quake.iso", "games/Myst (PC)/myst.iso")
        items, total = self.service.get_organize_queue()
        self.assertEqual(total, 3)

        self.service.skip_organize_queue_item(items[0].id)

        items, total = self.service.get_organize_queue()
        self.assertEqual(total, 2)
        page, _ = self.service.get_organize_queue(limit=1, offset=1)
        self.assertEqual(len(page), 1)

        skipped, total = self.service.get_organize_queue(status=[OrganizeQueueStatus.SKIPPED])
        self.assertEqual(total, 1)
        self.assertEqual(self.service.get_organize_queue(content_type=ContentType.MOVIE)[1], 0)

        stats = self.service.get_organize_queue_stats()
        self.assertEqual((stats.pending, stats.skipped, stats.total), (2, 1, 2))


if __name__ == "__main__":
    unittest.main()
