import unittest

from shelfarr.models import ContentType
from shelfarr.schemas.organization import FileMetadata
from shelfarr.services.auto_import import (
    is_suitable_for_auto_import,
    is_title_suitable_for_auto_import,
    is_well_formatted_movie_title,
)


class TitleGateTestCase(unittest.TestCase):
    def test_clean_titles_pass(self) -> None:
        for title in ("Inception", "The Dark Knight", "Amélie"):
            self.assertTrue(is_title_suitable_for_auto_import(title), title)

    def test_noise_is_rejected(self) -> None:
        for title in ("", None, "ab", "720p", "Sample", "Movie x264", "Inception HEVC", "Unknown",
                      "Disc 1", "2049", "movie.mkv"):
            self.assertFalse(is_title_suitable_for_auto_import(title), title)

    def test_movie_title_checks(self) -> None:
        self.assertTrue(is_well_formatted_movie_title("Heat"))
        self.assertFalse(is_well_formatted_movie_title("Film"))
        self.assertFalse(is_well_formatted_movie_title("Heat Extended"))
        self.assertFalse(is_well_formatted_movie_title("Heat 1995 2020"))


class ContentTypeGateTestCase(unittest.TestCase):
    def test_movie_with_year(self) -> None:
        self.assertTrue(is_suitable_for_auto_import(FileMetadata(title="Inception", year=2010), ContentType.MOVIE))

    def test_movie_requires_plausible_year(self) -> None:
        self.assertFalse(is_suitable_for_auto_import(FileMetadata(title="Inception"), ContentType.MOVIE))
        self.assertFalse(is_suitable_for_auto_import(FileMetadata(title="Inception", year=1850), ContentType.MOVIE))
        self.assertFalse(is_suitable_for_auto_import(FileMetadata(title="Inception", year=3000), ContentType.MOVIE))

    def test_tv_and_games_need_confirmation(self) -> None:
        metadata = FileMetadata(title="Breaking Bad", year=2008, platform="N64")
        self.assertFalse(is_suitable_for_auto_import(metadata, ContentType.TV_SHOW))
        self.assertFalse(is_suitable_for_auto_import(metadata, ContentType.GAME))


if __name__ == "__main__":
    unittest.main()
