import unittest

from shelfarr.utils.path_template import PathTemplateEngine


class RenderTestCase(unittest.TestCase):
    def test_renders_variables(self) -> None:
        rendered = PathTemplateEngine.render("{title} ({year})", {"title": "Inception", "year": 2010})
        self.assertEqual(rendered, "Inception (2010)")

    def test_empty_placeholders_leave_no_dangling_separators(self) -> None:
        rendered = PathTemplateEngine.render(
            "{title} ({year}) - {edition} - {quality} - {format}",
            {"title": "Inception", "year": 2010, "quality": "1080p"},
        )
        self.assertEqual(rendered, "Inception (2010) - 1080p")

    def test_empty_brackets_are_removed(self) -> None:
        rendered = PathTemplateEngine.render("{title} ({year})", {"title": "Breaking Bad"})
        self.assertEqual(rendered, "Breaking Bad")

    def test_hyphenated_titles_are_kept(self) -> None:
        rendered = PathTemplateEngine.render("{title} - {quality}", {"title": "Spider-Man"})
        self.assertEqual(rendered, "Spider-Man")

    def test_invalid_characters_are_stripped(self) -> None:
        rendered = PathTemplateEngine.render("{title}", {"title": 'What? Who: "Me" <3 / \\ | *'})
        for char in '<>:"/\\|?*':
            self.assertNotIn(char, rendered)
        self.assertEqual(rendered, "What Who Me 3")

    def test_format_spec_pads_integers(self) -> None:
        self.assertEqual(PathTemplateEngine.render("S{season:02d}", {"season": 3}), "S03")

    def test_whitespace_collapses(self) -> None:
        self.assertEqual(PathTemplateEngine.render("{title}   {year}", {"title": " A  B ", "year": 1999}), "A B 1999")


class ValidateTemplateTestCase(unittest.TestCase):
    def test_known_placeholders_are_valid(self) -> None:
        valid, error = PathTemplateEngine.validate_template(
            "{title} - S{seasonNumber}E{episodeNumber} - {filename}"
        )
        self.assertTrue(valid)
        self.assertEqual(error, "")

    def test_unknown_placeholder_is_rejected(self) -> None:
        valid, error = PathTemplateEngine.validate_template("{title} {resolution}")
        self.assertFalse(valid)
        self.assertIn("resolution", error)

    def test_unbalanced_braces_are_rejected(self) -> None:
        valid, _ = PathTemplateEngine.validate_template("{title ({year})")
        self.assertFalse(valid)


if __name__ == "__main__":
    unittest.main()
