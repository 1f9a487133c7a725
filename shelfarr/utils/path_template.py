"""
Shelfarr v1.0.0 - Path Template Engine
Render folder and file names from naming templates
"""

import re
from typing import Dict, Any


class PathTemplateEngine:
    """
    Engine for processing naming templates with variables

    Templates example: "{title} - S{seasonNumber}E{episodeNumber} - {quality}"
    Each template renders ONE path segment (a folder name or a file name).
    """

    # Pattern to match template variables: {var} or {var:format}
    VARIABLE_PATTERN = re.compile(r"\{(\w+)(?::([^}]+))?\}")

    # Characters not allowed in a path segment
    INVALID_CHARS = '<>:"/\\|?*'

    EMPTY_BRACKETS_PATTERN = re.compile(r"\(\s*\)|\[\s*\]")
    SEPARATOR_PATTERN = re.compile(r"\s+-(?=\s|$)")

    @classmethod
    def render(cls, template: str, variables: Dict[str, Any]) -> str:
        """
        Render a naming template with given variables

        Args:
            template: Template string (e.g., "{title} ({year})")
            variables: Dictionary of variable values

        Returns:
            Rendered, sanitized segment

        Example:
            >>> render("{title} ({year}) - {quality}", {"title": "Inception", "year": 2010})
            'Inception (2010)'
        """
        if not template:
            return ""

        def replace_var(match):
            value = variables.get(match.group(1))
            if value is None or value == "":
                return ""

            spec = match.group(2)
            if not spec:
                return str(value)
            try:
                # Integer specs (":02d") need an int
                return format(int(value) if spec.endswith("d") else value, spec)
            except (ValueError, TypeError):
                return str(value)

        # Replace all variables
        rendered = cls.VARIABLE_PATTERN.sub(replace_var, template)

        # Drop what empty placeholders leave behind: "()" and " - - "
        rendered = cls.EMPTY_BRACKETS_PATTERN.sub("", rendered)
        rendered = re.sub(r"\s+", " ", rendered).strip()
        parts = [p.strip() for p in cls.SEPARATOR_PATTERN.split(rendered)]
        rendered = " - ".join(p for p in parts if p)

        return cls.sanitize_segment(rendered)

    @classmethod
    def sanitize_segment(cls, segment: str) -> str:
        """
        Sanitize a folder or file name by removing invalid characters

        Args:
            segment: Folder or file name

        Returns:
            Sanitized name
        """
        for char in cls.INVALID_CHARS:
            segment = segment.replace(char, "")

        # Replace multiple spaces with single space
        segment = re.sub(r"\s+", " ", segment)

        return segment.strip()

    @classmethod
    def get_available_variables(cls) -> Dict[str, str]:
        """
        Get list of available template variables and their descriptions

        Returns:
            Dictionary of variable names and descriptions
        """
        return {
            "title": "Title of the movie, show or game",
            "year": "Release year",
            "season": "Season number",
            "seasonNumber": "Season number, zero-padded to two digits",
            "episode": "Episode number",
            "episodeNumber": "Episode number, zero-padded to two digits",
            "platform": "Game platform",
            "quality": "Quality (1080p, 2160p, etc.)",
            "format": "Video format or codec (x265, HEVC, etc.)",
            "edition": "Edition (Director's Cut, Extended, etc.)",
            "filename": "Original file name without extension",
        }

    @classmethod
    def validate_template(cls, template: str) -> tuple[bool, str]:
        """
        Validate a template string

        Args:
            template: Template string

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not template:
            return True, ""

        # Check for unmatched braces
        if template.count("{") != template.count("}"):
            return False, "Unmatched braces in template"

        # Check if variables are valid
        available_vars = set(cls.get_available_variables().keys())

        for var_name, _ in cls.VARIABLE_PATTERN.findall(template):
            if var_name not in available_vars:
                return (
                    False,
                    f"Unknown variable: {var_name}. Available: {', '.join(sorted(available_vars))}",
                )

        return True, ""
