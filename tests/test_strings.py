"""Tests for strings.py and validation.py - names and note bodies."""

import os
from datetime import datetime, timezone

import frontmatter
import pytest
import yaml

from opennotes.exceptions import InvalidConfigError, InvalidNoteNameError
from opennotes.strings import dedent, generate_note_content, object_to_frontmatter, slugify
from opennotes.validation import (
    resolve_note_path,
    validate_note_name,
    validate_notebook_name,
    validate_path,
)


class TestSlugify:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hello World", "hello-world"),
            ("  Spaced   Out  ", "spaced-out"),
            ("Ünïcode & Symbols!", "ncode-symbols"),
            ("multi\nline", "multi-line"),
            ("already-slugged", "already-slugged"),
            ("", ""),
        ],
    )
    def test_slugify(self, text, expected):
        assert slugify(text) == expected


class TestDedent:
    def test_removes_common_indent(self):
        assert dedent("    a\n      b\n    c") == "a\n  b\nc"

    def test_blank_lines_ignored(self):
        assert dedent("  a\n\n  b") == "a\n\nb"

    def test_no_indent_unchanged(self):
        assert dedent("a\n  b") == "a\n  b"

    def test_tabs_count_as_indent(self):
        assert dedent("\ta\n\tb") == "a\nb"


class TestFrontmatter:
    def test_scalars_and_lists(self):
        text = object_to_frontmatter({"title": "T", "tags": ["a", "b"]})
        assert yaml.safe_load(text) == {"title": "T", "tags": ["a", "b"]}
        assert text.startswith("title: T\n")

    def test_keeps_key_order(self):
        text = object_to_frontmatter({"zeta": 1, "alpha": 2})
        assert text == "zeta: 1\nalpha: 2"

    @pytest.mark.parametrize(
        "value",
        ["Re: plan #1", "- leading dash", "'quoted' \"both\"", "yes", "123", "key: value"],
    )
    def test_special_values_load_back(self, value):
        assert yaml.safe_load(object_to_frontmatter({"title": value})) == {"title": value}

    def test_empty_mapping(self):
        assert object_to_frontmatter({}) == ""


class TestGenerateNoteContent:
    NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_title_frontmatter_and_heading(self):
        post = frontmatter.loads(generate_note_content("My Note", now=self.NOW))
        assert post.metadata == {"title": "My Note", "created": "2024-05-01T12:00:00+00:00"}
        assert post.content == "# My Note"

    def test_untitled(self):
        content = generate_note_content(now=self.NOW)
        assert content.startswith("---\n")
        assert content.endswith("---\n\n")
        assert frontmatter.loads(content).metadata == {"created": "2024-05-01T12:00:00+00:00"}

    def test_title_with_yaml_syntax_round_trips(self):
        post = frontmatter.loads(generate_note_content("Re: plan #1", now=self.NOW))
        assert post.metadata["title"] == "Re: plan #1"
        assert post.content == "# Re: plan #1"

    def test_template_substitution(self):
        templates = {"daily": "# {{title}}\n\n## Tasks\n"}
        assert generate_note_content("Monday", "daily", templates) == "# Monday\n\n## Tasks\n"

    def test_template_without_title(self):
        templates = {"daily": "# {{title}}\n"}
        assert generate_note_content("", "daily", templates) == "# {{title}}\n"

    def test_unknown_template_falls_back(self):
        content = generate_note_content("X", "missing", {}, now=self.NOW)
        assert frontmatter.loads(content).metadata["title"] == "X"


class TestNotebookNameValidation:
    @pytest.mark.parametrize("name", ["Notes", "My Notes", "work_notes-2", "x" * 100])
    def test_valid(self, name):
        validate_notebook_name(name)

    @pytest.mark.parametrize("name", ["", "x" * 101, "a/b", "dots.here", "emoji 🙂"])
    def test_invalid(self, name):
        with pytest.raises(InvalidConfigError) as exc_info:
            validate_notebook_name(name)
        assert exc_info.value.key == "name"


class TestPathValidation:
    def test_empty_allowed(self):
        validate_path("")

    def test_normal_path(self):
        validate_path("/home/me/notes")

    def test_control_characters(self):
        with pytest.raises(InvalidConfigError):
            validate_path("/home/\x07bell")


class TestNoteNameValidation:
    @pytest.mark.parametrize("name", ["note", "note.md", "sub/note.md", "x" * 255 + ".md"])
    def test_valid(self, name):
        validate_note_name(name)

    def test_empty(self):
        with pytest.raises(InvalidNoteNameError, match="Invalid note name"):
            validate_note_name("")

    def test_too_long(self):
        with pytest.raises(InvalidNoteNameError):
            validate_note_name("x" * 256)

    def test_traversal(self):
        with pytest.raises(InvalidNoteNameError) as exc_info:
            validate_note_name("../escape.md")
        assert "traversal" in exc_info.value.reason

    @pytest.mark.parametrize("name", ["/etc/passwd.md", "/tmp/x", "~/notes.md"])
    def test_absolute_rejected(self, name):
        with pytest.raises(InvalidNoteNameError) as exc_info:
            validate_note_name(name)
        assert "relative" in exc_info.value.reason


class TestResolveNotePath:
    def test_inside_root(self, tmp_path):
        assert resolve_note_path(str(tmp_path), "sub/a.md") == str(tmp_path / "sub" / "a.md")

    def test_absolute_name_rejected(self, tmp_path):
        with pytest.raises(InvalidNoteNameError):
            resolve_note_path(str(tmp_path / "root"), str(tmp_path / "victim.md"))

    def test_symlink_escape_rejected(self, tmp_path):
        root = tmp_path / "root"
        outside = tmp_path / "outside"
        root.mkdir()
        outside.mkdir()
        os.symlink(outside, root / "link")

        with pytest.raises(InvalidNoteNameError, match="Invalid note name"):
            resolve_note_path(str(root), "link/x.md")
