import pytest

from plugins.wiki_publish.banner import center_text, create_edit_warning
from plugins.wiki_publish.names import (
    blob_url,
    format_as_list,
    header_from_file_name,
    normalize_extensions,
    standardize_file_name,
    strip_extension,
    wiki_url,
)


class TestStripExtension:
    def test_removes_only_last_extension(self):
        """Test: Only the final extension is removed."""
        assert strip_extension("main.test.md") == "main.test"
        assert strip_extension("file.md") == "file"

    def test_no_extension(self):
        """Test: Names without an extension are unchanged."""
        assert strip_extension("README") == "README"
        assert strip_extension("") == ""

    @pytest.mark.parametrize("name", ["file.md", "main.test.ts", "plain", "a.b.c"])
    def test_re_adding_an_extension_round_trips(self, name):
        """Test: Adding then stripping an extension gives the name back."""
        assert strip_extension(strip_extension(name) + ".txt") == strip_extension(name)


class TestHeaderFromFileName:
    def test_headers(self):
        """Test: File names become readable headers."""
        assert header_from_file_name("file.md") == "File"
        assert header_from_file_name("file name.md") == "File name"
        assert header_from_file_name("the_full FILE-name.md") == "The full file name"
        assert header_from_file_name("The other file name") == "The other file name"

    def test_empty(self):
        """Test: An empty name gives an empty header."""
        assert header_from_file_name("") == ""


class TestStandardizeFileName:
    def test_basic(self):
        """Test: Spaces, underscores and %20 become hyphens."""
        assert standardize_file_name("file.md") == "file.md"
        assert standardize_file_name("file name.md") == "file-name.md"
        assert standardize_file_name("the_FILE-with The naMe.md") == "the-file-with-the-name.md"
        assert standardize_file_name("url%20encoded.md") == "url-encoded.md"

    def test_with_source_dir(self):
        """Test: The source folder is flattened into the name."""
        assert standardize_file_name("file name.md", "Path/TO/the/") == "path|to|the|file-name.md"
        assert standardize_file_name("file.md", "docs/./sub") == "docs|sub|file.md"

    @pytest.mark.parametrize(
        "name", ["File Name.md", "a_b%20c.MD", "already-standard.md", "Mixed_Case Name"]
    )
    def test_idempotent(self, name):
        """Test: Standardizing twice changes nothing."""
        once = standardize_file_name(name)
        assert standardize_file_name(once) == once


class TestUrls:
    def test_wiki_url(self):
        """Test: Wiki URLs use the standardized base name."""
        assert wiki_url("file.md", "owner/repo") == "/owner/repo/wiki/file"
        assert wiki_url("File Name.markdown", "owner/repo/") == "/owner/repo/wiki/file-name"
        assert wiki_url("docs|sub|page.md", "o/r") == "/o/r/wiki/docs|sub|page"

    def test_blob_url(self):
        """Test: Blob URLs keep the repository path."""
        assert blob_url("docs/image.png", "o/r", "main") == "/o/r/blob/main/docs/image.png"
        assert blob_url("/README.md", "o/r", "dev") == "/o/r/blob/dev/README.md"


class TestFormatAsList:
    @pytest.mark.parametrize(
        "value", ["", "      ", ",,, ,", "[]", "[    ]", "[,,, ,]", "()", "(,,, ,)", "[)", "(]"]
    )
    def test_empty(self, value):
        """Test: Empty input gives an empty list."""
        assert format_as_list(value) == []

    def test_without_brackets(self):
        """Test: Comma separated values are split and trimmed."""
        assert format_as_list("this, that , the other ,") == ["this", "that", "the other"]

    def test_with_brackets(self):
        """Test: Enclosing brackets are stripped."""
        assert format_as_list("[ this, that , the other ,]") == ["this", "that", "the other"]
        assert format_as_list("(this,that,the other)") == ["this", "that", "the other"]

    def test_list_passthrough(self):
        """Test: Lists are trimmed and returned."""
        assert format_as_list([" docs ", "", "guides"]) == ["docs", "guides"]

    def test_normalize_extensions(self):
        """Test: Extensions are lowercased and dotted."""
        assert normalize_extensions("[md, .Markdown, MDX]") == [".md", ".markdown", ".mdx"]


class TestEditWarning:
    def test_center_text(self):
        """Test: Odd padding goes on the right."""
        assert center_text("ab", 6) == "  ab  "
        assert center_text("ab", 5) == " ab  "
        assert center_text("abcdef", 3) == "abcdef"
        assert center_text("ab", 4, "-=") == "-ab-"

    def test_box_shape(self):
        """Test: The banner is a bordered comment box."""
        banner = create_edit_warning()
        lines = banner.rstrip("\n").split("\n")
        assert len(lines) == 4
        assert all(line.startswith("<!--") and line.endswith("-->") for line in lines)
        widths = {len(line) for line in lines}
        assert len(widths) == 1
        assert "DO NOT EDIT THIS FILE ON GITHUB" in banner
        assert banner.endswith("\n")

    def test_source_path_line(self):
        """Test: The source path line is added when known."""
        banner = create_edit_warning("docs/guide.md")
        assert "Edit the source in docs/guide.md to change this file" in banner
        assert len(banner.rstrip("\n").split("\n")) == 5
