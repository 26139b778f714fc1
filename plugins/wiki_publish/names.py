import os
import posixpath
import re

# Characters collapsed to "-" when standardizing a file name
STANDARDIZE_PATTERN = re.compile(r" |_|(%20)")
LIST_BRACKETS_PATTERN = re.compile(r"^[\[(]|[\])]$")


def strip_extension(name: str) -> str:
    """Remove the final extension only, so `main.test.md` becomes `main.test`."""
    root, _ = posixpath.splitext(name)
    return root


def base_name(name: str) -> str:
    """Return a file or path's base name without its extension."""
    return strip_extension(posixpath.basename(name))


def header_from_file_name(name: str) -> str:
    """
    Format a file name as an easy to read header by replacing underscores and
    hyphens with spaces, capitalizing the first letter, and removing the extension.
    """
    name = re.sub(r"[-_]", " ", name)
    name = base_name(name)
    return name[:1].upper() + name[1:].lower()


def standardize_file_name(name: str, source_dir: str | None = None) -> str:
    """
    Replace spaces, underscores and `%20` with hyphens and lowercase the result.

    When `source_dir` is given the name is joined to it and every path separator
    becomes a pipe, e.g. `path|to|file-name.md`, so files sharing a base name in
    different folders stay distinct in the flat wiki namespace.
    """
    if source_dir:
        name = posixpath.normpath(posixpath.join(source_dir.replace(os.sep, "/"), name))
        name = name.replace("/", "|")
    name = STANDARDIZE_PATTERN.sub("-", name)
    return name.lower()


def wiki_url(file_name: str, repo: str) -> str:
    """Rooted wiki URL for a page. The file name is standardized and its extension dropped."""
    slug = base_name(standardize_file_name(file_name))
    return f"/{repo.strip('/')}/wiki/{slug}"


def blob_url(path: str, repo: str, branch: str) -> str:
    """Rooted URL of a file in the repository's file browser, extension preserved."""
    path = posixpath.normpath(path).lstrip("/")
    return f"/{repo.strip('/')}/blob/{branch}/{path}"


def format_as_list(value) -> list[str]:
    """
    Convert a comma separated string, optionally enclosed in brackets or
    parentheses, to a list of strings. Lists are trimmed and returned as-is.
    """
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value]
        return [v for v in items if v]
    s = LIST_BRACKETS_PATTERN.sub("", str(value).strip())
    return [item.strip() for item in s.split(",") if item.strip()]


def normalize_extensions(values) -> list[str]:
    """Lowercase configured extensions and make sure each one starts with a dot."""
    extensions = []
    for ext in format_as_list(values):
        if not ext.startswith("."):
            ext = f".{ext}"
        extensions.append(ext.lower())
    return extensions
