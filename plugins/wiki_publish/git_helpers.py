import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from mkdocs.exceptions import ConfigurationError, PluginError

logger = logging.getLogger(f"mkdocs.plugins.{__name__}")

# Match a valid email address
EMAIL_REGEX = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")


class ExternalToolError(PluginError):
    """A git or file system command exited with a non-zero status."""


def _run(args: Sequence[str], cwd: Path | None = None, redact: str | None = None) -> int:
    shown = " ".join(args)
    if redact:
        shown = shown.replace(redact, "***")
    logger.debug(f"[wiki_publish] $ {shown}")
    proc = subprocess.run(list(args), cwd=cwd, check=False)
    return proc.returncode


def clear_directory(directory: Path) -> None:
    """Remove everything in a cloned wiki except its `.git` folder."""
    for entry in Path(directory).iterdir():
        if entry.name == ".git":
            continue
        if entry.is_dir():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def clone_wiki(
    repo: str,
    clone_to: Path,
    clear: bool = False,
    token: str | None = None,
    host: str = "github.com",
) -> None:
    """
    Clone the wiki of `repo` (`owner/repo`) into `clone_to`, optionally removing
    every existing page.

    Raises:
        ExternalToolError: if git exits with a non-zero status.
    """
    if token:
        url = f"https://{token}@{host}/{repo}.wiki.git"
    else:
        url = f"https://{host}/{repo}.wiki.git"
    errors = _run(["git", "clone", "--depth=1", url, str(clone_to)], redact=token)
    if errors == 0 and clear:
        clear_directory(clone_to)
        logger.info(f"[wiki_publish] cleared existing wiki content in {clone_to}")
    if errors > 0:
        raise ExternalToolError(f"Failed to clone wiki [{errors}]")


def configure_git(
    email: str = "action@github.com", name: str = "actions-user", cwd: Path | None = None
) -> None:
    """
    Set user.email and user.name for the repository in `cwd`.

    Raises:
        ConfigurationError: if `email` is not a valid address. Nothing is run.
        ExternalToolError: if git exits with a non-zero status.
    """
    if not EMAIL_REGEX.fullmatch(email):
        raise ConfigurationError("Invalid email syntax")
    errors = 0
    errors += _run(["git", "config", "user.email", email], cwd=cwd)
    errors += _run(["git", "config", "user.name", name], cwd=cwd)
    if errors > 0:
        raise ExternalToolError(f"Failed to initialize git [{errors}]")


def has_changes(cwd: Path | None = None) -> bool:
    """Return True when the working tree in `cwd` has anything to commit."""
    proc = subprocess.run(
        ["git", "status", "--porcelain"],
        cwd=cwd,
        stdout=subprocess.PIPE,
        text=True,
        check=False,
    )
    if proc.returncode != 0:
        raise ExternalToolError(f"Failed to read git status [{proc.returncode}]")
    return bool(proc.stdout.strip())


def commit_and_push(files: Sequence[str], message: str, cwd: Path | None = None) -> None:
    """
    Add, commit and push `files` with the given message.

    Raises:
        ExternalToolError: if any git command exits with a non-zero status.
    """
    errors = 0
    errors += _run(["git", "add", *files], cwd=cwd)
    errors += _run(["git", "commit", "-m", message], cwd=cwd)
    errors += _run(["git", "push"], cwd=cwd)
    if errors > 0:
        raise ExternalToolError(f"Failed to commit and push [{errors}]")
