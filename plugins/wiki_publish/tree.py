import os
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence


@dataclass(frozen=True)
class DirectoryNode:
    """
    One scanned directory: the matching files directly inside it, its
    subdirectories, and the number of matching files in the whole subtree.
    """

    path: str
    files: tuple[str, ...] = ()
    subdirectories: tuple["DirectoryNode", ...] = ()
    total_file_count: int = field(init=False)

    def __post_init__(self):
        total = len(self.files) + sum(d.total_file_count for d in self.subdirectories)
        object.__setattr__(self, "total_file_count", total)

    @property
    def name(self) -> str:
        return posixpath.basename(self.path.rstrip("/"))


def parse_directory_contents(
    directory: str, extensions: Sequence[str], root: Path | None = None
) -> DirectoryNode:
    """
    Scan `directory` (relative to `root`, default the working directory) and
    return its DirectoryNode. Only files whose extension is in `extensions` are
    kept; entries are visited in name order so runs are reproducible.
    """
    directory = posixpath.normpath(directory.replace(os.sep, "/"))
    base = Path(root) if root is not None else Path(".")
    files: list[str] = []
    subdirectories: list[DirectoryNode] = []

    with os.scandir(base / directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir():
            subdirectories.append(
                parse_directory_contents(posixpath.join(directory, entry.name), extensions, root)
            )
        elif entry.is_file() and posixpath.splitext(entry.name)[1] in extensions:
            files.append(entry.name)

    return DirectoryNode(directory, tuple(files), tuple(subdirectories))


def scan_folders(
    folders: Sequence[str], extensions: Sequence[str], root: Path | None = None
) -> DirectoryNode:
    """
    Scan every folder to publish. A single folder is returned as is; several
    folders are gathered under a synthetic root with an empty path.
    """
    nodes = [parse_directory_contents(folder, extensions, root) for folder in folders]
    if len(nodes) == 1:
        return nodes[0]
    return DirectoryNode("", (), tuple(nodes))
