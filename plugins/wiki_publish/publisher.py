import logging
import posixpath
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from plugins.wiki_publish.banner import create_edit_warning
from plugins.wiki_publish.links import format_links_in_file
from plugins.wiki_publish.names import header_from_file_name, standardize_file_name
from plugins.wiki_publish.sidebar import SidebarBuilder
from plugins.wiki_publish.tree import DirectoryNode

logger = logging.getLogger(f"mkdocs.plugins.{__name__}")

SIDEBAR_FILE = "_Sidebar.md"
FOOTER_FILE = "_Footer.md"
# Hand-written wiki files copied through without rewriting
RESERVED_FILES = (SIDEBAR_FILE, FOOTER_FILE)

SECTION_POLICIES = ("non_empty", "always", "never")


@dataclass(frozen=True)
class PublishOptions:
    """Settings shared by every step of a publishing run."""

    repo: str
    branch: str = "main"
    extensions: Tuple[str, ...] = (".md",)
    prefix_files_with_dir: bool = False
    edit_warning: bool = False
    generated_files_dir: str = "generated"
    sidebar_sections: str = "non_empty"
    indent_sidebar: bool = False


class WikiTreeWalker:
    """
    Walk a DirectoryNode depth first, writing every page with its links
    rewritten into `dest_root` and recording one sidebar section per directory.
    """

    def __init__(
        self,
        options: PublishOptions,
        source_root: Path,
        dest_root: Path,
        sidebar: Optional[SidebarBuilder] = None,
    ):
        self.options = options
        self.source_root = Path(source_root)
        self.dest_root = Path(dest_root)
        self.sidebar = sidebar
        self.written: List[Path] = []

    def _opens_section(self, node: DirectoryNode, is_root: bool) -> bool:
        if self.sidebar is None or is_root or not node.path:
            return False
        policy = self.options.sidebar_sections
        if policy == "always":
            return True
        if policy == "never":
            return False
        return node.total_file_count > 0

    def walk(self, node: DirectoryNode, is_root: bool = True) -> None:
        opened = self._opens_section(node, is_root)
        if opened:
            self.sidebar.open_section(node.name, True)

        for file_name in node.files:
            if file_name in RESERVED_FILES:
                self.copy_reserved_file(node, file_name)
            else:
                self.publish_file(node, file_name)

        for subdirectory in node.subdirectories:
            self.walk(subdirectory, is_root=False)

        # the sidebar may have been dropped in favour of an existing one
        if opened and self.sidebar is not None:
            self.sidebar.close_section()

    def copy_reserved_file(self, node: DirectoryNode, file_name: str) -> None:
        source = self.source_root / node.path / file_name
        if file_name == SIDEBAR_FILE and self.sidebar is not None:
            logger.warning(
                f"[wiki_publish] found existing {SIDEBAR_FILE} in {node.path or '.'}, "
                "using it instead of generating one"
            )
            self.sidebar = None
        else:
            logger.info(f"[wiki_publish] found existing {file_name} in {node.path or '.'}")
        dest = self.dest_root / file_name
        shutil.copyfile(source, dest)
        self.written.append(dest)

    def publish_file(self, node: DirectoryNode, file_name: str) -> Path:
        opts = self.options
        source_path = posixpath.join(node.path, file_name)
        text = (self.source_root / source_path).read_text(encoding="utf-8")

        contents = format_links_in_file(
            text,
            opts.repo,
            opts.branch,
            node.path,
            opts.extensions,
            opts.prefix_files_with_dir,
        )
        if opts.edit_warning:
            contents = create_edit_warning(source_path) + "\n" + contents

        formatted_name = standardize_file_name(
            file_name, node.path if opts.prefix_files_with_dir else None
        )
        dest = self.dest_root / opts.generated_files_dir / formatted_name
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(contents, encoding="utf-8")
        self.written.append(dest)
        logger.debug(f"[wiki_publish] {source_path} -> {dest}")

        if self.sidebar is not None:
            self.sidebar.add_link(header_from_file_name(file_name), formatted_name)
        return dest


def publish_tree(
    tree: DirectoryNode,
    source_root: Path,
    dest_root: Path,
    options: PublishOptions,
    sidebar: bool = True,
) -> List[Path]:
    """
    Write every page of `tree` into `dest_root` and, unless an existing
    `_Sidebar.md` was found or `sidebar` is off, a generated sidebar.
    Returns the written paths.
    """
    builder = None
    if sidebar:
        builder = SidebarBuilder(
            options.repo,
            edit_warning=options.edit_warning,
            indent=SidebarBuilder.INDENT if options.indent_sidebar else "",
        )

    dest_root = Path(dest_root)
    (dest_root / options.generated_files_dir).mkdir(parents=True, exist_ok=True)
    walker = WikiTreeWalker(options, source_root, dest_root, builder)
    walker.walk(tree)

    if walker.sidebar is not None:
        sidebar_path = dest_root / SIDEBAR_FILE
        sidebar_path.write_text(walker.sidebar.dumps(), encoding="utf-8")
        walker.written.append(sidebar_path)

    logger.info(f"[wiki_publish] wrote {len(walker.written)} wiki files to {dest_root}")
    return walker.written
