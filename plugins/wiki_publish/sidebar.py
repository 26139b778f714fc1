"""
Collapsible `_Sidebar.md` outline for a GitHub wiki.

The builder records an ordered list of commands while the docs tree is walked
and renders them in a single pass when dumped.
"""

import html
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from plugins.wiki_publish.banner import create_edit_warning
from plugins.wiki_publish.names import wiki_url


class UnbalancedSectionsError(RuntimeError):
    """Raised when a sidebar is dumped while sections are still open."""


@dataclass(frozen=True)
class Banner:
    text: str


@dataclass(frozen=True)
class OpenSection:
    title: str
    bold: bool = False
    link: Optional[str] = None


@dataclass(frozen=True)
class CloseSection:
    pass


@dataclass(frozen=True)
class AddLink:
    title: str
    target: str


SidebarCommand = Union[Banner, OpenSection, CloseSection, AddLink]


def format_link(title: str, target: str, repo: str) -> str:
    return f'<a href="{wiki_url(target, repo)}">{title}</a>'


def render_sidebar(commands: Sequence[SidebarCommand], repo: str, indent: str = "") -> str:
    """
    Render sidebar commands to text. Every line is prefixed with `indent` once
    per section open at the moment it is emitted.
    """
    lines: List[str] = []
    depth = 0

    def add_line(line: str) -> None:
        lines.append(indent * depth + line)

    for command in commands:
        if isinstance(command, Banner):
            add_line(command.text)
        elif isinstance(command, OpenSection):
            add_line("<details>")
            depth += 1
            title = html.escape(command.title, quote=False)
            if command.bold:
                title = f"<strong>{title}</strong>"
            if command.link:
                title = format_link(title, command.link, repo)
            add_line(f"<summary>{title}</summary>")
            # GFM needs a blank line after the summary for markdown inside details
            add_line("")
        elif isinstance(command, CloseSection):
            if depth == 0:
                raise UnbalancedSectionsError("Closed a section that was never opened.")
            depth -= 1
            add_line("</details>")
        elif isinstance(command, AddLink):
            title = html.escape(command.title, quote=False)
            add_line(format_link(title, command.target, repo) + "<br>")
        else:
            raise TypeError(f"Unknown sidebar command {command!r}")

    if depth > 0:
        raise UnbalancedSectionsError("All sections must be closed before dumping the sidebar.")
    return "\n".join(lines)


class SidebarBuilder:
    """
    Build the sidebar of a GitHub wiki.

    Args:
        repo: The repository in the form `owner/repo`.
        edit_warning: Seed the sidebar with the "do not edit" banner.
        indent: Indent unit repeated once per open section ("" or "\\t").
    """

    INDENT = "\t"

    def __init__(self, repo: str, edit_warning: bool = False, indent: str = ""):
        self.repo = repo
        self.indent = indent
        self.commands: List[SidebarCommand] = []
        self.sections_open = 0
        if edit_warning:
            self.commands.append(Banner(create_edit_warning()))

    def open_section(self, title: str, bold: bool = False, link: Optional[str] = None) -> None:
        """Open a collapsible section, optionally bold and linking to a wiki page."""
        self.commands.append(OpenSection(title, bold, link))
        self.sections_open += 1

    def close_section(self) -> bool:
        """Close the innermost section. Returns False when no section is open."""
        if self.sections_open == 0:
            return False
        self.sections_open -= 1
        self.commands.append(CloseSection())
        return True

    def add_link(self, title: str, target: str) -> None:
        self.commands.append(AddLink(title, target))

    def dumps(self) -> str:
        if self.sections_open > 0:
            raise UnbalancedSectionsError(
                "All sections must be closed before dumping the sidebar."
            )
        return render_sidebar(self.commands, self.repo, self.indent)
