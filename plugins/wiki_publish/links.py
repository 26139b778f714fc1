"""
Rewrite local links in markdown documents so they work from a GitHub wiki.

Links to other wiki pages become `/{repo}/wiki/{slug}`, links to anything else
in the repository become `/{repo}/blob/{branch}/{path}`, and external URLs are
left untouched.
"""

import logging
import posixpath
import re
from dataclasses import dataclass
from typing import Iterator, Sequence, Union
from urllib.parse import unquote, urlsplit

import mdformat_tables
from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdformat.renderer import MDRenderer, RenderContext, RenderTreeNode

from plugins.wiki_publish.names import blob_url, standardize_file_name, wiki_url

logger = logging.getLogger(f"mkdocs.plugins.{__name__}")

# Leading YAML front matter, copied through untouched
FM_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*\n?", re.DOTALL)


def is_local_url(url: str) -> bool:
    """
    Determine if a URL is a local file path rather than a web URL. `file:` URLs
    and Windows drive paths (`C:\\docs`) count as local.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        # unparseable URLs are left alone
        return False
    if parts.scheme:
        return parts.scheme == "file" or len(parts.scheme) == 1
    return not parts.netloc


def highest_level_dir(path: str) -> str:
    """
    Return the first component of a normalized path: `.` for the current
    directory and `/` for rooted paths.
    """
    norm = posixpath.normpath(path or ".")
    if norm.startswith("/"):
        return "/"
    return norm.split("/")[0]


def _escapes_root(path: str) -> bool:
    return path == ".." or path.startswith("../")


def format_local_link(
    link: str,
    repo: str,
    branch: str,
    current_dir: str,
    extensions: Sequence[str],
    prefix_with_dir: bool = False,
) -> str:
    """
    Format a link found in a document living in `current_dir`.

    If the target is in the same top-level folder as the document and has one
    of the wiki `extensions` it becomes a wiki page link. Anything else inside
    the repository becomes a blob link. Links that climb above the repository
    root are logged and left as is, as are external URLs.
    """
    if not link or not is_local_url(link):
        return link

    parts = urlsplit(link)
    if parts.scheme:
        logger.warning(f"[wiki_publish] {link} is not in the project directory, leaving as is.")
        return link
    if not parts.path:
        # in-page anchor or bare query
        return link

    suffix = ""
    if parts.query:
        suffix += f"?{parts.query}"
    if parts.fragment:
        suffix += f"#{parts.fragment}"

    target = parts.path
    current_dir = posixpath.normpath(current_dir or ".")
    resolved = posixpath.normpath(posixpath.join(current_dir, target))

    if highest_level_dir(posixpath.dirname(resolved)) == highest_level_dir(current_dir):
        # the parser percent-encodes non-ASCII; page names use the decoded text
        page = unquote(target)
        if posixpath.splitext(page)[1] in extensions:
            link_dir = posixpath.normpath(posixpath.join(current_dir, posixpath.dirname(page)))
            file_name = standardize_file_name(
                posixpath.basename(page), link_dir if prefix_with_dir else None
            )
            return wiki_url(file_name, repo) + suffix
        return blob_url(resolved, repo, branch) + suffix

    if _escapes_root(resolved):
        logger.warning(f"[wiki_publish] {link} is not in the project directory, leaving as is.")
        return link
    return blob_url(resolved, repo, branch) + suffix


# ----- Markdown tree visitation -------


@dataclass
class LinkNode:
    token: Token

    @property
    def url(self) -> str:
        return self.token.attrs["href"]

    @url.setter
    def url(self, value: str) -> None:
        self.token.attrs["href"] = value


@dataclass
class ImageNode:
    token: Token

    @property
    def url(self) -> str:
        return self.token.attrs["src"]

    @url.setter
    def url(self, value: str) -> None:
        self.token.attrs["src"] = value


@dataclass
class DefinitionNode:
    token: Token

    @property
    def label(self) -> str:
        return self.token.meta["label"]

    @property
    def url(self) -> str:
        return self.token.meta["url"]

    @url.setter
    def url(self, value: str) -> None:
        self.token.meta["url"] = value


UrlNode = Union[LinkNode, ImageNode, DefinitionNode]


def _render_definition(node: RenderTreeNode, context: RenderContext) -> str:
    destination = node.meta["url"]
    if not destination or any(c.isspace() for c in destination):
        destination = f"<{destination}>"
    text = f"[{node.meta['label']}]: {destination}"
    title = node.meta["title"]
    if title:
        title = title.replace('"', '\\"')
        text += f' "{title}"'
    return text


class InPlaceDefinitions:
    """mdformat extension that writes every reference definition where it was defined."""

    RENDERERS = {"definition": _render_definition}
    POSTPROCESSORS: dict = {}


def build_parser() -> MarkdownIt:
    """CommonMark + GFM tables parser whose renderer writes markdown back out."""
    mdit = MarkdownIt("commonmark", renderer_cls=MDRenderer)
    mdit.options["mdformat"] = {}
    mdit.options["codeformatters"] = {}
    # reference links keep their labels on re-serialization
    mdit.options["store_labels"] = True
    # emit a `definition` token at each reference definition
    mdit.options["inline_definitions"] = True
    mdit.options["parser_extension"] = [mdformat_tables, InPlaceDefinitions]
    mdformat_tables.update_mdit(mdit)
    return mdit


def _inline_nodes(tokens: Sequence[Token]) -> Iterator[UrlNode]:
    for token in tokens:
        # reference links and images render from their definition
        if token.type == "link_open" and not token.meta.get("label"):
            yield LinkNode(token)
        elif token.type == "image" and not token.meta.get("label"):
            yield ImageNode(token)
        if token.children:
            yield from _inline_nodes(token.children)


def iter_url_nodes(tokens: Sequence[Token]) -> Iterator[UrlNode]:
    """Yield every reference definition, then every link and image, of a parsed document."""
    for token in tokens:
        if token.type == "definition":
            yield DefinitionNode(token)
    yield from _inline_nodes(tokens)


def split_front_matter(text: str) -> tuple[str, str]:
    """Return (front_matter_block, body). The block is empty when there is none."""
    m = FM_PATTERN.match(text)
    if not m:
        return "", text
    return text[: m.end()], text[m.end() :]


def format_links_in_file(
    text: str,
    repo: str,
    branch: str,
    current_dir: str,
    extensions: Sequence[str],
    prefix_with_dir: bool = False,
) -> str:
    """
    Parse markdown `text`, rewrite the URL of every link, image and reference
    definition with `format_local_link`, and serialize the document back to
    markdown. Nothing besides those URLs is changed; definitions stay where
    they were, used or not.
    """
    front_matter, body = split_front_matter(text)
    mdit = build_parser()
    env: dict = {}
    tokens = mdit.parse(body, env)

    for node in iter_url_nodes(tokens):
        node.url = format_local_link(
            node.url, repo, branch, current_dir, extensions, prefix_with_dir
        )

    # definitions are already rendered in place, so skip mdformat's trailing list
    rendered = mdit.renderer.render(tokens, mdit.options, env, finalize=False)
    if rendered:
        rendered += "\n"
    return front_matter + rendered
