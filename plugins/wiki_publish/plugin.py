"""
An MkDocs plugin that publishes documentation folders to the repository's GitHub wiki
"""

import logging
import os
import re
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from mkdocs.config import config_options as c
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.exceptions import ConfigurationError, PluginError
from mkdocs.plugins import BasePlugin

from plugins.wiki_publish import git_helpers
from plugins.wiki_publish.names import format_as_list, normalize_extensions
from plugins.wiki_publish.publisher import SECTION_POLICIES, PublishOptions, publish_tree
from plugins.wiki_publish.tree import scan_folders

logger = logging.getLogger(f"mkdocs.plugins.{__name__}")

REPO_URL_PATTERN = re.compile(r"^(?:https?://|git@)[^/:]+[/:]([^/]+/[^/]+?)(?:\.git)?/?$")


class WikiPublishPlugin(BasePlugin):
    """MkDocs plugin that rewrites documentation folders into a GitHub wiki and pushes it.

    Configuration options (all optional):
    - repo (str): `owner/repo`; defaults to $GITHUB_REPOSITORY, then the project's `repo_url`.
    - folders (str|list): Folders to publish, relative to mkdocs.yml. Defaults to `docs_dir`.
    - file_types (str|list): Extensions turned into wiki pages.
    - sidebar (bool): Generate `_Sidebar.md` unless the docs ship their own.
    - sidebar_sections (choice): Which directories become collapsible sidebar sections.
    - dry_run (bool): Write the wiki into `site_dir/wiki` and skip git entirely.
    """

    config_scheme = (
        ("enabled", c.Type(bool, default=True)),
        ("repo", c.Type(str, default="")),
        ("folders", c.Type((str, list), default=[])),
        ("branch", c.Type(str, default="main")),
        ("file_types", c.Type((str, list), default=[".md"])),
        ("sidebar", c.Type(bool, default=True)),
        ("sidebar_sections", c.Choice(SECTION_POLICIES, default="non_empty")),
        ("indent_sidebar", c.Type(bool, default=False)),
        ("prefix_files_with_dir", c.Type(bool, default=False)),
        ("edit_warning", c.Type(bool, default=True)),
        ("generated_files_dir", c.Type(str, default="generated")),
        ("clear_wiki", c.Type(bool, default=False)),
        ("host", c.Type(str, default="github.com")),
        ("token", c.Type(str, default="")),
        ("git_email", c.Type(str, default="action@github.com")),
        ("git_name", c.Type(str, default="actions-user")),
        ("commit_message", c.Type(str, default=":memo: updated wiki")),
        ("dry_run", c.Type(bool, default=False)),
    )

    def __init__(self):
        super().__init__()
        self.options: Optional[PublishOptions] = None

    # -------------------------------
    # Configuration
    # -------------------------------

    def resolve_repo(self, config) -> str:
        """Pick the `owner/repo` name from the plugin config, environment or repo_url."""
        repo = self.config.get("repo") or os.environ.get("GITHUB_REPOSITORY", "")
        if not repo:
            m = REPO_URL_PATTERN.match(config.get("repo_url") or "")
            if m:
                repo = m.group(1)
        return repo.strip("/")

    def on_config(self, config: MkDocsConfig, **kwargs):
        if not self.config["enabled"]:
            return config

        repo = self.resolve_repo(config)
        if not repo:
            raise ConfigurationError(
                "[wiki_publish] no repository name; set `repo`, $GITHUB_REPOSITORY or `repo_url`"
            )
        if not self.config["dry_run"] and not git_helpers.EMAIL_REGEX.fullmatch(
            self.config["git_email"]
        ):
            raise ConfigurationError(
                f"[wiki_publish] invalid git_email '{self.config['git_email']}'"
            )

        extensions = normalize_extensions(self.config["file_types"])
        if not extensions:
            raise ConfigurationError("[wiki_publish] `file_types` must list at least one extension")

        self.options = PublishOptions(
            repo=repo,
            branch=self.config["branch"],
            extensions=tuple(extensions),
            prefix_files_with_dir=self.config["prefix_files_with_dir"],
            edit_warning=self.config["edit_warning"],
            generated_files_dir=self.config["generated_files_dir"],
            sidebar_sections=self.config["sidebar_sections"],
            indent_sidebar=self.config["indent_sidebar"],
        )
        logger.debug(f"[wiki_publish] options: {self.options}")
        return config

    def get_folders(self, config, project_root: Path) -> List[str]:
        folders = format_as_list(self.config["folders"])
        if folders:
            return folders
        docs_dir = Path(config["docs_dir"]).resolve()
        return [os.path.relpath(docs_dir, project_root)]

    # -------------------------------
    # Publishing
    # -------------------------------

    def on_post_build(self, config: MkDocsConfig) -> None:
        if not self.config["enabled"] or self.options is None:
            logger.debug("[wiki_publish] disabled, skipping")
            return

        project_root = Path(config["config_file_path"]).resolve().parent
        folders = self.get_folders(config, project_root)
        logger.info(f"[wiki_publish] publishing {', '.join(folders)} to the {self.options.repo} wiki")

        try:
            if self.config["dry_run"]:
                wiki_dir = Path(config["site_dir"]).resolve() / "wiki"
                tree = scan_folders(folders, self.options.extensions, project_root)
                wiki_dir.mkdir(parents=True, exist_ok=True)
                publish_tree(tree, project_root, wiki_dir, self.options, self.config["sidebar"])
                logger.info(f"[wiki_publish] dry run, wiki written to {wiki_dir}")
                return

            with tempfile.TemporaryDirectory(prefix="wiki-working-directory-") as tmp:
                wiki_dir = Path(tmp) / "wiki"
                self.publish(folders, project_root, wiki_dir)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"[wiki_publish] failed to publish wiki: {e}")
            raise PluginError(f"[wiki_publish] failed to publish wiki: {e}") from e

    def publish(self, folders: List[str], project_root: Path, wiki_dir: Path) -> None:
        """Clone the wiki, write the rewritten pages and sidebar, then commit and push."""
        token = self.config["token"] or os.environ.get("GITHUB_TOKEN")

        # The clone only has to finish before the first write
        with ThreadPoolExecutor(max_workers=1) as pool:
            clone = pool.submit(
                git_helpers.clone_wiki,
                self.options.repo,
                wiki_dir,
                self.config["clear_wiki"],
                token,
                self.config["host"],
            )
            tree = scan_folders(folders, self.options.extensions, project_root)
            logger.info(f"[wiki_publish] found {tree.total_file_count} files")
            clone.result()

        publish_tree(tree, project_root, wiki_dir, self.options, self.config["sidebar"])

        git_helpers.configure_git(self.config["git_email"], self.config["git_name"], cwd=wiki_dir)
        if not git_helpers.has_changes(cwd=wiki_dir):
            logger.info("[wiki_publish] wiki is already up to date, nothing to push")
            return
        git_helpers.commit_and_push(["."], self.config["commit_message"], cwd=wiki_dir)
        logger.info(f"[wiki_publish] pushed wiki for {self.options.repo}")
