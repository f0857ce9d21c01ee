"""Crawl orchestration: discover, walk, extract and aggregate."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .aggregator import FeatureIndex
from .analyzers.java import JavaSourceParser
from .bitbucket import BitbucketClient
from .config import CrawlerConfig
from .discovery import RepositoryDiscoverer
from .dispatcher import BatchResult, Task, TaskDispatcher
from .extractor import SourceExtractor
from .logging import get_logger
from .models import Repository, TestDataMethod
from .walker import TreeWalker


@dataclass
class CrawlResult:
    """Everything a report needs once the run has finished."""

    features: Dict[str, List[TestDataMethod]]
    repositories: List[Repository] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def method_count(self) -> int:
        return sum(len(items) for items in self.features.values())


class Crawler:
    """Runs the repository -> directory -> file pipeline for one configuration."""

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        client: Optional[BitbucketClient] = None,
        index: Optional[FeatureIndex] = None,
        parser: Optional[JavaSourceParser] = None,
    ) -> None:
        self.config = config
        self.logger = get_logger("crawler")
        self.client = client or BitbucketClient(
            config.host,
            config.token,
            project_key=config.project_key,
            branch=config.branch,
            page_limit=config.page_limit,
            request_timeout=config.request_timeout,
        )
        self.index = index or FeatureIndex()
        self.discoverer = RepositoryDiscoverer(self.client)
        self.walker = TreeWalker(
            self.client, sentinel=config.sentinel, extension=config.extension
        )
        self.extractor = SourceExtractor(
            self.client,
            self.index,
            parser=parser,
            marker=config.marker,
            namespace=config.namespace,
            sentinel=config.sentinel,
            extension=config.extension,
        )
        self._failures: List[Tuple[str, str]] = []
        self._failures_lock = threading.Lock()
        self._file_dispatcher: Optional[TaskDispatcher] = None

    def discover(self) -> List[Repository]:
        return self.discoverer.list_repositories(self.config.repo_prefix)

    def run(self) -> CrawlResult:
        """Crawl every matching repository and return the aggregated features.

        Discovery failures propagate; failures inside a repository or file
        task are logged, recorded in ``CrawlResult.failures`` and skipped.
        """
        repositories = self.discover()
        tasks = [
            Task(name=repo.slug, fn=lambda repo=repo: self.crawl_repository(repo))
            for repo in repositories
        ]

        # Repository workers block on their file batch, so files get their own pool.
        repo_dispatcher = TaskDispatcher(self.config.threads, name="tdcrawl-repo")
        file_dispatcher = TaskDispatcher(self.config.threads, name="tdcrawl-file")
        with repo_dispatcher, file_dispatcher:
            self._file_dispatcher = file_dispatcher
            try:
                self._record(repo_dispatcher.run_all(tasks))
            finally:
                self._file_dispatcher = None

        result = CrawlResult(
            features=self.index.snapshot(),
            repositories=repositories,
            failures=list(self._failures),
        )
        self.logger.info(
            "Crawl finished: %d methods across %d features from %d repositories (%d failures)",
            self.index.total(),
            len(self.index),
            len(repositories),
            len(result.failures),
        )
        return result

    def crawl_repository(self, repo: Repository) -> None:
        marked = self.walker.find_marked_directories(repo.slug, self.config.root_path)
        files: List[str] = []
        for directory in marked:
            files.extend(self.walker.list_source_files(repo.slug, directory))
        # Nested marked directories list the same files twice.
        files = list(dict.fromkeys(files))
        self.logger.info(
            "%s: %d test directories, %d source files", repo.slug, len(marked), len(files)
        )

        tasks = [
            Task(
                name=f"{repo.slug}:{path}",
                fn=lambda path=path: self.extractor.process_file(repo.slug, path),
            )
            for path in files
        ]
        dispatcher = self._file_dispatcher
        if dispatcher is None:
            with TaskDispatcher(self.config.threads, name="tdcrawl-file") as dispatcher:
                self._record(dispatcher.run_all(tasks))
        else:
            self._record(dispatcher.run_all(tasks))

    def _record(self, batch: BatchResult) -> None:
        if not batch.failures:
            return
        with self._failures_lock:
            self._failures.extend((name, str(error)) for name, error in batch.failures)


__all__ = ["CrawlResult", "Crawler"]
