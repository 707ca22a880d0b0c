"""Article search service: startup sequence and the caller-facing operations."""

from __future__ import annotations

import logging

from .config import Config
from .search import SearchResultSet, get_engine
from .search.errors import SearchError
from .search.executor import SearchExecutor
from .search.manager import IndexManager
from .search.query import UNSET, QueryBuilder
from .search.schema import ARTICLE_RETURN_FIELDS, article_index
from .seed import seed_articles
from .storage import Article, ArticleRepository, AuthorRepository, get_store

_LOGGER = logging.getLogger(__name__)


class ArticleService:
    """Wires the record store, the search engine and the article index together.

    startup() must finish before search() is served: a search racing a
    rebuild can see the index missing or half built.
    """

    def __init__(self, config: Config | None = None, store=None, engine=None) -> None:
        if config is None:
            config = Config()
        self.config = config
        self.store = store if store is not None else get_store(config)
        engine = engine if engine is not None else get_engine(config, self.store)

        self.definition = article_index(config.index_name)
        self.manager = IndexManager(engine)
        self.executor = SearchExecutor(engine)
        self.builder = QueryBuilder(self.definition.schema)
        self.articles = ArticleRepository(self.store)
        self.authors = AuthorRepository(self.store)

    def startup(self, seed: bool = True) -> int:
        """Validate the schema, rebuild the index, then seed an empty store.

        SchemaError and IndexManagementError propagate: the process should
        not serve searches against an index that may be missing.

        Returns:
            Number of articles seeded.
        """
        self.definition.schema.validate()
        self.manager.ensure_index(self.definition)
        if not seed:
            return 0
        return seed_articles(
            self.articles,
            self.authors,
            n_authors=self.config.seed_authors,
            n_articles=self.config.seed_articles,
        )

    def index_ready(self) -> bool:
        return self.manager.index_exists(self.definition.name)

    def search(
        self,
        query: str,
        min_price: float = UNSET,
        max_price: float = UNSET,
        limit: int | None = None,
        offset: int | None = None,
    ) -> SearchResultSet:
        """Search articles, projecting title and price.

        A bound of -1 means unset. Both bounds are needed for a price filter.

        Raises:
            InvalidQueryError: bad bounds or paging.
            SearchError: the query failed; inspect ``kind``.
        """
        built = self.builder.build(
            query,
            min_price=min_price,
            max_price=max_price,
            return_fields=ARTICLE_RETURN_FIELDS,
            limit=limit,
            offset=offset,
        )
        try:
            return self.executor.execute(self.definition.name, built)
        except SearchError as exc:
            _LOGGER.warning("Search %r failed (%s): %s", query, exc.kind, exc)
            raise

    def list_articles(self) -> list[Article]:
        return self.articles.find_all()

    def close(self) -> None:
        self.store.close()
