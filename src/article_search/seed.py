"""Synthetic article and author data for an empty store."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from faker import Faker

from .storage import Article, ArticleRepository, Author, AuthorRepository

_LOGGER = logging.getLogger(__name__)


class ArticleType(Enum):
    INFLUENCE = "influence"
    LEARN = "learn"
    COOK = "cook"
    TEACH = "teach"


@dataclass(frozen=True)
class TitleTable:
    """Title templates, the vocabulary each template slot draws from, and the words."""

    templates: Mapping[ArticleType, str]
    slots: Mapping[ArticleType, tuple[str, str]]
    vocabulary: Mapping[str, tuple[str, ...]]

    @property
    def capacity(self) -> int:
        """Number of distinct titles the table can produce."""
        total = 0
        for article_type in self.templates:
            first, second = self.slots[article_type]
            total += len(self.vocabulary[first]) * len(self.vocabulary[second])
        return total

    def title(self, rng: random.Random) -> str:
        article_type = rng.choice(sorted(self.templates, key=lambda t: t.value))
        first, second = self.slots[article_type]
        return self.templates[article_type].format(
            rng.choice(self.vocabulary[first]),
            rng.choice(self.vocabulary[second]),
        )


DEFAULT_TITLES = TitleTable(
    templates=MappingProxyType({
        ArticleType.INFLUENCE: "The influence of {} on {}",
        ArticleType.LEARN: "What I learn about {} from {}",
        ArticleType.COOK: "How to cook {} with {}",
        ArticleType.TEACH: "Teach your {} how to pilot a {}",
    }),
    slots=MappingProxyType({
        ArticleType.INFLUENCE: ("god", "dish"),
        ArticleType.LEARN: ("artist", "character"),
        ArticleType.COOK: ("dish", "animal"),
        ArticleType.TEACH: ("animal", "aircraft"),
    }),
    vocabulary=MappingProxyType({
        "god": (
            "Zeus", "Hera", "Poseidon", "Athena", "Apollo", "Artemis", "Ares",
            "Hermes", "Hades", "Demeter", "Dionysus", "Hephaestus", "Aphrodite",
            "Hestia", "Persephone", "Eros", "Nike", "Pan", "Helios", "Selene",
        ),
        "dish": (
            "Lasagne", "Pad Thai", "Ramen", "Paella", "Ceviche", "Pho", "Risotto",
            "Goulash", "Moussaka", "Tacos", "Bibimbap", "Falafel", "Pierogi",
            "Sushi", "Biryani", "Poutine", "Gazpacho", "Fondue", "Dumplings", "Kebab",
        ),
        "artist": (
            "Claude Monet", "Frida Kahlo", "Rembrandt", "Georgia O'Keeffe",
            "Pablo Picasso", "Vincent van Gogh", "Edvard Munch", "Salvador Dali",
            "Henri Matisse", "Paul Cezanne", "Joan Miro", "Gustav Klimt",
            "Diego Rivera", "Mary Cassatt", "Edgar Degas", "Jackson Pollock",
            "Andy Warhol", "Katsushika Hokusai", "Wassily Kandinsky", "Caravaggio",
        ),
        "character": (
            "Marty McFly", "Doc Brown", "Biff Tannen", "George McFly",
            "Lorraine Baines", "Jennifer Parker", "Einstein", "Mr. Strickland",
            "Clara Clayton", "Griff Tannen", "Goldie Wilson", "Mad Dog Tannen",
            "Dave McFly", "Linda McFly", "Marvin Berry", "Seamus McFly",
            "Needles", "Match", "Skinhead", "3-D",
        ),
        "animal": (
            "otter", "badger", "llama", "penguin", "hedgehog", "ferret", "parrot",
            "tortoise", "goat", "walrus", "lemur", "beaver", "raccoon", "alpaca",
            "pelican", "armadillo", "koala", "meerkat", "capybara", "yak",
        ),
        "aircraft": (
            "Cessna 172", "Boeing 747", "Airbus A320", "Piper Cub", "Spitfire",
            "Concorde", "Learjet 35", "Sopwith Camel", "Beechcraft Bonanza",
            "Douglas DC-3", "Mustang P-51", "Antonov An-225", "Zeppelin",
            "Harrier Jump Jet", "Embraer E190", "Bombardier Dash 8",
            "Lockheed Electra", "Wright Flyer", "Fokker 100", "Tiger Moth",
        ),
    }),
)


def seed_articles(
    articles: ArticleRepository,
    authors: AuthorRepository,
    titles: TitleTable = DEFAULT_TITLES,
    n_authors: int = 100,
    n_articles: int = 1000,
    faker: Faker | None = None,
) -> int:
    """Fill an empty store with authors and uniquely titled articles.

    Author names and prices come from `faker`; seed it with
    `Faker.seed_instance` for repeatable data. Each article references one
    or two random authors. Does nothing when articles already exist.

    Returns:
        Number of articles created.
    """
    if articles.count() > 0:
        _LOGGER.info("Store already holds articles, skipping seed")
        return 0
    if n_articles > titles.capacity:
        raise ValueError(
            f"Cannot make {n_articles} unique titles, the title table only yields {titles.capacity}"
        )
    faker = faker or Faker()
    rng = faker.random

    for _ in range(n_authors):
        authors.save(Author(id=None, name=faker.name()))

    seen: set[str] = set()
    for _ in range(n_articles):
        title = titles.title(rng)
        while title in seen:
            title = titles.title(rng)
        seen.add(title)

        price = round(faker.pyfloat(right_digits=2, min_value=1, max_value=100), 2)
        article = Article(id=None, title=title, price=price)
        for _ in range(faker.random_int(1, 2)):
            author_id = authors.random_id()
            if author_id is not None:
                article.add_author(author_id)
        articles.save(article)

    _LOGGER.info("Seeded %d author(s) and %d article(s)", n_authors, n_articles)
    return n_articles
