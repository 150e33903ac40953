"""Magazine assembly: roundup articles, EPUB writing and issue generation."""

from magazeen.magazine.articles import ArticleGenerator
from magazeen.magazine.epub import EpubWriter
from magazeen.magazine.generator import MagazineGenerator, MagazineResult

__all__ = [
    "ArticleGenerator",
    "EpubWriter",
    "MagazineGenerator",
    "MagazineResult",
]
