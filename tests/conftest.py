import sys
import pytest
from pathlib import Path

# Allow the import of support modules for tests
sys.path.append(str(Path(__file__).resolve().parent))

from xmlbind import Caches, CacheMode


@pytest.fixture
def reader_caches():
    def make(root, **options) -> Caches:
        caches = Caches(root, CacheMode.READER, **options)
        caches.register()
        return caches
    return make


@pytest.fixture
def writer_caches():
    def make(root, **options) -> Caches:
        caches = Caches(root, CacheMode.WRITER, **options)
        caches.register()
        return caches
    return make
