import pytest

from helpers.errors import NotFoundError
from helpers.index_utils import DocumentIndex
from helpers.tree_utils import FolderTreeCache


@pytest.fixture
def index():
    cache = FolderTreeCache()
    cache.add_folder("A", "Algebra")
    cache.add_folder("B", "Geometry")
    cache.add_folder("B1", "Triangles", parent_id="B")
    cache.add_folder("B11", "Right triangles", parent_id="B1")
    cache.add_document("A", "a1", "Algebra 1")
    cache.add_document("B11", "r1", "Right 1")
    return DocumentIndex(cache)


def test_find_folder_at_any_depth(index):
    assert index.find_folder("A").name == "Algebra"
    assert index.find_folder("B11").name == "Right triangles"
    assert index.find_folder("missing") is None


def test_find_document_returns_owning_folder(index):
    ref, folder = index.find_document("r1")
    assert ref.name == "Right 1"
    assert folder.id == "B11"
    assert index.find_document("missing") is None


def test_find_folder_by_name_searches_nested_folders(index):
    assert index.find_folder_by_name("Triangles").id == "B1"
    assert index.find_folder_by_name("Nothing") is None


def test_resolve_tells_folders_from_documents(index):
    kind, node = index.resolve("B1")
    assert kind == "folder"
    assert node.name == "Triangles"

    kind, (ref, folder) = index.resolve("a1")
    assert kind == "document"
    assert ref.id == "a1"
    assert folder.id == "A"


def test_resolve_unknown_id_raises(index):
    with pytest.raises(NotFoundError):
        index.resolve("missing")
