import pytest

from constants.app_data import PRESENTATION_MIME_TYPE
from helpers.errors import NotFoundError
from helpers.tree_utils import FolderTreeCache


def assert_counts_consistent(cache):
    for node in cache.nodes.values():
        expected = len(node.documents) + sum(cache.nodes[child].total_documents for child in node.children)
        assert node.total_documents == expected, node.name
    assert cache.total_documents == sum(node.total_documents for node in cache.folders.values())


@pytest.fixture
def drive(fake):
    fake.add_folder("Course", folder_id="root")
    fake.add_folder("01 - Algebra", "root", folder_id="A")
    fake.add_folder("02 - Geometry", "root", folder_id="B")
    fake.add_folder("01 - Triangles", "B", folder_id="B1")
    for index in range(3):
        fake.add_presentation(f"Algebra {index}", "A", doc_id=f"a{index}")
    fake.add_presentation("Geometry intro", "B", doc_id="b0")
    fake.add_presentation("Triangles 1", "B1", doc_id="t1")
    fake.add_presentation("Triangles 2", "B1", doc_id="t2")
    return fake


@pytest.fixture
def cache(drive, config):
    cache = FolderTreeCache.build(drive, "root")
    cache.build_paths(config.path_start_level, config.path_separator, config.name_normalizer)
    return cache


def test_build_counts_every_presentation(cache):
    assert cache.total_documents == 6
    assert set(cache.folders) == {"A", "B"}
    assert cache.folders["A"].total_documents == 3
    assert cache.folders["B"].total_documents == 3
    assert cache.nodes["B1"].total_documents == 2
    assert_counts_consistent(cache)


def test_build_assigns_levels_and_parents(cache):
    assert cache.folders["A"].level == 1
    assert cache.folders["A"].parent_id is None
    assert cache.nodes["B1"].level == 2
    assert cache.nodes["B1"].parent_id == "B"
    assert cache.folders["B"].children == ["B1"]


def test_build_paths_strips_prefixes_and_sets_footers(cache):
    assert cache.folders["A"].path == "Algebra"
    assert cache.nodes["B1"].path == "Geometry / Triangles"

    ref, folder = cache.find_document("t1")
    assert folder.id == "B1"
    assert ref.footer_text == "Geometry / Triangles"


def test_build_paths_is_idempotent(cache, config):
    before = cache.to_dict()
    cache.build_paths(config.path_start_level, config.path_separator, config.name_normalizer)
    assert cache.to_dict() == before


def test_build_paths_skips_levels_above_start(cache, config):
    cache.build_paths(2, config.path_separator, config.name_normalizer)
    assert cache.folders["A"].path == ""
    assert cache.nodes["B1"].path == "Triangles"
    assert cache.find_document("a0")[0].footer_text == ""


def test_separator_inside_folder_name_is_joined_literally(fake, config):
    fake.add_folder("Course", folder_id="root")
    fake.add_folder("Maths / Logic", "root", folder_id="M")
    fake.add_folder("Sets", "M", folder_id="S")
    fake.add_presentation("Sets 1", "S", doc_id="s1")

    cache = FolderTreeCache.build(fake, "root")
    cache.build_paths(1, " / ", config.name_normalizer)

    assert cache.nodes["S"].path == "Maths / Logic / Sets"


def test_first_parent_wins(drive):
    drive.add_presentation("Shared", ["B1", "A"], doc_id="shared")

    cache = FolderTreeCache.build(drive, "root", max_parents_per_query=1)

    assert cache.total_documents == 7
    assert [ref.id for ref in cache.nodes["B1"].documents].count("shared") == 1
    assert "shared" not in [ref.id for ref in cache.folders["A"].documents]
    assert_counts_consistent(cache)


def test_parent_outside_tree_falls_through_to_the_next_parent(drive):
    drive.add_folder("Elsewhere", folder_id="elsewhere")
    drive.add_presentation("Shared", ["elsewhere", "A"], doc_id="shared")

    cache = FolderTreeCache.build(drive, "root")

    ref, folder = cache.find_document("shared")
    assert folder.id == "A"
    assert [doc.id for doc, _ in cache.iter_documents("A")].count("shared") == 1
    assert cache.total_documents == 7
    assert_counts_consistent(cache)


def test_parent_clauses_are_chunked(drive):
    FolderTreeCache.build(drive, "root", max_parents_per_query=2)

    presentation_queries = [query for query in drive.queries if PRESENTATION_MIME_TYPE in query]
    assert len(presentation_queries) == 2
    assert all(query.count(" in parents") <= 2 for query in presentation_queries)


def test_listing_follows_pages(drive):
    cache = FolderTreeCache.build(drive, "root", page_size=1)
    assert cache.total_documents == 6


def test_root_without_subfolders_becomes_the_only_node(fake):
    fake.add_folder("Flat course", folder_id="flat")
    fake.add_presentation("One", "flat", doc_id="one")
    fake.add_presentation("Two", "flat", doc_id="two")

    cache = FolderTreeCache.build(fake, "flat")

    assert list(cache.folders) == ["flat"]
    assert cache.folders["flat"].name == "Flat course"
    assert cache.folders["flat"].level == 1
    assert cache.total_documents == 2


def test_add_document_bubbles_up(cache):
    cache.add_document("B1", "t3", "Triangles 3")

    assert cache.nodes["B1"].total_documents == 3
    assert cache.folders["B"].total_documents == 4
    assert cache.total_documents == 7
    assert cache.find_document("t3")[0].footer_text == "Geometry / Triangles"
    assert_counts_consistent(cache)


def test_add_folder_under_parent(cache):
    node = cache.add_folder("B2", "Squares", parent_id="B")
    cache.add_document("B2", "q1", "Squares 1")

    assert node.level == 2
    assert "B2" in cache.folders["B"].children
    assert cache.folders["B"].total_documents == 4
    assert_counts_consistent(cache)


def test_remove_document_bubbles_down(cache):
    cache.remove_document("t1")

    assert cache.find_document("t1") is None
    assert cache.nodes["B1"].total_documents == 1
    assert cache.folders["B"].total_documents == 2
    assert cache.total_documents == 5
    assert_counts_consistent(cache)


def test_mutations_on_unknown_ids_raise(cache):
    with pytest.raises(NotFoundError):
        cache.add_document("missing", "x", "X")
    with pytest.raises(NotFoundError):
        cache.add_folder("new", "New", parent_id="missing")
    with pytest.raises(NotFoundError):
        cache.remove_document("missing")
    with pytest.raises(NotFoundError):
        list(cache.iter_documents("missing"))


def test_iter_documents_is_depth_first(cache):
    assert [ref.id for ref, _ in cache.iter_documents("B")] == ["b0", "t1", "t2"]


def test_get_subfolder_by_name(cache):
    assert cache.get_subfolder_by_name("02 - Geometry").id == "B"
    assert cache.get_subfolder_by_name("01 - Triangles") is None


def test_snapshot_round_trip_keeps_the_arena(cache):
    restored = FolderTreeCache.from_dict(cache.to_dict())

    assert restored.to_dict() == cache.to_dict()
    assert restored.nodes["B1"].parent_id == "B"

    restored.add_document("B1", "t3", "Triangles 3")
    assert restored.folders["B"].total_documents == 4
    assert_counts_consistent(restored)


def test_counts_hold_after_every_insertion():
    cache = FolderTreeCache()
    cache.add_folder("A", "Algebra")
    cache.add_folder("A1", "Fractions", parent_id="A")
    cache.add_folder("A11", "Decimals", parent_id="A1")
    cache.add_folder("B", "Geometry")

    insertions = [("A11", "d1"), ("A", "d2"), ("A1", "d3"), ("B", "d4"), ("A11", "d5"), ("A11", "d6")]
    for folder_id, doc_id in insertions:
        cache.add_document(folder_id, doc_id, doc_id)
        assert_counts_consistent(cache)

    assert cache.nodes["A1"].total_documents == 4
    assert cache.folders["A"].total_documents == 5
    assert cache.total_documents == 6

    cache.remove_document("d5")
    assert_counts_consistent(cache)
