import openpyxl

from helpers.arbo_utils import flatten_folders, save_folder_structure_to_excel
from helpers.tree_utils import FolderTreeCache


def make_cache():
    cache = FolderTreeCache()
    cache.add_folder("A", "Algebra")
    cache.add_folder("B", "Geometry")
    cache.add_folder("B1", "Triangles", parent_id="B")
    cache.add_document("A", "a1", "Algebra 1")
    cache.add_document("B1", "t1", "Triangles 1")
    cache.add_document("B1", "t2", "Triangles 2")
    cache.build_paths(1, " / ", lambda name: name)
    return cache


def test_flatten_is_depth_first():
    records = flatten_folders(make_cache())
    assert [record["id"] for record in records] == ["A", "B", "B1"]
    assert records[1]["total_documents"] == 2
    assert records[1]["documents"] == 0


def test_export_writes_tree_and_list(tmp_path):
    output_file = tmp_path / "tree.xlsx"

    df = save_folder_structure_to_excel(make_cache(), str(output_file))

    assert df["path"].tolist() == ["Algebra", "Geometry", "Geometry / Triangles"]

    workbook = openpyxl.load_workbook(output_file)
    tree_sheet = workbook["Folder Tree"]
    assert tree_sheet["B2"].value == "Algebra (1)"
    assert tree_sheet["C4"].value == "Triangles (2)"

    flat_sheet = workbook["Folder List"]
    assert flat_sheet["D4"].value == "Geometry / Triangles"
    assert flat_sheet["F3"].value == 2
