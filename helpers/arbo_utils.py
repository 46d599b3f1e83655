import logging

import pandas as pd
import openpyxl
from openpyxl.styles import PatternFill, Font
from openpyxl.utils import get_column_letter


def flatten_folders(cache):
    """
    One record per cached folder, depth-first from the top-level nodes.

    Returns:
        list: Dicts with id, name, level, path, documents, total_documents
    """
    records = []

    def visit(node):
        records.append({
            'id': node.id,
            'name': node.name,
            'level': node.level,
            'path': node.path,
            'documents': len(node.documents),
            'total_documents': node.total_documents,
        })
        for child_id in node.children:
            visit(cache.nodes[child_id])

    for node in cache.folders.values():
        visit(node)
    return records


def save_folder_structure_to_excel(cache, output_file='folder_tree.xlsx'):
    """
    Save the cached folder tree to an Excel file with a proper hierarchical view.

    Args:
        cache: FolderTreeCache with its paths built
        output_file: Path to the output Excel file

    Returns:
        pd.DataFrame: The flat folder list written to the second sheet
    """
    print(f"Saving folder structure to {output_file}...")
    records = flatten_folders(cache)

    workbook = openpyxl.Workbook()

    # Hierarchical tree view sheet
    tree_sheet = workbook.active
    tree_sheet.title = "Folder Tree"
    tree_sheet.append(["Root Folder"])

    # Flat list sheet with folder paths and counts
    flat_sheet = workbook.create_sheet("Folder List")
    flat_sheet.append(["Folder ID", "Folder Name", "Level", "Path", "Presentations", "Total Presentations"])

    flat_sheet.column_dimensions['A'].width = 40
    flat_sheet.column_dimensions['B'].width = 40
    flat_sheet.column_dimensions['C'].width = 10
    flat_sheet.column_dimensions['D'].width = 100
    flat_sheet.column_dimensions['E'].width = 15
    flat_sheet.column_dimensions['F'].width = 20

    header_fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for cell in flat_sheet[1]:
        cell.fill = header_fill
        cell.font = header_font

    tree_sheet.column_dimensions['A'].width = 30
    max_level = max((record['level'] for record in records), default=0)
    for i in range(2, max_level + 2):
        tree_sheet.column_dimensions[get_column_letter(i)].width = 30

    for record in records:
        # Level n goes to column n + 1, column A holds the root
        row = [""] * (record['level'] + 1)
        row[record['level']] = f"{record['name']} ({record['total_documents']})"
        tree_sheet.append(row)

        flat_sheet.append([record['id'], record['name'], record['level'], record['path'],
                           record['documents'], record['total_documents']])

    tree_sheet.freeze_panes = "A2"
    flat_sheet.freeze_panes = "A2"

    workbook.save(output_file)
    logging.info(f"Saved {len(records)} folders to {output_file}")
    print(f"Saved folder structure to {output_file}")

    return pd.DataFrame(records, columns=['id', 'name', 'level', 'path', 'documents', 'total_documents'])
