import os
import json
import logging
import subprocess

from constants.app_data import DATA_FOLDER
from helpers.tree_utils import FolderTreeCache


def ensure_data_folder(base_path):
    """Ensure the data folder exists and is hidden on Windows."""
    data_folder_path = os.path.join(base_path, DATA_FOLDER)

    if not os.path.exists(data_folder_path):
        os.makedirs(data_folder_path)

        # Hide the folder on Windows
        if os.name == "nt":
            subprocess.call(["attrib", "+H", data_folder_path])

    return data_folder_path


class JsonCacheStore:
    """
    Whole-tree snapshot of a FolderTreeCache in a JSON file under the data folder.
    """

    def __init__(self, file_name, base_path=None):
        self.base_path = base_path or os.getcwd()
        self.file_name = file_name

    @property
    def file_path(self):
        return os.path.join(self.base_path, DATA_FOLDER, self.file_name)

    def save(self, cache):
        """Save the cache to file."""
        ensure_data_folder(self.base_path)
        with open(self.file_path, 'w', encoding='utf-8') as f:
            json.dump(cache.to_dict(), f, ensure_ascii=False, indent=2)
        logging.info(f"Saved {cache.total_documents} cached presentations to {self.file_path}")

    def load(self):
        """Load the cache from file, None when there is no snapshot yet."""
        if not os.path.exists(self.file_path):
            logging.info(f"No cache snapshot at {self.file_path}")
            return None

        with open(self.file_path, 'r', encoding='utf-8') as f:
            cache = FolderTreeCache.from_dict(json.load(f))
        logging.info(f"Loaded {cache.total_documents} cached presentations from {self.file_path}")
        return cache

    def delete(self):
        if os.path.exists(self.file_path):
            os.remove(self.file_path)
            logging.info(f"Deleted cache snapshot {self.file_path}")
