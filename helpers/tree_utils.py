import datetime
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from constants.app_data import FOLDER_MIME_TYPE, PRESENTATION_MIME_TYPE
from helpers.errors import NotFoundError
from helpers.index_utils import DocumentIndex


@dataclass
class DocumentRef:
    id: str
    name: str
    footer_text: str = ""


@dataclass
class FolderNode:
    """
    One folder of the cached tree.

    Relations are stored as ids (parent_id, children) and resolved through the
    cache's node arena, so a node never owns its parent.
    """
    id: str
    name: str
    level: int
    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)
    documents: List[DocumentRef] = field(default_factory=list)
    path: str = ""
    total_documents: int = 0


class FolderTreeCache:
    """
    Persisted tree of folders and the presentations they contain.

    Keeps, for every folder, the number of documents in its whole subtree. The
    count is bubbled up on every insertion (O(depth)), it is never recomputed.
    """

    def __init__(self, created_at=None):
        self.folders: Dict[str, FolderNode] = {}
        self.nodes: Dict[str, FolderNode] = {}
        self.total_documents = 0
        self.created_at = created_at or datetime.datetime.now(datetime.timezone.utc).isoformat()
        self._lock = threading.RLock()

    #region Build
    @classmethod
    def build(cls, store, root_id, max_parents_per_query=50, page_size=100):
        """
        Build the whole tree under `root_id` with a two-phase listing.

        Phase 1 lists sub-folders depth-first and collects one parent clause per
        folder. Phase 2 lists every presentation whose parent matches a clause and
        inserts it once, under its first listed parent that belongs to the tree.

        Args:
            store: DocumentStore (see helpers/drive_utils.py)
            root_id (str): Drive id of the folder to walk
            max_parents_per_query (int): Parent clauses sent per listing query
            page_size (int): Page size of the listing calls

        Returns:
            FolderTreeCache: The populated cache (paths not built yet)
        """
        cache = cls()
        parent_clauses = []
        seen_documents = set()

        logging.info(f"Building folder tree under {root_id}")
        cache._scan_subfolders(store, root_id, None, parent_clauses, {root_id}, page_size)

        if not parent_clauses:
            # No sub-folders: the root itself is the single top-level node
            metadata = store.get_metadata(root_id, fields="id, name")
            cache.add_folder(root_id, metadata.get("name", root_id))
            parent_clauses.append(f"'{root_id}' in parents")

        logging.info(f"Found {len(cache.nodes)} folders, listing presentations")

        for start in range(0, len(parent_clauses), max_parents_per_query):
            chunk = parent_clauses[start:start + max_parents_per_query]
            query = (f"({' or '.join(chunk)}) "
                     f"and mimeType='{PRESENTATION_MIME_TYPE}' and trashed=false")

            for item in _iter_listing(store, query, page_size):
                parents = item.get("parents") or []
                if not parents:
                    logging.warning(f"Presentation {item['id']} has no parent, skipping")
                    continue
                if item["id"] in seen_documents:
                    # First parent wins, a document is processed exactly once
                    continue

                parent_id = next((parent for parent in parents if parent in cache.nodes), None)
                if parent_id is None:
                    logging.warning(f"Presentation {item['name']} ({item['id']}) has no parent in the tree, skipping")
                    continue
                seen_documents.add(item["id"])
                cache.add_document(parent_id, item["id"], item["name"])

        logging.info(f"Folder tree built: {cache.total_documents} presentations")
        return cache

    def _scan_subfolders(self, store, folder_id, owner_id, parent_clauses, seen, page_size):
        query = f"'{folder_id}' in parents and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"

        for item in _iter_listing(store, query, page_size):
            if item["id"] in seen:
                continue
            seen.add(item["id"])

            self.add_folder(item["id"], item["name"], parent_id=owner_id)
            parent_clauses.append(f"'{item['id']}' in parents")
            self._scan_subfolders(store, item["id"], item["id"], parent_clauses, seen, page_size)
    #endregion

    #region Mutations
    def add_folder(self, folder_id, name, parent_id=None):
        """
        Insert a folder. Without a parent it becomes a top-level node (level 1).

        Raises:
            NotFoundError: If parent_id is given but not in the tree
        """
        with self._lock:
            if parent_id is None:
                node = FolderNode(id=folder_id, name=name, level=1)
                self.folders[folder_id] = node
            else:
                parent = self.nodes.get(parent_id)
                if parent is None:
                    raise NotFoundError(f"Parent folder {parent_id} not found in cache")
                node = FolderNode(id=folder_id, name=name, level=parent.level + 1, parent_id=parent_id)
                parent.children.append(folder_id)

            self.nodes[folder_id] = node
            return node

    def add_document(self, folder_id, doc_id, doc_name):
        """
        Append a document to a folder and bubble the count up to the top-level node.

        Raises:
            NotFoundError: If the folder is not in the tree
        """
        with self._lock:
            node = self.nodes.get(folder_id)
            if node is None:
                raise NotFoundError(f"Folder {folder_id} not found in cache")

            ref = DocumentRef(id=doc_id, name=doc_name, footer_text=node.path)
            node.documents.append(ref)
            self._bubble(node, 1)
            return ref

    def remove_document(self, doc_id):
        """
        Remove a document and bubble the decrement up.

        Raises:
            NotFoundError: If the document is not in the tree
        """
        with self._lock:
            found = self.find_document(doc_id)
            if found is None:
                raise NotFoundError(f"Document {doc_id} not found in cache")

            ref, node = found
            node.documents.remove(ref)
            self._bubble(node, -1)
            return ref

    def _bubble(self, node, delta):
        while node is not None:
            node.total_documents += delta
            node = self.nodes.get(node.parent_id) if node.parent_id else None
        self.total_documents += delta
    #endregion

    #region Paths
    def build_paths(self, start_level, separator, name_normalizer):
        """
        Assign the path of every node and the footer text of every document.

        Nodes at or below `start_level` get the normalized names of their
        qualifying ancestors joined with `separator`, shallower nodes get "".
        Separator characters inside folder names are joined literally.
        """
        for node in list(self.folders.values()):
            self._build_path(node, "", start_level, separator, name_normalizer)

    def _build_path(self, node, parent_path, start_level, separator, name_normalizer):
        if node.level < start_level:
            node.path = ""
        elif parent_path:
            node.path = parent_path + separator + name_normalizer(node.name)
        else:
            node.path = name_normalizer(node.name)

        for ref in node.documents:
            ref.footer_text = node.path

        for child_id in node.children:
            self._build_path(self.nodes[child_id], node.path, start_level, separator, name_normalizer)
    #endregion

    #region Lookups
    def find_folder(self, folder_id):
        return DocumentIndex(self).find_folder(folder_id)

    def find_document(self, doc_id):
        return DocumentIndex(self).find_document(doc_id)

    def get_subfolder_by_name(self, name):
        """Top-level folder with this display name, or None."""
        for node in self.folders.values():
            if node.name == name:
                return node
        return None

    def iter_documents(self, folder_id):
        """Yield (DocumentRef, FolderNode) for every document in the subtree, depth-first."""
        node = self.nodes.get(folder_id)
        if node is None:
            raise NotFoundError(f"Folder {folder_id} not found in cache")

        for ref in list(node.documents):
            yield ref, node
        for child_id in list(node.children):
            yield from self.iter_documents(child_id)
    #endregion

    #region Snapshot
    def to_dict(self):
        return {
            "created_at": self.created_at,
            "total_documents": self.total_documents,
            "folders": {folder_id: self._node_to_dict(node) for folder_id, node in self.folders.items()},
        }

    def _node_to_dict(self, node):
        return {
            "name": node.name,
            "parent_id": node.parent_id,
            "level": node.level,
            "path": node.path,
            "total_documents": node.total_documents,
            "documents": [{"id": ref.id, "name": ref.name, "footer_text": ref.footer_text}
                          for ref in node.documents],
            "children": {child_id: self._node_to_dict(self.nodes[child_id]) for child_id in node.children},
        }

    @classmethod
    def from_dict(cls, data):
        cache = cls(created_at=data.get("created_at"))
        cache.total_documents = data.get("total_documents", 0)

        for folder_id, node_data in data.get("folders", {}).items():
            cache.folders[folder_id] = cache._node_from_dict(folder_id, node_data)
        return cache

    def _node_from_dict(self, folder_id, data):
        node = FolderNode(
            id=folder_id,
            name=data["name"],
            level=data["level"],
            parent_id=data.get("parent_id"),
            path=data.get("path", ""),
            total_documents=data.get("total_documents", 0),
            documents=[DocumentRef(**ref) for ref in data.get("documents", [])],
        )
        self.nodes[folder_id] = node

        for child_id, child_data in data.get("children", {}).items():
            self._node_from_dict(child_id, child_data)
            node.children.append(child_id)
        return node
    #endregion


def _iter_listing(store, query, page_size):
    """Yield every item of a paginated listing."""
    page_token = None
    while True:
        items, page_token = store.list_children(query=query, page_token=page_token, page_size=page_size)
        for item in items:
            yield item
        if not page_token:
            break
