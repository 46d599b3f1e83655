from helpers.errors import NotFoundError


class DocumentIndex:
    """
    Id lookups over a FolderTreeCache.

    Searches are recursive and depth-first over the whole forest, starting from
    the top-level folders. Lookups return None when nothing matches.
    """

    def __init__(self, cache):
        self.cache = cache

    def find_folder(self, folder_id):
        for node in self.cache.folders.values():
            found = self._find_folder(node, folder_id)
            if found is not None:
                return found
        return None

    def _find_folder(self, node, folder_id):
        if node.id == folder_id:
            return node
        for child_id in node.children:
            found = self._find_folder(self.cache.nodes[child_id], folder_id)
            if found is not None:
                return found
        return None

    def find_document(self, doc_id):
        """Return (DocumentRef, owning FolderNode) or None."""
        for node in self.cache.folders.values():
            found = self._find_document(node, doc_id)
            if found is not None:
                return found
        return None

    def _find_document(self, node, doc_id):
        for ref in node.documents:
            if ref.id == doc_id:
                return ref, node
        for child_id in node.children:
            found = self._find_document(self.cache.nodes[child_id], doc_id)
            if found is not None:
                return found
        return None

    def find_folder_by_name(self, name):
        for node in self.cache.folders.values():
            found = self._find_folder_by_name(node, name)
            if found is not None:
                return found
        return None

    def _find_folder_by_name(self, node, name):
        if node.name == name:
            return node
        for child_id in node.children:
            found = self._find_folder_by_name(self.cache.nodes[child_id], name)
            if found is not None:
                return found
        return None

    def resolve(self, item_id):
        """
        Resolve an id to ("folder", FolderNode) or ("document", (DocumentRef, FolderNode)).

        Raises:
            NotFoundError: If the id is neither a cached folder nor a cached document
        """
        node = self.find_folder(item_id)
        if node is not None:
            return "folder", node

        found = self.find_document(item_id)
        if found is not None:
            return "document", found

        raise NotFoundError(f"{item_id} not found in cache")
