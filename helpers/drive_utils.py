import io
import re
import time
import logging

from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from constants.app_data import FOLDER_MIME_TYPE, PRESENTATION_MIME_TYPE
from helpers.errors import ExternalCallFailure


def retry_with_exponential_backoff(func, max_retries=5, initial_delay=1, max_delay=60, backoff_factor=2):
    """
    Retry a function with exponential backoff on 429 (Too Many Requests) and 5xx (Server) errors.

    Args:
        func: Function to retry (a callable that takes no arguments)
        max_retries: Maximum number of retry attempts (default: 5)
        initial_delay: Initial delay in seconds before first retry (default: 1)
        max_delay: Maximum delay in seconds between retries (default: 60)
        backoff_factor: Factor to multiply delay by after each retry (default: 2)

    Returns:
        The return value of func() if successful

    Raises:
        HttpError: If the error is not retryable or if max_retries is exceeded
    """
    delay = initial_delay

    for attempt in range(max_retries + 1):
        try:
            return func()
        except HttpError as error:
            status = error.resp.status
            is_retryable = (status == 429) or (500 <= status < 600)

            if not is_retryable or attempt >= max_retries:
                raise

            wait_time = min(delay, max_delay)
            logging.warning(f"Google API returned {status}. Retrying in {wait_time:.1f} seconds... "
                            f"(attempt {attempt + 1}/{max_retries})")
            time.sleep(wait_time)
            delay *= backoff_factor


def parse_drive_url(url):
    """Extract folder ID or file ID from Google Drive URL."""
    logging.info(f"Parsing URL: {url}")

    # Personal drive root URLs
    personal_drive_patterns = [
        r'drive/u/\d+/my-drive',
        r'drive/my-drive',
        r'drive/home'
    ]

    for pattern in personal_drive_patterns:
        if re.search(pattern, url):
            return "root", "folder"

    folder_match = re.search(r'folders/([0-9A-Za-z_-]+)', url)
    if folder_match:
        return folder_match.group(1), "folder"

    # Presentation URLs: docs.google.com/presentation/d/<id>/edit
    file_match = re.search(r'/d/([0-9A-Za-z_-]+)', url)
    if file_match:
        return file_match.group(1), "file"

    id_match = re.search(r'id=([0-9A-Za-z_-]+)', url)
    if id_match:
        return id_match.group(1), "item"

    logging.warning(f"No match found for URL: {url}")
    return None, None


class GoogleDriveStore:
    """
    Document store over the Drive v3 and Slides v1 APIs.

    Every call is retried on 429/5xx. Errors left after retries are raised as
    ExternalCallFailure with the HttpError chained.
    """

    def __init__(self, drive_service, slides_service):
        self.drive_service = drive_service
        self.slides_service = slides_service

    def _call(self, description, func):
        try:
            return retry_with_exponential_backoff(func)
        except HttpError as e:
            logging.error(f"{description} failed: {e}")
            raise ExternalCallFailure(f"{description} failed: {e}") from e

    def list_children(self, folder_id=None, query=None, page_token=None, page_size=100,
                      fields="nextPageToken, files(id, name, mimeType, parents)"):
        """
        List one page of files.

        Args:
            folder_id (str): List the direct children of this folder (ignored when query is given)
            query (str): Full Drive query
            page_token (str): Token of the page to fetch

        Returns:
            tuple: (items, next_page_token)
        """
        if query is None:
            query = f"'{folder_id}' in parents and trashed=false"

        list_params = {
            'q': query,
            'pageSize': page_size,
            'fields': fields,
            'spaces': 'drive',
            'supportsAllDrives': True,
            'includeItemsFromAllDrives': True
        }
        if page_token:
            list_params['pageToken'] = page_token

        results = self._call("files.list", lambda: self.drive_service.files().list(**list_params).execute())
        return results.get('files', []), results.get('nextPageToken')

    def get_document(self, document_id):
        return self._call(f"presentations.get {document_id}",
                          lambda: self.slides_service.presentations().get(presentationId=document_id).execute())

    def get_metadata(self, file_id, fields="id, name, properties, modifiedTime"):
        return self._call(f"files.get {file_id}", lambda: self.drive_service.files().get(
            fileId=file_id, fields=fields, supportsAllDrives=True).execute())

    def update_metadata(self, file_id, properties):
        """Write custom file properties (merged with the existing ones by Drive)."""
        return self._call(f"files.update {file_id}", lambda: self.drive_service.files().update(
            fileId=file_id, body={'properties': properties}, fields='id, properties',
            supportsAllDrives=True).execute())

    def create_folder(self, parent_id, name):
        body = {'name': name, 'mimeType': FOLDER_MIME_TYPE, 'parents': [parent_id]}
        created = self._call(f"create folder {name}", lambda: self.drive_service.files().create(
            body=body, fields='id', supportsAllDrives=True).execute())
        logging.info(f"Created folder {name} ({created['id']}) under {parent_id}")
        return created['id']

    def create_document(self, parent_id, name):
        body = {'name': name, 'mimeType': PRESENTATION_MIME_TYPE, 'parents': [parent_id]}
        created = self._call(f"create presentation {name}", lambda: self.drive_service.files().create(
            body=body, fields='id', supportsAllDrives=True).execute())
        logging.info(f"Created presentation {name} ({created['id']}) under {parent_id}")
        return created['id']

    def copy_document(self, source_id, parent_id, name):
        body = {'name': name, 'parents': [parent_id]}
        copied = self._call(f"copy {source_id}", lambda: self.drive_service.files().copy(
            fileId=source_id, body=body, fields='id', supportsAllDrives=True).execute())
        logging.info(f"Copied {source_id} to {name} ({copied['id']})")
        return copied['id']

    def trash_document(self, file_id):
        self._call(f"trash {file_id}", lambda: self.drive_service.files().update(
            fileId=file_id, body={'trashed': True}, supportsAllDrives=True).execute())
        logging.info(f"Trashed {file_id}")

    def export_as(self, file_id, mime_type):
        """Export a Google file and return its bytes."""
        request = self.drive_service.files().export_media(fileId=file_id, mimeType=mime_type)
        file_data = io.BytesIO()
        downloader = MediaIoBaseDownload(file_data, request)

        done = False
        while not done:
            status, done = self._call(f"export {file_id}", downloader.next_chunk)
            logging.info(f"Export of {file_id}: {int(status.progress() * 100)}%")

        return file_data.getvalue()
