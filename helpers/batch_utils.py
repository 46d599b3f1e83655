import logging

from googleapiclient.errors import HttpError

from helpers.drive_utils import retry_with_exponential_backoff
from helpers.errors import ExternalCallFailure


class SlidesBatchTransport:
    """Submit a list of requests to presentations().batchUpdate."""

    def __init__(self, slides_service):
        self.slides_service = slides_service

    def submit(self, document_id, operations):
        """
        Returns:
            list: The replies, one per operation, in request order
        """
        try:
            response = retry_with_exponential_backoff(lambda: self.slides_service.presentations().batchUpdate(
                presentationId=document_id,
                body={'requests': operations}
            ).execute())
        except HttpError as e:
            raise ExternalCallFailure(f"batchUpdate failed for {document_id}: {e}") from e
        return response.get('replies', [])


class BatchEditBuilder:
    """
    Accumulate Slides edit requests and submit them as one batchUpdate.

    Every add_* method returns the position of the request in the batch. The
    API does not label its replies, so creation results are matched back to
    their request by that position only.
    """

    def __init__(self, transport, document_id):
        self.transport = transport
        self.document_id = document_id
        self.operations = []

    def __len__(self):
        return len(self.operations)

    def _add(self, operation):
        self.operations.append(operation)
        return len(self.operations) - 1

    def add_create_slide(self, insertion_index, layout_id=None):
        """Adds a CreateSlide request - for the "blank board" slide at the end."""
        if layout_id:
            layout = {'layoutId': layout_id}
        else:
            layout = {'predefinedLayout': 'BLANK'}
        return self._add({'createSlide': {'insertionIndex': insertion_index, 'slideLayoutReference': layout}})

    def add_delete_text(self, object_id):
        """Adds a DeleteText request - deletes the entire text of the object."""
        return self._add({'deleteText': {'objectId': object_id, 'textRange': {'type': 'ALL'}}})

    def add_insert_text(self, object_id, text, insertion_index=0):
        return self._add({'insertText': {'objectId': object_id, 'text': text, 'insertionIndex': insertion_index}})

    def add_update_text_style(self, object_id, style, fields, start_index=None, end_index=None, link=None):
        """
        Adds an UpdateTextStyle request, on a fixed range when indexes are given, on
        the whole text otherwise. A link is merged into the style and its field list.
        """
        style = dict(style)
        if link is not None:
            style['link'] = link
            fields = f"{fields},link" if fields else "link"

        if start_index is None:
            text_range = {'type': 'ALL'}
        else:
            text_range = {'type': 'FIXED_RANGE', 'startIndex': start_index, 'endIndex': end_index}

        return self._add({'updateTextStyle': {
            'objectId': object_id,
            'style': style,
            'textRange': text_range,
            'fields': fields,
        }})

    def add_update_paragraph_style(self, object_id, style, fields):
        return self._add({'updateParagraphStyle': {
            'objectId': object_id,
            'style': dict(style),
            'textRange': {'type': 'ALL'},
            'fields': fields,
        }})

    def add_create_shape(self, page_object_id, size, transform, shape_type='TEXT_BOX'):
        """Adds a CreateShape request. The object id is left to the server, read it from the reply."""
        return self._add({'createShape': {
            'shapeType': shape_type,
            'elementProperties': {
                'pageObjectId': page_object_id,
                'size': size,
                'transform': transform,
            },
        }})

    def add_update_transform(self, object_id, transform):
        return self._add({'updatePageElementTransform': {
            'objectId': object_id,
            'transform': transform,
            'applyMode': 'ABSOLUTE',
        }})

    def add_delete_object(self, object_id):
        return self._add({'deleteObject': {'objectId': object_id}})

    def add_replace_all_text(self, find, replacement, page_object_ids=None, match_case=True):
        """Adds a ReplaceAllText request, over the whole presentation unless pages are given."""
        request = {
            'containsText': {'text': find, 'matchCase': match_case},
            'replaceText': replacement,
        }
        if page_object_ids:
            request['pageObjectIds'] = list(page_object_ids)
        return self._add({'replaceAllText': request})

    def execute(self):
        """
        Executes the requests added to the list.

        Returns:
            list: Replies in request order, None when there was nothing to submit
        """
        if not self.operations:
            return None

        logging.info(f"Submitting {len(self.operations)} requests to {self.document_id}")
        return self.transport.submit(self.document_id, list(self.operations))

    def reset(self):
        self.operations = []


def created_object_id(replies, position):
    """Server-assigned object id of the create request at `position`."""
    reply = replies[position] if replies and position < len(replies) else {}
    for key in ('createShape', 'createSlide'):
        if key in reply:
            return reply[key]['objectId']
    return None
