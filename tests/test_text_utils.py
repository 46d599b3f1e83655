from helpers.text_utils import (count_text_elements, extract_shape_text, find_speaker_notes, first_link,
                                link_key, text_runs, visible_text)


def shape(*runs):
    text_elements = [{"paragraphMarker": {"style": {}}}]
    for content, link in runs:
        style = {"link": link} if link else {}
        text_elements.append({"textRun": {"content": content, "style": style}})
    return {"objectId": "box", "shape": {"text": {"textElements": text_elements}}}


def test_extract_joins_runs_in_order():
    element = shape(("Al", None), ("gebra\n", None))
    assert extract_shape_text(element) == "Algebra\n"
    assert visible_text(element) == "Algebra"


def test_elements_without_text():
    assert extract_shape_text({"objectId": "img", "image": {}}) is None
    assert visible_text({"objectId": "empty", "shape": {"text": {"textElements": []}}}) is None
    assert count_text_elements({"objectId": "img", "image": {}}) == 0


def test_link_keys():
    assert link_key({"relativeLink": "NEXT_SLIDE"}) == "NEXT_SLIDE"
    assert link_key({"pageObjectId": "s3"}) == "page:s3"
    assert link_key({"slideIndex": 2}) == "index:2"
    assert link_key({"url": "https://example.com"}) == "url:https://example.com"
    assert link_key({}) is None
    assert link_key(None) is None


def test_text_runs_and_first_link():
    element = shape(("Menu", None), ("\t", None), ("01", {"pageObjectId": "s0"}))
    assert text_runs(element) == [("Menu", None), ("\t", None), ("01", "page:s0")]
    assert first_link(element) == "page:s0"
    assert count_text_elements(element) == 4
    assert first_link(shape(("plain", None))) is None


def notes_page(elements, notes_id=None):
    properties = {"speakerNotesObjectId": notes_id} if notes_id else {}
    return {"objectId": "s0", "slideProperties": {"notesPage": {"notesProperties": properties,
                                                                "pageElements": elements}}}


def test_speaker_notes_by_object_id():
    body = {"objectId": "body"}
    slide = notes_page([{"objectId": "thumb"}, {"objectId": "other"}, body], notes_id="body")
    assert find_speaker_notes(slide) is body


def test_speaker_notes_fall_back_to_second_element():
    body = {"objectId": "body"}
    assert find_speaker_notes(notes_page([{"objectId": "thumb"}, body], notes_id="gone")) is body
    assert find_speaker_notes(notes_page([{"objectId": "thumb"}])) is None
    assert find_speaker_notes({"objectId": "s0"}) is None
