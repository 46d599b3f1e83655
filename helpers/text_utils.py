from typing import List, Optional, Tuple


def _text_elements(element) -> list:
    return element.get("shape", {}).get("text", {}).get("textElements", [])


def extract_shape_text(element) -> Optional[str]:
    """
    Concatenate every text run of a shape, in order.

    Returns None for elements that are not shapes or carry no text runs.
    """
    runs = [text_element["textRun"].get("content", "")
            for text_element in _text_elements(element) if "textRun" in text_element]
    if not runs:
        return None
    return "".join(runs)


def visible_text(element) -> Optional[str]:
    """Shape text without the paragraph end the Slides API appends to every text box."""
    text = extract_shape_text(element)
    if text is None:
        return None
    return text.rstrip("\n")


def link_key(link) -> Optional[str]:
    """
    Reduce a Slides link object to one comparable string.

    A relative link is kept as-is ("NEXT_SLIDE"), page links become "page:<id>",
    slide index links "index:<n>" and urls "url:<url>".
    """
    if not link:
        return None
    if "relativeLink" in link:
        return link["relativeLink"]
    if "pageObjectId" in link:
        return f"page:{link['pageObjectId']}"
    if "slideIndex" in link:
        return f"index:{link['slideIndex']}"
    if "url" in link:
        return f"url:{link['url']}"
    return None


def text_runs(element) -> List[Tuple[str, Optional[str]]]:
    """(content, link key) for every text run of a shape, in order."""
    runs = []
    for text_element in _text_elements(element):
        run = text_element.get("textRun")
        if run is None:
            continue
        runs.append((run.get("content", ""), link_key(run.get("style", {}).get("link"))))
    return runs


def first_link(element) -> Optional[str]:
    """Link key of the first linked text run, None if nothing is linked."""
    for _, link in text_runs(element):
        if link:
            return link
    return None


def count_text_elements(element) -> int:
    """Number of text segments (runs, paragraph markers, auto texts) of a shape."""
    return len(_text_elements(element))


def find_speaker_notes(slide):
    """
    Return the speaker notes body shape of a slide, None if the slide has no notes page.

    Uses speakerNotesObjectId and falls back to the second element of the notes
    page, the position the body placeholder has in every Slides notes master.
    """
    notes_page = slide.get("slideProperties", {}).get("notesPage")
    if not notes_page:
        return None

    elements = notes_page.get("pageElements", [])
    notes_id = notes_page.get("notesProperties", {}).get("speakerNotesObjectId")
    for element in elements:
        if notes_id and element.get("objectId") == notes_id:
            return element

    if len(elements) > 1:
        return elements[1]
    return None
