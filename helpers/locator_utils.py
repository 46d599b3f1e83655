import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from helpers.errors import InvalidTemplateError
from helpers.text_utils import first_link, visible_text


class DuplicatePolicy(enum.Enum):
    """
    What to do when several elements of one slide match the same role.

    LAST_WINS is how decks have always been classified and stays the default
    until the behaviour is revisited.
    """
    LAST_WINS = "last_wins"
    FIRST_WINS = "first_wins"
    RAISE = "raise"


@dataclass
class ClassifiedElement:
    object_id: str
    index: int
    text: Optional[str]
    transform: dict
    size: dict
    link: Optional[str] = None


@dataclass
class SlideElementClassification:
    header: Optional[ClassifiedElement] = None
    footer: Optional[ClassifiedElement] = None
    page_id: Optional[ClassifiedElement] = None
    image: Optional[ClassifiedElement] = None
    stray_ids: List[str] = field(default_factory=list)
    element_count: int = 0


ROLES = ("header", "footer", "page_id")


def _is_text_box(element):
    return element.get("shape", {}).get("shapeType") == "TEXT_BOX"


class TemplateElementLocator:
    """
    Classify the page elements of a slide into template roles.

    Text boxes are matched on their exact transform (scale and translation),
    so the result does not depend on element insertion order.
    """

    def __init__(self, config, duplicate_policy=DuplicatePolicy.LAST_WINS):
        self.config = config
        self.duplicate_policy = duplicate_policy

    def classify(self, slide):
        elements = slide.get("pageElements", [])
        result = SlideElementClassification(element_count=len(elements))

        for index, element in enumerate(elements):
            if "image" in element:
                if len(elements) == self.config.template_slide_element_count:
                    result.image = self._classified(element, index, None)
                continue

            if not _is_text_box(element):
                continue

            transform = element.get("transform", {})
            for role in ROLES:
                if not getattr(self.config, role).transform.matches(transform):
                    continue

                text = visible_text(element)
                if role == "page_id" and not (text and text.strip()):
                    # Empty page-id box: a stray placeholder
                    result.stray_ids.append(element["objectId"])
                    break

                self._assign(result, role, self._classified(element, index, text), slide)
                break

        return result

    def _classified(self, element, index, text):
        return ClassifiedElement(
            object_id=element["objectId"],
            index=index,
            text=text,
            transform=element.get("transform", {}),
            size=element.get("size", {}),
            link=first_link(element),
        )

    def _assign(self, result, role, classified, slide):
        current = getattr(result, role)
        if current is None:
            setattr(result, role, classified)
            return

        if self.duplicate_policy is DuplicatePolicy.RAISE:
            raise InvalidTemplateError(
                f"Slide {slide.get('objectId')}: elements {current.object_id} and "
                f"{classified.object_id} both match the {role} transform")

        logging.warning(f"Slide {slide.get('objectId')}: several {role} elements, "
                        f"policy {self.duplicate_policy.value}")
        if self.duplicate_policy is DuplicatePolicy.LAST_WINS:
            setattr(result, role, classified)
