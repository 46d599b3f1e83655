import io
import logging

from pptx import Presentation
from pptx.enum.dml import MSO_FILL
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.oxml.ns import qn

from helpers.outcomes import ValidationFinding


class AnimationValidator:
    """
    Flag slides that should reveal a solution with an animation but have none.

    Works on the PPTX export of a presentation. A slide is flagged when it holds
    an un-bordered picture, no timeline step, and at least one shape that looks
    like a solution drawn over the picture.
    """

    def __init__(self, config):
        self.small_shape_area = config.animation_small_shape_area
        self.textbox_min_top = config.animation_textbox_min_top
        self.textbox_max_top = config.animation_textbox_max_top

    def inspect(self, document_id, pptx_bytes):
        """
        Args:
            document_id (str): Presentation id, copied into the findings
            pptx_bytes (bytes): The exported presentation

        Returns:
            list: ValidationFinding per flagged slide
        """
        presentation = Presentation(io.BytesIO(pptx_bytes))
        findings = []

        for index, slide in enumerate(presentation.slides):
            if has_timeline(slide):
                continue

            pictures = [shape for shape in slide.shapes if is_unbordered_picture(shape)]
            if not pictures:
                continue

            solutions = [shape for shape in slide.shapes
                         if shape.shape_type != MSO_SHAPE_TYPE.PICTURE and self.looks_like_solution(shape)]
            if solutions:
                logging.info(f"{document_id}: slide {index + 1} should have an animation "
                             f"({len(solutions)} solution shapes)")
                findings.append(ValidationFinding(document_id, index, "should have animation"))

        return findings

    def looks_like_solution(self, shape):
        shape_type = shape.shape_type

        if shape_type in (MSO_SHAPE_TYPE.LINE, MSO_SHAPE_TYPE.FREEFORM, MSO_SHAPE_TYPE.TABLE):
            return True
        if getattr(shape, "has_table", False):
            return True
        if shape_type == MSO_SHAPE_TYPE.AUTO_SHAPE:
            return (shape.width or 0) * (shape.height or 0) < self.small_shape_area
        if shape_type == MSO_SHAPE_TYPE.TEXT_BOX:
            return self.textbox_min_top < (shape.top or 0) < self.textbox_max_top
        return False


def has_timeline(slide):
    """True when the slide timing tree holds at least one time node."""
    timing = slide.element.find(qn('p:timing'))
    if timing is None:
        return False
    return next(timing.iter(qn('p:par')), None) is not None


def is_unbordered_picture(shape):
    if shape.shape_type != MSO_SHAPE_TYPE.PICTURE:
        return False
    return shape.line.fill.type in (None, MSO_FILL.BACKGROUND)
