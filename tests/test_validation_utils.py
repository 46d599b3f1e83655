import io

import pytest
from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.oxml import parse_xml
from pptx.oxml.ns import nsdecls
from pptx.util import Emu

from helpers.outcomes import ValidationFinding
from helpers.validation_utils import AnimationValidator


TIMING_XML = (
    f'<p:timing {nsdecls("p")}><p:tnLst><p:par>'
    '<p:cTn id="1" dur="indefinite" restart="never" nodeType="tmRoot"/>'
    '</p:par></p:tnLst></p:timing>'
)


def picture_stream():
    stream = io.BytesIO()
    Image.new("RGB", (20, 20), "white").save(stream, format="PNG")
    stream.seek(0)
    return stream


def add_slide(presentation, picture=True, bordered=False, small_shape=False, big_shape=False,
              text_top=None, timeline=False):
    slide = presentation.slides.add_slide(presentation.slide_layouts[6])
    if picture:
        shape = slide.shapes.add_picture(picture_stream(), Emu(0), Emu(0))
        if bordered:
            shape.line.color.rgb = RGBColor(0, 0, 0)
    if small_shape:
        slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, Emu(1000000), Emu(1000000), Emu(100000), Emu(100000))
    if big_shape:
        slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, Emu(0), Emu(0), Emu(5000000), Emu(3000000))
    if text_top is not None:
        slide.shapes.add_textbox(Emu(1000000), Emu(text_top), Emu(2000000), Emu(300000)).text = "x = 4"
    if timeline:
        slide.element.append(parse_xml(TIMING_XML))
    return slide


@pytest.fixture
def pptx_bytes():
    presentation = Presentation()
    add_slide(presentation, small_shape=True)                   # 0: flagged
    add_slide(presentation, small_shape=True, timeline=True)    # 1: animated
    add_slide(presentation, bordered=True, small_shape=True)    # 2: framed picture
    add_slide(presentation, big_shape=True)                     # 3: large shape
    add_slide(presentation, text_top=1000000)                   # 4: flagged
    add_slide(presentation, picture=False, small_shape=True)    # 5: no picture
    add_slide(presentation, text_top=100000)                    # 6: text in the header band

    stream = io.BytesIO()
    presentation.save(stream)
    return stream.getvalue()


def test_flags_slides_missing_animation(config, pptx_bytes):
    findings = AnimationValidator(config).inspect("doc1", pptx_bytes)

    assert findings == [
        ValidationFinding("doc1", 0, "should have animation"),
        ValidationFinding("doc1", 4, "should have animation"),
    ]


def test_presentation_without_pictures_has_no_findings(config):
    presentation = Presentation()
    add_slide(presentation, picture=False, text_top=1000000)
    stream = io.BytesIO()
    presentation.save(stream)

    assert AnimationValidator(config).inspect("doc1", stream.getvalue()) == []
