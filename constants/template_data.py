"""
Default template geometry, texts and styles.

Every value here can be overridden from settings.json (see helpers/config_utils.py).
All geometry is expressed in EMU, the unit the Slides API reports transforms in.
"""


# Template Element Geometry
# ---------------------
HEADER_TRANSFORM = {"scaleX": 1, "scaleY": 1, "translateX": 311700, "translateY": 152400, "unit": "EMU"}
HEADER_SIZE = {"width": 8520600, "height": 572700, "unit": "EMU"}

FOOTER_TRANSFORM = {"scaleX": 1, "scaleY": 1, "translateX": 311700, "translateY": 4731300, "unit": "EMU"}
FOOTER_SIZE = {"width": 7000000, "height": 300000, "unit": "EMU"}

PAGE_ID_TRANSFORM = {"scaleX": 1, "scaleY": 1, "translateX": 8382000, "translateY": 4731300, "unit": "EMU"}
PAGE_ID_SIZE = {"width": 600000, "height": 300000, "unit": "EMU"}
"""
Reference transforms. The template generator always emits these exact values,
elements are matched by strict equality on scale and translation.
"""

IMAGE_TOP_Y = 800000
IMAGE_BOTTOM_Y = 2400000
"""
Vertical targets the primary image is snapped to (whichever is nearer).
"""

TEMPLATE_SLIDE_ELEMENT_COUNT = 4
"""
Header + footer + page-id + exactly one image.
"""

BLANK_BOARD_MAX_ELEMENTS = 2
"""
A last slide holding more elements than this is not a blank board.
"""

BLANK_BOARD_LAYOUT_ID = None
"""
Layout object id used when creating the blank board. None means predefined BLANK layout.
"""


# Texts
# ---------------------
HEADER_TEXT = None
"""
Format string for the header ({name} is the presentation name).
None keeps headers validate-only: they are never recreated.
"""

HEADER_FORBIDDEN_MARKER = "Copy of"

PAGE_ID_LINK = "LAST_SLIDE"
"""
Relative link attached to every page number, jumps to the blank board.
"""

NAVIGATION_LABELS = (
    ("First", "FIRST_SLIDE"),
    ("Prev", "PREVIOUS_SLIDE"),
    ("Next", "NEXT_SLIDE"),
    ("Last", "LAST_SLIDE"),
)
"""
Speaker notes navigation block, each label is followed by a tab.
"""


# Styles
# ---------------------
HEADER_TEXT_STYLE = {"fontFamily": "Arial", "fontSize": {"magnitude": 20, "unit": "PT"}, "bold": True}
HEADER_TEXT_STYLE_FIELDS = "fontFamily,fontSize,bold"
HEADER_PARAGRAPH_STYLE = {"alignment": "CENTER"}

FOOTER_TEXT_STYLE = {"fontFamily": "Arial", "fontSize": {"magnitude": 9, "unit": "PT"}}
FOOTER_TEXT_STYLE_FIELDS = "fontFamily,fontSize"
FOOTER_PARAGRAPH_STYLE = {"alignment": "START"}

PAGE_ID_TEXT_STYLE = {"fontFamily": "Arial", "fontSize": {"magnitude": 9, "unit": "PT"}}
PAGE_ID_TEXT_STYLE_FIELDS = "fontFamily,fontSize"
PAGE_ID_PARAGRAPH_STYLE = None

LINK_TEXT_STYLE = {"fontSize": {"magnitude": 14, "unit": "PT"}}
LINK_TEXT_STYLE_FIELDS = "fontSize"

NOTES_PARAGRAPH_STYLE = {"direction": "LEFT_TO_RIGHT", "alignment": "START"}
NOTES_PARAGRAPH_STYLE_FIELDS = "direction,alignment"


# Paths
# ---------------------
PATH_START_LEVEL = 1
PATH_SEPARATOR = " / "
PATH_NAME_STRIP_PATTERN = r"^\d+\s*[-_.]\s*"
"""
Ordering prefixes such as "01 - " are stripped from folder names in footers.
"""


# Watermark
# ---------------------
WATERMARK_PROPERTY = "normalizedAt"
WATERMARK_SKEW_SECONDS = 15


# Drive Listing
# ---------------------
MAX_PARENTS_PER_QUERY = 50
PAGE_SIZE = 100


# Animation Validation
# ---------------------
ANIMATION_SMALL_SHAPE_AREA = 914400 * 914400
ANIMATION_TEXTBOX_MIN_TOP = 724500
ANIMATION_TEXTBOX_MAX_TOP = 4731300


# Drive Locations
# ---------------------
TEACHER_ROOT_ID = None
"""
Drive folder holding the teacher presentations. Overridden by --url.
"""

STUDENTS_ROOT_ID = None
"""
Drive folder receiving one sub-folder per manifest tab in students mode.
"""

MANIFEST_SPREADSHEET_ID = None
"""
Google Sheet listing, per tab, the student presentations to derive.
"""
