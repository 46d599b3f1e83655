import os
import re
import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Optional, Tuple

from constants import template_data
from constants.app_data import SETTINGS_FILE


@dataclass(frozen=True)
class Transform:
    scale_x: float
    scale_y: float
    translate_x: float
    translate_y: float
    unit: str = "EMU"

    @classmethod
    def from_api(cls, transform):
        # Protobuf JSON omits zero-valued fields
        return cls(
            scale_x=transform.get("scaleX", 0),
            scale_y=transform.get("scaleY", 0),
            translate_x=transform.get("translateX", 0),
            translate_y=transform.get("translateY", 0),
            unit=transform.get("unit", "EMU"),
        )

    def matches(self, transform):
        """Exact comparison of scale and translation against an API transform dict."""
        if not transform:
            return False
        return (transform.get("scaleX", 0) == self.scale_x and
                transform.get("scaleY", 0) == self.scale_y and
                transform.get("translateX", 0) == self.translate_x and
                transform.get("translateY", 0) == self.translate_y)

    def to_api(self):
        return {
            "scaleX": self.scale_x,
            "scaleY": self.scale_y,
            "translateX": self.translate_x,
            "translateY": self.translate_y,
            "unit": self.unit,
        }


@dataclass(frozen=True)
class Size:
    width: float
    height: float
    unit: str = "EMU"

    @classmethod
    def from_dict(cls, size):
        return cls(width=size["width"], height=size["height"], unit=size.get("unit", "EMU"))

    def matches(self, size):
        if not size:
            return False
        return (size.get("width", {}).get("magnitude") == self.width and
                size.get("height", {}).get("magnitude") == self.height)

    def to_api(self):
        return {
            "width": {"magnitude": self.width, "unit": self.unit},
            "height": {"magnitude": self.height, "unit": self.unit},
        }


@dataclass(frozen=True)
class RoleTemplate:
    """Canonical geometry and styling of one template text box (header, footer or page-id)."""
    transform: Transform
    size: Size
    text_style: MappingProxyType
    text_style_fields: str
    paragraph_style: Optional[MappingProxyType] = None

    @property
    def paragraph_style_fields(self):
        return ",".join(self.paragraph_style.keys()) if self.paragraph_style else ""


@dataclass(frozen=True)
class NormalizerConfig:
    """
    Immutable configuration, built once at start and handed to every constructor.

    Nothing in the normalizer reads settings ambiently, everything flows from here.
    """
    header: RoleTemplate
    footer: RoleTemplate
    page_id: RoleTemplate
    image_top_y: float
    image_bottom_y: float
    template_slide_element_count: int
    blank_board_max_elements: int
    blank_board_layout_id: Optional[str]
    header_text: Optional[str]
    header_forbidden_marker: Optional[str]
    page_id_link: str
    navigation_labels: Tuple[Tuple[str, str], ...]
    link_text_style: MappingProxyType
    link_text_style_fields: str
    notes_paragraph_style: MappingProxyType
    notes_paragraph_style_fields: str
    path_start_level: int
    path_separator: str
    path_name_strip_pattern: str
    watermark_property: str
    watermark_skew_seconds: int
    max_parents_per_query: int
    page_size: int
    animation_small_shape_area: int
    animation_textbox_min_top: int
    animation_textbox_max_top: int
    teacher_root_id: Optional[str] = None
    students_root_id: Optional[str] = None
    manifest_spreadsheet_id: Optional[str] = None
    validate_animations: bool = False

    def normalize_folder_name(self, name):
        """Strip ordering prefixes from a folder name. Separator characters are kept as-is."""
        return re.sub(self.path_name_strip_pattern, "", name).strip()

    @property
    def name_normalizer(self) -> Callable[[str], str]:
        return self.normalize_folder_name


def _freeze(style):
    return MappingProxyType(dict(style)) if style is not None else None


def default_settings():
    """Raw settings dict built from constants/template_data.py."""
    return {
        "header_transform": template_data.HEADER_TRANSFORM,
        "header_size": template_data.HEADER_SIZE,
        "header_text_style": template_data.HEADER_TEXT_STYLE,
        "header_text_style_fields": template_data.HEADER_TEXT_STYLE_FIELDS,
        "header_paragraph_style": template_data.HEADER_PARAGRAPH_STYLE,
        "footer_transform": template_data.FOOTER_TRANSFORM,
        "footer_size": template_data.FOOTER_SIZE,
        "footer_text_style": template_data.FOOTER_TEXT_STYLE,
        "footer_text_style_fields": template_data.FOOTER_TEXT_STYLE_FIELDS,
        "footer_paragraph_style": template_data.FOOTER_PARAGRAPH_STYLE,
        "page_id_transform": template_data.PAGE_ID_TRANSFORM,
        "page_id_size": template_data.PAGE_ID_SIZE,
        "page_id_text_style": template_data.PAGE_ID_TEXT_STYLE,
        "page_id_text_style_fields": template_data.PAGE_ID_TEXT_STYLE_FIELDS,
        "page_id_paragraph_style": template_data.PAGE_ID_PARAGRAPH_STYLE,
        "image_top_y": template_data.IMAGE_TOP_Y,
        "image_bottom_y": template_data.IMAGE_BOTTOM_Y,
        "template_slide_element_count": template_data.TEMPLATE_SLIDE_ELEMENT_COUNT,
        "blank_board_max_elements": template_data.BLANK_BOARD_MAX_ELEMENTS,
        "blank_board_layout_id": template_data.BLANK_BOARD_LAYOUT_ID,
        "header_text": template_data.HEADER_TEXT,
        "header_forbidden_marker": template_data.HEADER_FORBIDDEN_MARKER,
        "page_id_link": template_data.PAGE_ID_LINK,
        "navigation_labels": template_data.NAVIGATION_LABELS,
        "link_text_style": template_data.LINK_TEXT_STYLE,
        "link_text_style_fields": template_data.LINK_TEXT_STYLE_FIELDS,
        "notes_paragraph_style": template_data.NOTES_PARAGRAPH_STYLE,
        "notes_paragraph_style_fields": template_data.NOTES_PARAGRAPH_STYLE_FIELDS,
        "path_start_level": template_data.PATH_START_LEVEL,
        "path_separator": template_data.PATH_SEPARATOR,
        "path_name_strip_pattern": template_data.PATH_NAME_STRIP_PATTERN,
        "watermark_property": template_data.WATERMARK_PROPERTY,
        "watermark_skew_seconds": template_data.WATERMARK_SKEW_SECONDS,
        "max_parents_per_query": template_data.MAX_PARENTS_PER_QUERY,
        "page_size": template_data.PAGE_SIZE,
        "animation_small_shape_area": template_data.ANIMATION_SMALL_SHAPE_AREA,
        "animation_textbox_min_top": template_data.ANIMATION_TEXTBOX_MIN_TOP,
        "animation_textbox_max_top": template_data.ANIMATION_TEXTBOX_MAX_TOP,
        "teacher_root_id": template_data.TEACHER_ROOT_ID,
        "students_root_id": template_data.STUDENTS_ROOT_ID,
        "manifest_spreadsheet_id": template_data.MANIFEST_SPREADSHEET_ID,
        "validate_animations": False,
    }


def _role(settings, prefix):
    return RoleTemplate(
        transform=Transform.from_api(settings[f"{prefix}_transform"]),
        size=Size.from_dict(settings[f"{prefix}_size"]),
        text_style=_freeze(settings[f"{prefix}_text_style"]),
        text_style_fields=settings[f"{prefix}_text_style_fields"],
        paragraph_style=_freeze(settings[f"{prefix}_paragraph_style"]),
    )


def build_config(overrides=None):
    """
    Build a NormalizerConfig from the defaults overlaid with `overrides`.

    Args:
        overrides (dict): Settings keys to replace, same names as default_settings()

    Returns:
        NormalizerConfig: The frozen configuration

    Raises:
        ValueError: If an override key is unknown
    """
    settings = default_settings()
    overrides = overrides or {}

    unknown = set(overrides) - set(settings)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
    settings.update(overrides)

    return NormalizerConfig(
        header=_role(settings, "header"),
        footer=_role(settings, "footer"),
        page_id=_role(settings, "page_id"),
        image_top_y=settings["image_top_y"],
        image_bottom_y=settings["image_bottom_y"],
        template_slide_element_count=settings["template_slide_element_count"],
        blank_board_max_elements=settings["blank_board_max_elements"],
        blank_board_layout_id=settings["blank_board_layout_id"],
        header_text=settings["header_text"],
        header_forbidden_marker=settings["header_forbidden_marker"],
        page_id_link=settings["page_id_link"],
        navigation_labels=tuple(tuple(label) for label in settings["navigation_labels"]),
        link_text_style=_freeze(settings["link_text_style"]),
        link_text_style_fields=settings["link_text_style_fields"],
        notes_paragraph_style=_freeze(settings["notes_paragraph_style"]),
        notes_paragraph_style_fields=settings["notes_paragraph_style_fields"],
        path_start_level=settings["path_start_level"],
        path_separator=settings["path_separator"],
        path_name_strip_pattern=settings["path_name_strip_pattern"],
        watermark_property=settings["watermark_property"],
        watermark_skew_seconds=settings["watermark_skew_seconds"],
        max_parents_per_query=settings["max_parents_per_query"],
        page_size=settings["page_size"],
        animation_small_shape_area=settings["animation_small_shape_area"],
        animation_textbox_min_top=settings["animation_textbox_min_top"],
        animation_textbox_max_top=settings["animation_textbox_max_top"],
        teacher_root_id=settings["teacher_root_id"],
        students_root_id=settings["students_root_id"],
        manifest_spreadsheet_id=settings["manifest_spreadsheet_id"],
        validate_animations=settings["validate_animations"],
    )


def load_config(settings_path=None, **overrides):
    """
    Load settings.json (if present) and build the configuration.

    Keyword overrides (from the command line) win over the file.
    """
    settings_path = settings_path or os.path.join(os.getcwd(), SETTINGS_FILE)
    file_settings = {}

    if os.path.exists(settings_path):
        logging.info(f"Loading settings from {settings_path}")
        with open(settings_path, 'r', encoding='utf-8') as f:
            file_settings = json.load(f)
    else:
        logging.info(f"No settings file at {settings_path}, using template defaults")

    file_settings.update({key: value for key, value in overrides.items() if value is not None})
    return build_config(file_settings)
