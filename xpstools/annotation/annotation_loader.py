"""
Annotation Loader

Reads annotation definitions from a YAML or JSON file and converts them
into Annotation objects.

Example (YAML):

    annotations:
      - text: TestXpsTools
        page_number: 0
        position_method: Absolute
        position: [37, 240]
        foreground_color: Blue
        text_size: 15
        font_weight: Bold
        is_italic: true
      - text: Stamp
        position_method: LabelRelative
        anchor_label: TOTAL
        position: [0, -5]
"""

import json
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidArgumentError
from .models import (
    Annotation,
    Color,
    FontWeight,
    LabelMatchMethod,
    Matrix,
    Point,
    PositioningMethod,
)

logger = logging.getLogger(__name__)


def _enum_key(value: str) -> str:
    """Normalise "LabelRelative", "label-relative" or "LABEL_RELATIVE" to "label_relative"."""
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", value.strip())
    return re.sub(r"[\s\-]+", "_", text).lower()


def _parse_enum(enum_type: type[Enum], value: Any) -> Any:
    if value is None or isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        key = _enum_key(value)
        for member in enum_type:
            if member.name.lower() == key or str(member.value).lower() == key:
                return member
    if isinstance(value, int) and issubclass(enum_type, int):
        return enum_type(value)
    raise ValueError(f"'{value}' is not a valid {enum_type.__name__}")


class AnnotationModel(BaseModel):
    """Validated annotation entry from a file."""

    model_config = ConfigDict(extra="forbid")

    text: str
    page_number: Optional[int] = Field(default=None, ge=0)
    position_method: PositioningMethod = PositioningMethod.UNKNOWN
    position: tuple[float, float] = (0.0, 0.0)
    anchor_label: Optional[str] = None
    match_method: Optional[LabelMatchMethod] = None
    foreground_color: Optional[Color] = None
    text_size: float = Field(default=12.0, gt=0)
    font_weight: Optional[FontWeight] = None
    font_name: Optional[str] = None
    is_italic: bool = False
    custom_transform: Optional[Matrix] = None

    @field_validator("position_method", mode="before")
    @classmethod
    def _position_method(cls, value):
        return _parse_enum(PositioningMethod, value)

    @field_validator("match_method", mode="before")
    @classmethod
    def _match_method(cls, value):
        return _parse_enum(LabelMatchMethod, value)

    @field_validator("font_weight", mode="before")
    @classmethod
    def _font_weight(cls, value):
        return _parse_enum(FontWeight, value)

    @field_validator("foreground_color", mode="before")
    @classmethod
    def _color(cls, value):
        if value is None or isinstance(value, Color):
            return value
        if isinstance(value, (list, tuple)) and len(value) in (3, 4):
            return Color.from_rgb(*value)
        if isinstance(value, str):
            try:
                return Color.from_string(value)
            except InvalidArgumentError as e:
                raise ValueError(str(e)) from e
        raise ValueError(f"Unsupported color value: {value!r}")

    @field_validator("custom_transform", mode="before")
    @classmethod
    def _transform(cls, value):
        if value is None or isinstance(value, Matrix):
            return value
        try:
            if isinstance(value, str):
                return Matrix.from_xps(value)
            if isinstance(value, (list, tuple)) and len(value) == 6:
                return Matrix(*(float(v) for v in value))
        except InvalidArgumentError as e:
            raise ValueError(str(e)) from e
        raise ValueError(f"Transform must be 6 numbers, got {value!r}")

    def to_annotation(self) -> Annotation:
        return Annotation(
            text=self.text,
            page_number=self.page_number,
            position_method=self.position_method,
            position=Point(*self.position),
            anchor_label=self.anchor_label,
            match_method=self.match_method,
            foreground_color=self.foreground_color,
            text_size=self.text_size,
            font_weight=self.font_weight,
            font_name=self.font_name,
            is_italic=self.is_italic,
            custom_transform=self.custom_transform,
        )


class AnnotationFile(BaseModel):
    annotations: List[AnnotationModel] = Field(default_factory=list)


def parse_annotations(data: Union[dict, list, None]) -> list[Annotation]:
    """
    Convert already-decoded annotation data into Annotation objects.

    Accepts either a list of entries or a mapping with an ``annotations`` list.

    Raises:
        InvalidArgumentError: If the data does not describe valid annotations
    """
    if data is None:
        return []
    if isinstance(data, list):
        data = {"annotations": data}

    try:
        parsed = AnnotationFile.model_validate(data)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid annotation definitions: {e}", "annotations") from e

    return [entry.to_annotation() for entry in parsed.annotations]


def load_annotations(path: Path | str) -> list[Annotation]:
    """
    Load annotations from a YAML (.yaml/.yml) or JSON file.

    Raises:
        InvalidArgumentError: If the file is missing or invalid
    """
    path = Path(path)
    if not path.is_file():
        raise InvalidArgumentError(f"Annotation file not found: {path}", "path")

    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise InvalidArgumentError(f"Cannot parse {path}: {e}", "path") from e

    annotations = parse_annotations(data)
    logger.info(f"Loaded {len(annotations)} annotations from {path}")
    return annotations
