from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"


class FontSize(str, enum.Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Preferences(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    theme: Theme = Theme.LIGHT
    font_size: FontSize = FontSize.MEDIUM


class PreferencesUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    theme: Optional[Theme] = None
    font_size: Optional[FontSize] = None
