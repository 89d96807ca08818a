"""
Configuration Options
=====================
Options the host renders for the analysis (a checkbox and a free-text field).
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class OptionType(str, Enum):
    CHECKBOX = "checkbox"
    TEXT = "text"


class ConfigurationOption(BaseModel):
    name: str
    type: OptionType
    value: Optional[str] = None

    def value_as_bool(self) -> bool:
        return (self.value or "").strip().lower() == "true"
