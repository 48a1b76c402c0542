"""Base model for OVMS server payloads.

Every wire model inherits from :class:`OvmsBaseModel` which is frozen,
ignores unknown keys (the server adds fields between releases) and
accepts both the wire alias and the Python field name.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class OvmsBaseModel(BaseModel):
    """Base for OVMS server response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
