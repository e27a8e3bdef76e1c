# File: portfolio_api/schemas/settings.py

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from portfolio_api.schemas.project import LinkButton


NonEmptyStr = Annotated[str, Field(min_length=1)]


class StudioSettings(BaseModel):
    aboutText: str = Field(min_length=1, max_length=2000)
    clients: List[NonEmptyStr] = Field(max_length=50)
    services: List[NonEmptyStr] = Field(max_length=20)
    recognitions: Optional[List[NonEmptyStr]] = Field(default=None, max_length=10)


class ContactSettings(BaseModel):
    buttons: List[LinkButton] = []


class SettingsUpdate(BaseModel):
    """
    Shallow-merged into the stored settings document. Unknown top-level
    keys (siteTitle, socialLinks, ...) are accepted as-is.
    """

    model_config = ConfigDict(extra="allow")

    studio: Optional[StudioSettings] = None
    contact: Optional[ContactSettings] = None
