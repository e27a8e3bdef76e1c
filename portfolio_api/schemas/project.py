# File: portfolio_api/schemas/project.py

from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)


ProjectStatus = Literal["draft", "published", "archived"]
MediaType = Literal["image", "video", "gif"]

_any_url = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    # any scheme (mailto:, tel:, https:), stored exactly as sent
    try:
        _any_url.validate_python(value)
    except ValidationError:
        raise ValueError("Must be a valid URL")
    return value


UrlStr = Annotated[str, AfterValidator(_check_url)]


# -----------------------------
# Nested documents
# -----------------------------

class MediaFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Union[int, float, str]
    url: str = Field(min_length=1)
    type: MediaType
    name: Optional[str] = None
    size: Optional[int] = None
    caption: Optional[str] = None
    thumbnail: Optional[str] = None
    alt: Optional[str] = None
    # canonical storage key, taken from the upload response
    key: Optional[str] = None


class LinkButton(BaseModel):
    text: str = Field(min_length=1, max_length=100)
    url: UrlStr


def _check_release_date(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            date.fromisoformat(value)
        except ValueError:
            raise ValueError("releaseDate must be an ISO-8601 date")
    return value


def _check_cover(media_files: Optional[List[MediaFile]]) -> Optional[List[MediaFile]]:
    if media_files and media_files[0].type != "image":
        raise ValueError("The first media file is the cover and must be an image")
    return media_files


# -----------------------------
# Request bodies
# -----------------------------

class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    technologies: str = Field(min_length=1, max_length=200)
    category: str = Field(default="", max_length=100)
    releaseDate: Optional[str] = None
    mediaFiles: List[MediaFile] = []
    buttons: List[LinkButton] = []
    status: ProjectStatus = "published"
    sortOrder: int = Field(default=0, ge=0)
    featured: bool = False

    # legacy single-link fields
    imageUrl: Optional[UrlStr] = None
    projectUrl: Optional[UrlStr] = None
    githubUrl: Optional[UrlStr] = None

    @field_validator("releaseDate")
    @classmethod
    def validate_release_date(cls, v):
        return _check_release_date(v)

    @field_validator("mediaFiles")
    @classmethod
    def validate_cover(cls, v):
        return _check_cover(v)


class ProjectUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied;
    required fields may be omitted but not nulled.
    """

    title: str = Field(default=None, min_length=1, max_length=100)
    description: str = Field(default=None, min_length=1, max_length=1000)
    technologies: str = Field(default=None, min_length=1, max_length=200)
    category: str = Field(default=None, max_length=100)
    releaseDate: str = None
    mediaFiles: List[MediaFile] = None
    buttons: List[LinkButton] = None
    status: ProjectStatus = None
    sortOrder: int = Field(default=None, ge=0)
    featured: bool = None

    imageUrl: Optional[UrlStr] = None
    projectUrl: Optional[UrlStr] = None
    githubUrl: Optional[UrlStr] = None

    @field_validator("releaseDate")
    @classmethod
    def validate_release_date(cls, v):
        return _check_release_date(v)

    @field_validator("mediaFiles")
    @classmethod
    def validate_cover(cls, v):
        return _check_cover(v)


# -----------------------------
# Responses
# -----------------------------

class ProjectRead(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    title: str
    description: str
    technologies: str
    category: str = ""
    releaseDate: str
    mediaFiles: List[MediaFile] = []
    buttons: List[LinkButton] = []
    status: ProjectStatus = "published"
    sortOrder: int = 0
    featured: bool = False
    imageUrl: Optional[str] = None
    projectUrl: Optional[str] = None
    githubUrl: Optional[str] = None
    createdAt: str
    updatedAt: str


class Pagination(BaseModel):
    total: int
    offset: int
    limit: Optional[int] = None
    hasMore: bool


class ProjectListResponse(BaseModel):
    projects: List[ProjectRead]
    pagination: Pagination


class ProjectAdminListResponse(BaseModel):
    projects: List[ProjectRead]


class ProjectResponse(BaseModel):
    project: ProjectRead


class ProjectMessageResponse(ProjectResponse):
    message: str


class CategoryListResponse(BaseModel):
    categories: List[str]
