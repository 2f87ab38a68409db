from pydantic import BaseModel, ConfigDict, Field


# --- User ---

class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=255)
    bio: str | None = None
    image: str | None = Field(None, max_length=500)


class UserCreateRequest(BaseModel):
    user: UserCreate


class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, max_length=255)
    bio: str | None = None
    image: str | None = Field(None, max_length=500)


class UserUpdateRequest(BaseModel):
    user: UserUpdate


# --- Comment ---

class CommentCreate(BaseModel):
    body: str = Field(min_length=1)


class CommentCreateRequest(BaseModel):
    comment: CommentCreate


# --- Article ---

class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: str = ""
    body: str
    # Stored verbatim: order kept, no case or whitespace folding.
    tag_list: list[str] = Field(default_factory=list, alias="tagList")

    model_config = ConfigDict(populate_by_name=True)


class ArticleUpdate(BaseModel):
    """
    Partial update payload.

    Only fields the caller actually sent are applied
    (``model_dump(exclude_unset=True)``).  There is no ``slug`` field: the
    slug is fixed when the article is created.
    """

    title: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = None
    body: str | None = None
    tag_list: list[str] | None = Field(None, alias="tagList")

    model_config = ConfigDict(populate_by_name=True)


class ArticleCreateRequest(BaseModel):
    article: ArticleCreate


class ArticleUpdateRequest(BaseModel):
    article: ArticleUpdate


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_users: int
    total_articles: int
    total_comments: int
    total_tags: int
    total_favorites: int
    avg_favorites_per_article: float
