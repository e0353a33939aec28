from pydantic import BaseModel, Field, field_validator


class TypographyRules(BaseModel):
    body_font_size: float = 18
    heading_font_size: float = 24
    heading_level: int = 3
    line_spacing: float = 4
    paragraph_spacing: float = 8
    line_height_multiple: float = 1.2

    @field_validator("heading_level")
    @classmethod
    def _heading_level_in_range(cls, value: int) -> int:
        if not 1 <= value <= 6:
            raise ValueError("heading_level must be between 1 and 6")
        return value

class QuoteRules(BaseModel):
    tint: str = "#8E8E93"
    indent: float = 16

class EditorRules(BaseModel):
    typography: TypographyRules = Field(default_factory=TypographyRules)
    quote: QuoteRules = Field(default_factory=QuoteRules)
    bullet_marker: str = "• "
    image_max_height: float = 200

    @field_validator("bullet_marker")
    @classmethod
    def _marker_not_empty(cls, value: str) -> str:
        if not value or "\n" in value:
            raise ValueError("bullet_marker must be a non-empty single-line string")
        return value

class SerializerRules(BaseModel):
    merge_bullet_lists: bool = False
    heading_blocks: bool = False
    split_on_blank_lines: bool = False
    line_break_tag: str = "<br />"

class MediaRules(BaseModel):
    max_selection: int = 10
    content_type: str = "image/jpeg"
    file_extension: str = "jpg"
    storage_prefix: str = "posts_media"

class PostsRules(BaseModel):
    audiences: list[str] = Field(
        default_factory=lambda: ["Personal", "Friends", "Inner circle", "Everyone"]
    )
    default_audience: str = "Personal"
    title_required_for: list[str] = Field(default_factory=lambda: ["Thread"])
    parent_required_for: list[str] = Field(default_factory=lambda: ["Thread"])

class Rules(BaseModel):
    editor: EditorRules = Field(default_factory=EditorRules)
    serializer: SerializerRules = Field(default_factory=SerializerRules)
    media: MediaRules = Field(default_factory=MediaRules)
    posts: PostsRules = Field(default_factory=PostsRules)
