from pydantic import BaseModel, ConfigDict, Field, field_validator


class UploadFieldRules(BaseModel):
    max_bytes: int = Field(gt=0)
    mime_types: list[str] = Field(min_length=1)
    extensions: list[str] = Field(min_length=1)
    max_files: int = Field(default=1, ge=1)

    @field_validator("extensions")
    @classmethod
    def _dotted(cls, v: list[str]) -> list[str]:
        return [e.lower() if e.startswith(".") else f".{e.lower()}" for e in v]

    @field_validator("mime_types")
    @classmethod
    def _lower(cls, v: list[str]) -> list[str]:
        return [m.lower() for m in v]


class UploadsRules(BaseModel):
    blog: dict[str, UploadFieldRules]
    podcast: dict[str, UploadFieldRules]


class SchedulerRules(BaseModel):
    interval_seconds: float = Field(default=60.0, gt=0)
    batch_limit: int = Field(default=100, ge=1)


class ActivityRules(BaseModel):
    recent_limit: int = Field(default=10, ge=1, le=100)


class ContentRules(BaseModel):
    default_page_size: int = Field(default=50, ge=1)
    max_page_size: int = Field(default=200, ge=1)


class Rules(BaseModel):
    uploads: UploadsRules
    scheduler: SchedulerRules = Field(default_factory=SchedulerRules)
    activity: ActivityRules = Field(default_factory=ActivityRules)
    content: ContentRules = Field(default_factory=ContentRules)

    model_config = ConfigDict(extra="forbid")
