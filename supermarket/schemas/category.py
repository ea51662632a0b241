from pydantic import Field, field_validator

from supermarket.schemas.common import StoreModel, Timestamp

NAME_MAX_LENGTH = 50


class CategoryNameMixin:
    @field_validator("name", check_fields=False)
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Category name must not be blank")
        return v


class CategoryBase(CategoryNameMixin, StoreModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, json_schema_extra={"example": "Beverages"})


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CategoryNameMixin, StoreModel):
    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)


class Category(CategoryBase):
    id: str
    created_at: Timestamp
    updated_at: Timestamp
