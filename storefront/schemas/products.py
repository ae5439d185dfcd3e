from pydantic import BaseModel, ConfigDict, Field


class ProductCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: int = Field(gt=0, description="Price in minor currency units (cents)")

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"name": "Course bundle", "description": "All lessons", "price": 2500}]}
    )


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    price: int
    currency: str
    created_at: str = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)
