"""
Pydantic schemas for catalog (product search / detail / browse node) requests.
"""
import re
from typing import List
from pydantic import BaseModel, Field, ConfigDict, field_validator

_ASIN_PATTERN = r"^[A-Za-z0-9]{10}$"

class ItemsRequest(BaseModel):
    item_ids: List[str] = Field(min_length=1, max_length=10, alias="itemIds")

    @field_validator("item_ids")
    @classmethod
    def validate_asins(cls, v: List[str]) -> List[str]:
        invalid = [asin for asin in v if not re.match(_ASIN_PATTERN, asin or "")]
        if invalid:
            raise ValueError(
                f"Invalid ASIN format(s): {', '.join(invalid)}. ASIN must be 10 alphanumeric characters"
            )
        return v

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {"itemIds": ["B08N5WRWNW", "B07FZ8S74R"]}
    })

class BrowseNodesRequest(BaseModel):
    browse_node_ids: List[str] = Field(min_length=1, max_length=10, alias="browseNodeIds")

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {"browseNodeIds": ["1389401031"]}
    })

class SearchIndexResolution(BaseModel):
    category: str
    search_index: str
