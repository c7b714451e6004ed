from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Direction = Literal["ascending", "descending"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SortSpec(_CamelModel):
    column: Optional[str] = None
    direction: Direction = "ascending"


class UserQuery(_CamelModel):
    search_text: str = ""
    column_filters: Dict[str, Optional[str]] = Field(default_factory=dict)
    sort: SortSpec = Field(default_factory=SortSpec)
    # Bounds are enforced by the engine: page is clamped, page_size raises.
    page: int = 1
    page_size: int = 10


class Aggregates(_CamelModel):
    total_users: int = 0
    active_users: int = 0
    total_admins: int = 0


class UserQueryResult(_CamelModel):
    items: List[Dict[str, Any]] = Field(default_factory=list)
    total_matched: int = 0
    page_count: int = 1
    page: int = 1
    page_size: int = 10
    aggregates: Aggregates = Field(default_factory=Aggregates)


class UsersExportRequest(_CamelModel):
    query: UserQuery = Field(default_factory=UserQuery)
    columns: Optional[List[str]] = None


class UsersPage(BaseModel):
    users: List[Dict[str, Any]]
    total: int
    page: int
    limit: int
