"""Connection-style page of transactions."""

from pydantic import BaseModel, Field

from merchant_ledger.models.transaction import Transaction


class Edge(BaseModel):
    """A record together with the cursor that resumes right after it."""

    cursor: str = Field(description="Opaque resume point for this record")
    node: Transaction


class PageInfo(BaseModel):
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: str | None = None
    end_cursor: str | None = Field(
        default=None,
        description="Cursor to pass as 'after' to fetch the next page",
    )


class Page(BaseModel):
    """One page of records in descending sort-key order."""

    edges: list[Edge] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo)

    @property
    def nodes(self) -> list[Transaction]:
        return [edge.node for edge in self.edges]

    def __len__(self) -> int:
        return len(self.edges)
