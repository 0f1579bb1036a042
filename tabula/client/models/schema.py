"""Table schema models produced by the upstream schema/code generator."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import ColumnType


class LinkTarget(BaseModel):
    """Target table of a link column."""

    table: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)


class Column(BaseModel):
    """Column definition.

    ``link`` is set for link columns, ``columns`` for object columns.
    """

    name: str = Field(..., min_length=1)
    type: ColumnType
    link: LinkTarget | None = None
    columns: tuple[Column, ...] | None = None

    model_config = ConfigDict(frozen=True)


Column.model_rebuild()


class Table(BaseModel):
    """Table definition with its ordered columns."""

    name: str = Field(..., min_length=1)
    columns: tuple[Column, ...] = ()

    model_config = ConfigDict(frozen=True)

    def get_column(self, name: str) -> Column | None:
        """Look up a column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None


class Schema(BaseModel):
    """Ordered list of tables in a database branch."""

    tables: tuple[Table, ...] = ()

    model_config = ConfigDict(frozen=True)

    def get_table(self, name: str) -> Table | None:
        """Look up a table by name. Returns None if it is not declared."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_names(self) -> list[str]:
        return [table.name for table in self.tables]
