"""
Stargazer Backend — Star SQLAlchemy Model
==========================================

What:  ORM model representing the `stars` table.
How:   Inherits from the declarative Base; auto_migrate() reads its metadata
       to create or extend the table at startup.
Who:   Used by StarService for CRUD operations.

Table Design:
    - Integer primary key assigned by the database
    - name: unique lookup key; GitHub-style "owner/repo" values are expected,
      so slashes are allowed
    - description / url: free text, fully replaced on update
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stargazer.database import Base


class Star(Base):
    """
    A starred repository or link.

    Lifecycle:
        created by POST /stars, mutated by PUT /stars/{name}, destroyed by
        DELETE /stars/{name}. No soft-delete or history.
    """

    __tablename__ = "stars"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # unique=True together with index=True yields a unique index
    # (ix_stars_name), which auto_migrate can also add to older tables
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default="",
    )

    url: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        default="",
        server_default="",
    )

    def __repr__(self) -> str:
        return f"<Star(id={self.id}, name='{self.name}')>"
