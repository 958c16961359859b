from sqlalchemy import Column, ForeignKey, Table
from sqlalchemy.orm import relationship


def define(connection, types):
    """Tag model and the ``post_tags`` many-to-many table."""

    post_tags = Table(
        "post_tags",
        connection.metadata,
        Column("post_id", types.Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
        Column("tag_id", types.Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    )

    class Tag(connection.Base):
        __tablename__ = "tags"

        id = Column(types.Integer, primary_key=True, index=True)
        label = Column(types.String(50), unique=True, nullable=False)

        @classmethod
        def associate(cls, models):
            cls.posts = relationship(models["Post"], secondary=post_tags, back_populates="tags")

    return Tag
