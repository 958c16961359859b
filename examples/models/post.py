from sqlalchemy import Column, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship


def define(connection, types):
    """Post model: belongs to a user, tagged through ``post_tags``."""

    class Post(connection.Base):
        __tablename__ = "posts"

        id = Column(types.Integer, primary_key=True, index=True)
        user_id = Column(types.Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
        title = Column(types.String(200), nullable=False)
        body = Column(types.Text, nullable=True)
        created_at = Column(types.DateTime(timezone=True), server_default=func.now())

        @classmethod
        def associate(cls, models):
            cls.author = relationship(models["User"], back_populates="posts")
            cls.tags = relationship(
                models["Tag"],
                secondary=connection.metadata.tables["post_tags"],
                back_populates="posts",
            )

        def __repr__(self):
            return f"<Post(id={self.id}, title={self.title})>"

    return Post
