from sqlalchemy import Column
from sqlalchemy.orm import relationship


def define(connection, types):
    """User model: one user has many posts."""

    class User(connection.Base):
        __tablename__ = "users"

        id = Column(types.Integer, primary_key=True, index=True)
        email = Column(types.String(255), unique=True, nullable=False)
        username = Column(types.String(50), unique=True, nullable=False)
        is_active = Column(types.Boolean, default=True)

        @classmethod
        def associate(cls, models):
            cls.posts = relationship(models["Post"], back_populates="author", cascade="all, delete-orphan")

        def __repr__(self):
            return f"<User(id={self.id}, username={self.username})>"

    return User
