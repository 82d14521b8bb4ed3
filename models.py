import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from db import Base

STATUSES = ("pending", "approved", "rejected")


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _user_fk():
    return ForeignKey("users.id", ondelete="CASCADE")


def _recipe_fk():
    return ForeignKey("recipes.id", ondelete="CASCADE")


# Membership tables. Each row is one set member; the composite primary key
# makes add/remove a single-row INSERT/DELETE.
recipe_likes = Table(
    "recipe_likes",
    Base.metadata,
    Column("recipe_id", String, _recipe_fk(), primary_key=True),
    Column("user_id", String, _user_fk(), primary_key=True),
    Column("created_at", DateTime(timezone=True), default=utcnow, nullable=False),
)

saved_recipes = Table(
    "saved_recipes",
    Base.metadata,
    Column("user_id", String, _user_fk(), primary_key=True),
    Column("recipe_id", String, _recipe_fk(), primary_key=True),
    Column("created_at", DateTime(timezone=True), default=utcnow, nullable=False),
)

purchased_recipes = Table(
    "purchased_recipes",
    Base.metadata,
    Column("user_id", String, _user_fk(), primary_key=True),
    Column("recipe_id", String, _recipe_fk(), primary_key=True),
    Column("created_at", DateTime(timezone=True), default=utcnow, nullable=False),
)

# reserved: no flow writes these yet
user_favorites = Table(
    "user_favorites",
    Base.metadata,
    Column("user_id", String, _user_fk(), primary_key=True),
    Column("recipe_id", String, _recipe_fk(), primary_key=True),
)

user_follows = Table(
    "user_follows",
    Base.metadata,
    Column("follower_id", String, _user_fk(), primary_key=True),
    Column("followed_id", String, _user_fk(), primary_key=True),
)


# SQLAlchemy model for users
class UserDB(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, index=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")
    is_verified = Column(Boolean, nullable=False, default=False)
    otp = Column(String, nullable=True)  # hash of the pending code
    otp_expiry = Column(DateTime(timezone=True), nullable=True)
    bio = Column(String, nullable=False, default="")
    profile_picture = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    recipes = relationship("RecipeDB", viewonly=True)

    # Collections are read-only on the ORM side; writes go through the
    # membership tables directly.
    saved_recipes = relationship("RecipeDB", secondary=saved_recipes, viewonly=True)
    purchased_recipes = relationship("RecipeDB", secondary=purchased_recipes, viewonly=True)
    favorites = relationship("RecipeDB", secondary=user_favorites, viewonly=True)
    following = relationship(
        "UserDB",
        secondary=user_follows,
        primaryjoin=id == user_follows.c.follower_id,
        secondaryjoin=id == user_follows.c.followed_id,
        viewonly=True,
    )
    followers = relationship(
        "UserDB",
        secondary=user_follows,
        primaryjoin=id == user_follows.c.followed_id,
        secondaryjoin=id == user_follows.c.follower_id,
        viewonly=True,
    )

    @property
    def has_pending_challenge(self) -> bool:
        return self.otp is not None


# SQLAlchemy model for recipes
class RecipeDB(Base):
    __tablename__ = "recipes"
    id = Column(String, primary_key=True, index=True, default=new_id)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False)
    ingredients = Column(JSON, nullable=False, default=list)
    steps = Column(Text, nullable=False)
    difficulty = Column(Integer, nullable=False)
    cooking_time = Column(String, nullable=False)
    image = Column(String, nullable=True)
    owner_id = Column(String, _user_fk(), nullable=False, index=True)
    chef_name = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    is_premium = Column(Boolean, nullable=False, default=False)
    price = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("UserDB", viewonly=True)
    likes = relationship("UserDB", secondary=recipe_likes, viewonly=True)
    comments = relationship(
        "CommentDB",
        order_by=lambda: [CommentDB.created_at, CommentDB.id],
        viewonly=True,
    )


# SQLAlchemy model for comments; author_name is a snapshot of UserDB.name
class CommentDB(Base):
    __tablename__ = "recipe_comments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    recipe_id = Column(String, _recipe_fk(), nullable=False, index=True)
    author_id = Column(String, _user_fk(), nullable=False, index=True)
    author_name = Column(String, nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    recipe = relationship("RecipeDB", viewonly=True)
