# schemas.py

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from helpers import ref_id

Category = Literal["Breakfast", "Lunch", "Dinner", "Dessert"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _ids(value):
    return [ref_id(v) for v in (value or [])]


# ───── requests ─────

class UserSignup(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyEmail(CamelModel):
    email: Optional[str] = None
    otp: Optional[Union[str, int]] = None


class ResendOtp(CamelModel):
    email: Optional[str] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None


class RecipeIn(CamelModel):
    title: str = Field(min_length=1)
    category: Category
    ingredients: Union[List[str], str]
    steps: str = Field(min_length=1)
    difficulty: int = Field(ge=1, le=5)
    cooking_time: str = Field(min_length=1)
    image: Optional[str] = None
    is_premium: Union[bool, str] = False
    price: float = Field(0, ge=0)


class RecipeUpdate(CamelModel):
    title: Optional[str] = None
    category: Optional[Category] = None
    ingredients: Optional[Union[List[str], str]] = None
    steps: Optional[str] = None
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    cooking_time: Optional[str] = None
    image: Optional[str] = None
    is_premium: Optional[Union[bool, str]] = None
    price: Optional[float] = Field(None, ge=0)


class CommentIn(CamelModel):
    text: Optional[str] = None


class StatusUpdate(CamelModel):
    status: Optional[str] = None


class ChatIn(CamelModel):
    message: Optional[str] = None


# ───── responses ─────

class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    is_verified: bool
    bio: str = ""
    profile_picture: str = ""
    created_at: Optional[datetime] = None


class UserDetailOut(UserOut):
    saved_recipes: List[str] = []
    purchased_recipes: List[str] = []
    favorites: List[str] = []
    following: List[str] = []
    followers: List[str] = []

    @field_validator(
        "saved_recipes", "purchased_recipes", "favorites", "following", "followers",
        mode="before",
    )
    @classmethod
    def _as_ids(cls, value):
        return _ids(value)


class CommentOut(CamelModel):
    id: int
    author_id: str
    author_name: str
    text: str
    created_at: datetime


class RecipeOut(CamelModel):
    id: str
    title: str
    category: str
    ingredients: List[str]
    steps: str
    difficulty: int
    cooking_time: str
    image: Optional[str] = None
    owner_id: str
    chef_name: str
    status: str
    is_premium: bool
    price: float
    likes: List[str] = []
    likes_count: int = 0
    comments: List[CommentOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("likes", mode="before")
    @classmethod
    def _like_ids(cls, value):
        return _ids(value)

    @model_validator(mode="after")
    def _count_likes(self):
        self.likes_count = len(self.likes)
        return self


class LeaderboardEntry(CamelModel):
    id: str
    title: str
    chef_name: str
    likes_count: int
    category: str


def dump(model_cls, obj) -> dict:
    return model_cls.model_validate(obj).model_dump(by_alias=True, mode="json")


def dump_many(model_cls, objs) -> list:
    return [dump(model_cls, o) for o in objs]
