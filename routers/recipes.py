# routers/recipes.py

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

import content
from auth import get_current_user
from db import get_db
from helpers import envelope
from models import UserDB
from schemas import (
    CommentIn,
    CommentOut,
    LeaderboardEntry,
    RecipeIn,
    RecipeOut,
    RecipeUpdate,
    dump,
    dump_many,
)

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("")
def list_recipes(db: Session = Depends(get_db)):
    """Approved recipes, newest first."""
    recipes = content.list_approved(db)
    return envelope(count=len(recipes), recipes=dump_many(RecipeOut, recipes))


@router.get("/leaderboard")
def leaderboard(db: Session = Depends(get_db)):
    rows = content.get_leaderboard(db)
    return envelope(leaderboard=dump_many(LeaderboardEntry, rows))


@router.get("/my-recipes")
def my_recipes(current: UserDB = Depends(get_current_user), db: Session = Depends(get_db)):
    recipes = content.list_by_owner(db, current.id)
    return envelope(recipes=dump_many(RecipeOut, recipes))


@router.post("", status_code=201)
def create_recipe(
    body: RecipeIn = Body(...),
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    recipe = content.create_recipe(db, current.id, current.name, body.model_dump())
    return envelope(recipe=dump(RecipeOut, recipe))


@router.get("/{recipe_id}")
def get_recipe(recipe_id: str, db: Session = Depends(get_db)):
    return envelope(recipe=dump(RecipeOut, content.get_recipe(db, recipe_id)))


@router.put("/{recipe_id}")
def update_recipe(
    recipe_id: str,
    body: RecipeUpdate = Body(...),
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    recipe = content.update_recipe(
        db, recipe_id, current.id, current.role, body.model_dump(exclude_unset=True)
    )
    return envelope(recipe=dump(RecipeOut, recipe))


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: str,
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    content.delete_recipe(db, recipe_id, current.id, current.role)
    return envelope("Recipe deleted")


@router.post("/{recipe_id}/like")
def like_recipe(
    recipe_id: str,
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    is_liked, count = content.toggle_like(db, recipe_id, current.id)
    return envelope(likesCount=count, isLiked=is_liked)


@router.post("/{recipe_id}/comment")
def comment_on_recipe(
    recipe_id: str,
    body: CommentIn = Body(...),
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comments = content.add_comment(db, recipe_id, current.id, current.name, body.text)
    return envelope(comments=dump_many(CommentOut, comments))
