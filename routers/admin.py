from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

import identity
import moderation
from auth import require_admin
from db import get_db
from helpers import envelope
from schemas import RecipeOut, StatusUpdate, UserOut, dump, dump_many

# every route here needs an admin session
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users")
def list_users(db: Session = Depends(get_db)):
    return envelope(users=dump_many(UserOut, identity.list_users(db)))


@router.delete("/users/{user_id}")
def delete_user(user_id: str, db: Session = Depends(get_db)):
    identity.delete_user(db, user_id)
    return envelope("User deleted")


@router.get("/recipes")
def list_recipes(db: Session = Depends(get_db)):
    """All recipes regardless of status, newest first."""
    return envelope(recipes=dump_many(RecipeOut, moderation.list_all_recipes(db)))


@router.put("/recipes/{recipe_id}/status")
def update_recipe_status(recipe_id: str, body: StatusUpdate = Body(...), db: Session = Depends(get_db)):
    recipe = moderation.set_status(db, recipe_id, body.status)
    return envelope(recipe=dump(RecipeOut, recipe))


@router.delete("/recipes/{recipe_id}")
def delete_recipe(recipe_id: str, db: Session = Depends(get_db)):
    moderation.delete_recipe(db, recipe_id)
    return envelope("Recipe deleted")
