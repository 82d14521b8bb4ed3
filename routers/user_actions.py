from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import identity
from auth import get_current_user
from db import get_db
from helpers import envelope
from models import UserDB
from schemas import RecipeOut, dump_many

# Mounted before routers.recipes so /recipes/saved is not taken for a recipe id.
router = APIRouter(prefix="/recipes", tags=["user-actions"])


@router.get("/saved")
def get_saved_recipes(current: UserDB = Depends(get_current_user), db: Session = Depends(get_db)):
    recipes = dump_many(RecipeOut, identity.list_saved(db, current.id))
    return envelope(savedRecipes=recipes, recipes=recipes)


@router.get("/purchased")
def get_purchased_recipes(current: UserDB = Depends(get_current_user), db: Session = Depends(get_db)):
    recipes = dump_many(RecipeOut, identity.list_purchased(db, current.id))
    return envelope(purchasedRecipes=recipes)


@router.post("/{recipe_id}/save")
def save_recipe(
    recipe_id: str,
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    is_saved = identity.toggle_saved(db, current.id, recipe_id)
    return envelope(isSaved=is_saved)


@router.post("/{recipe_id}/purchase")
def purchase_recipe(
    recipe_id: str,
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    unlocked = identity.purchase(db, current.id, recipe_id)
    return envelope("Recipe unlocked successfully" if unlocked else "Already purchased")
