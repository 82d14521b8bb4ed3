# identity.py
import logging
from typing import List

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from content import get_recipe, purge_recipes
from errors import NotFound
from models import (
    CommentDB,
    RecipeDB,
    UserDB,
    purchased_recipes,
    recipe_likes,
    saved_recipes,
    user_favorites,
    user_follows,
)
from name_sync import sync_author_name

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "bio", "profile_picture")


def get_user(db: Session, user_id: str) -> UserDB:
    user = db.get(UserDB, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def update_profile(db: Session, user_id: str, fields: dict) -> UserDB:
    """
    Apply only the profile fields present in ``fields``. An empty string is a
    value and gets applied; a missing key (or None) leaves the field alone.
    """
    user = get_user(db, user_id)
    changes = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}

    name_changed = "name" in changes and changes["name"] != user.name
    for key, value in changes.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    logger.info("[profile] user_id=%s updated fields=%s", user_id, sorted(changes))

    if name_changed:
        try:
            sync_author_name(db, user.id, user.name)
        except Exception:
            # the profile update itself already committed
            logger.exception("[profile] name sync failed for user_id=%s", user_id)
            db.rollback()
        db.refresh(user)
    return user


def toggle_saved(db: Session, user_id: str, recipe_id: str) -> bool:
    """Flip bookmark membership; returns whether the recipe is now saved."""
    get_recipe(db, recipe_id)

    removed = db.execute(
        delete(saved_recipes).where(
            saved_recipes.c.user_id == user_id,
            saved_recipes.c.recipe_id == recipe_id,
        )
    )
    if removed.rowcount:
        db.commit()
        return False

    try:
        db.execute(insert(saved_recipes).values(user_id=user_id, recipe_id=recipe_id))
        db.commit()
    except IntegrityError:
        # a concurrent request saved it first
        db.rollback()
    return True


def purchase(db: Session, user_id: str, recipe_id: str) -> bool:
    """
    Unlock a recipe for the user. Returns False when it was already unlocked;
    buying twice is not an error and purchases are never removed.
    """
    get_recipe(db, recipe_id)
    try:
        db.execute(insert(purchased_recipes).values(user_id=user_id, recipe_id=recipe_id))
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    logger.info("[purchase] user_id=%s unlocked recipe_id=%s", user_id, recipe_id)
    return True


def list_saved(db: Session, user_id: str) -> List[RecipeDB]:
    stmt = (
        select(RecipeDB)
        .join(saved_recipes, saved_recipes.c.recipe_id == RecipeDB.id)
        .where(saved_recipes.c.user_id == user_id)
        .order_by(saved_recipes.c.created_at.asc())
    )
    return list(db.scalars(stmt))


def list_purchased(db: Session, user_id: str) -> List[RecipeDB]:
    stmt = (
        select(RecipeDB)
        .join(purchased_recipes, purchased_recipes.c.recipe_id == RecipeDB.id)
        .where(purchased_recipes.c.user_id == user_id)
        .order_by(purchased_recipes.c.created_at.asc())
    )
    return list(db.scalars(stmt))


def list_users(db: Session) -> List[UserDB]:
    return db.query(UserDB).order_by(UserDB.created_at.desc()).all()


def delete_user(db: Session, user_id: str) -> None:
    """Hard delete a user together with their recipes, comments and memberships."""
    get_user(db, user_id)

    owned = [rid for (rid,) in db.execute(select(RecipeDB.id).where(RecipeDB.owner_id == user_id))]
    purge_recipes(db, owned)

    for table in (recipe_likes, saved_recipes, purchased_recipes, user_favorites):
        db.execute(delete(table).where(table.c.user_id == user_id))
    db.execute(
        delete(user_follows).where(
            (user_follows.c.follower_id == user_id) | (user_follows.c.followed_id == user_id)
        )
    )
    db.execute(delete(CommentDB).where(CommentDB.author_id == user_id))
    db.execute(delete(UserDB).where(UserDB.id == user_id))
    db.commit()
    db.expire_all()
    logger.info("[admin] user_id=%s deleted with %s recipes", user_id, len(owned))
