# content.py
import logging
from typing import List, Sequence, Tuple

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import NotFound, Unauthorized, ValidationError
from helpers import parse_bool, parse_ingredients, same_ref
from models import (
    CommentDB,
    RecipeDB,
    purchased_recipes,
    recipe_likes,
    saved_recipes,
    user_favorites,
)

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10
EDITABLE_FIELDS = (
    "title", "category", "ingredients", "steps", "difficulty",
    "cooking_time", "image", "is_premium", "price",
)
TEXT_FIELDS = ("title", "steps", "cooking_time")


def get_recipe(db: Session, recipe_id: str) -> RecipeDB:
    recipe = db.get(RecipeDB, recipe_id)
    if recipe is None:
        raise NotFound("Recipe not found")
    return recipe


def list_approved(db: Session) -> List[RecipeDB]:
    return (
        db.query(RecipeDB)
        .filter(RecipeDB.status == "approved")
        .order_by(RecipeDB.created_at.desc())
        .all()
    )


def list_by_owner(db: Session, owner_id: str) -> List[RecipeDB]:
    return (
        db.query(RecipeDB)
        .filter(RecipeDB.owner_id == owner_id)
        .order_by(RecipeDB.created_at.desc())
        .all()
    )


def create_recipe(db: Session, owner_id: str, owner_name: str, payload: dict) -> RecipeDB:
    """
    Status and chef_name are always set here, whatever the payload carries.
    """
    text = {field: (payload.get(field) or "").strip() for field in TEXT_FIELDS}
    if not all(text.values()):
        raise ValidationError("Please provide all required fields")
    ingredients = parse_ingredients(payload.get("ingredients"))
    if not ingredients:
        raise ValidationError("Please provide at least one ingredient")

    recipe = RecipeDB(
        title=text["title"],
        category=payload["category"],
        ingredients=ingredients,
        steps=text["steps"],
        difficulty=payload["difficulty"],
        cooking_time=text["cooking_time"],
        is_premium=parse_bool(payload.get("is_premium", False)),
        price=payload.get("price") or 0,
        owner_id=owner_id,
        chef_name=owner_name,
        status="pending",
    )
    if payload.get("image"):
        recipe.image = payload["image"]

    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    logger.info("[recipes] created recipe_id=%s owner=%s", recipe.id, owner_id)
    return recipe


def _can_modify(recipe: RecipeDB, requester_id: str, requester_role: str) -> bool:
    return same_ref(recipe.owner_id, requester_id) or requester_role == "admin"


def update_recipe(
    db: Session,
    recipe_id: str,
    requester_id: str,
    requester_role: str,
    payload: dict,
) -> RecipeDB:
    """
    Merge the supplied fields over the stored recipe. Missing, null or blank
    values keep what is stored. Every edit sends the recipe back to moderation.
    """
    recipe = get_recipe(db, recipe_id)
    if not _can_modify(recipe, requester_id, requester_role):
        logger.warning("[recipes] user_id=%s may not edit recipe_id=%s", requester_id, recipe_id)
        raise Unauthorized()

    for field in EDITABLE_FIELDS:
        value = payload.get(field)
        if field in TEXT_FIELDS and isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            continue
        if field == "ingredients":
            value = parse_ingredients(value)
            if not value:
                continue
        elif field == "is_premium":
            value = parse_bool(value)
        setattr(recipe, field, value)

    recipe.status = "pending"
    db.commit()
    db.refresh(recipe)
    logger.info("[recipes] recipe_id=%s edited by user_id=%s, back to pending", recipe_id, requester_id)
    return recipe


def toggle_like(db: Session, recipe_id: str, user_id: str) -> Tuple[bool, int]:
    """Flip the user's like. Returns (is_liked, likes_count)."""
    get_recipe(db, recipe_id)

    removed = db.execute(
        delete(recipe_likes).where(
            recipe_likes.c.recipe_id == recipe_id,
            recipe_likes.c.user_id == user_id,
        )
    )
    if removed.rowcount:
        db.commit()
        is_liked = False
    else:
        try:
            db.execute(insert(recipe_likes).values(recipe_id=recipe_id, user_id=user_id))
            db.commit()
        except IntegrityError:
            db.rollback()
        is_liked = True

    count = db.scalar(
        select(func.count()).select_from(recipe_likes).where(recipe_likes.c.recipe_id == recipe_id)
    )
    db.expire_all()
    return is_liked, count or 0


def add_comment(
    db: Session,
    recipe_id: str,
    author_id: str,
    author_name: str,
    text: str,
) -> List[CommentDB]:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Comment text is required")
    get_recipe(db, recipe_id)

    db.add(CommentDB(recipe_id=recipe_id, author_id=author_id, author_name=author_name, text=text))
    db.commit()
    return (
        db.query(CommentDB)
        .filter(CommentDB.recipe_id == recipe_id)
        .order_by(CommentDB.created_at, CommentDB.id)
        .all()
    )


def get_leaderboard(db: Session) -> List[dict]:
    likes_count = func.count(recipe_likes.c.user_id).label("likes_count")
    stmt = (
        select(
            RecipeDB.id,
            RecipeDB.title,
            RecipeDB.chef_name,
            RecipeDB.category,
            likes_count,
        )
        .outerjoin(recipe_likes, recipe_likes.c.recipe_id == RecipeDB.id)
        .where(func.lower(RecipeDB.status) == "approved")
        .group_by(RecipeDB.id)
        .order_by(likes_count.desc(), RecipeDB.created_at.desc())
        .limit(LEADERBOARD_SIZE)
    )
    return [dict(row._mapping) for row in db.execute(stmt)]


def purge_recipes(db: Session, recipe_ids: Sequence[str]) -> None:
    """Delete recipes with their comments and memberships. Caller commits."""
    if not recipe_ids:
        return
    for table in (recipe_likes, saved_recipes, purchased_recipes, user_favorites):
        db.execute(delete(table).where(table.c.recipe_id.in_(recipe_ids)))
    db.execute(delete(CommentDB).where(CommentDB.recipe_id.in_(recipe_ids)))
    db.execute(delete(RecipeDB).where(RecipeDB.id.in_(recipe_ids)))


def delete_recipe(db: Session, recipe_id: str, requester_id: str, requester_role: str) -> None:
    recipe = get_recipe(db, recipe_id)
    if not _can_modify(recipe, requester_id, requester_role):
        raise Unauthorized()
    purge_recipes(db, [recipe.id])
    db.commit()
    db.expire_all()
    logger.info("[recipes] recipe_id=%s deleted by user_id=%s", recipe_id, requester_id)
