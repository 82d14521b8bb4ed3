# moderation.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from content import get_recipe, purge_recipes
from errors import ValidationError
from models import STATUSES, RecipeDB

logger = logging.getLogger(__name__)

TRANSITIONS = {
    "pending": {"approved", "rejected"},
    "approved": {"rejected", "pending"},
    "rejected": {"approved", "pending"},
}


def validate_status(status: Optional[str]) -> str:
    if status not in STATUSES:
        raise ValidationError("Invalid status")
    return status


def set_status(db: Session, recipe_id: str, status: Optional[str]) -> RecipeDB:
    """
    Move a recipe to ``status``. Re-applying the current status is a no-op.
    """
    status = validate_status(status)
    recipe = get_recipe(db, recipe_id)

    current = recipe.status
    if status == current:
        return recipe
    if status not in TRANSITIONS.get(current, set()):
        # only reachable for a status value stored outside the enum
        raise ValidationError(f"Cannot move a {current} recipe to {status}")

    recipe.status = status
    db.commit()
    db.refresh(recipe)
    logger.info("[moderation] recipe_id=%s %s -> %s", recipe_id, current, status)
    return recipe


def list_all_recipes(db: Session) -> List[RecipeDB]:
    return db.query(RecipeDB).order_by(RecipeDB.created_at.desc()).all()


def delete_recipe(db: Session, recipe_id: str) -> None:
    """Hard delete from any state."""
    get_recipe(db, recipe_id)
    purge_recipes(db, [recipe_id])
    db.commit()
    db.expire_all()
    logger.info("[moderation] recipe_id=%s deleted", recipe_id)
