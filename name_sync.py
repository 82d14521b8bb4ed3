# name_sync.py
"""
Fan-out of a user's display name into the snapshots stored on recipes
(chef_name) and comments (author_name).

Both steps commit on their own. If the comment step fails after the recipe
step committed, the recipe step stays applied: User.name is already the
source of truth and the next rename overwrites every snapshot again.
"""
import logging
from typing import Dict

from sqlalchemy import update
from sqlalchemy.orm import Session

from models import CommentDB, RecipeDB

logger = logging.getLogger(__name__)


def sync_author_name(db: Session, user_id: str, new_name: str) -> Dict[str, int]:
    touched = {"recipes": 0, "comments": 0}

    result = db.execute(
        update(RecipeDB)
        .where(RecipeDB.owner_id == user_id)
        .values(chef_name=new_name)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    touched["recipes"] = result.rowcount

    # only this author's comments; other snapshots on the same recipe stay as they are
    try:
        result = db.execute(
            update(CommentDB)
            .where(CommentDB.author_id == user_id)
            .values(author_name=new_name)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(
            "[name-sync] comments not updated for user_id=%s (%s recipes already renamed)",
            user_id, touched["recipes"],
        )
        raise
    touched["comments"] = result.rowcount

    logger.info(
        "[name-sync] user_id=%s recipes=%s comments=%s",
        user_id, touched["recipes"], touched["comments"],
    )
    return touched
