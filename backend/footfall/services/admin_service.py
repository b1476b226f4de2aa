"""
Admin: wipe footfall data on a dev database.
Tables: alerts, footfall_samples, stores (see footfall.db.tables), children first.
"""
import logging

from sqlalchemy.orm import Session

from footfall.db.tables import RESETTABLE_TABLE_NAMES
from footfall.models.alert import Alert
from footfall.models.footfall_sample import FootfallSample
from footfall.models.store import Store

logger = logging.getLogger(__name__)

_MODELS = {"alerts": Alert, "footfall_samples": FootfallSample, "stores": Store}


def clear_footfall_db(db: Session, owner_id: str | None = None) -> dict[str, int]:
    """
    Delete rows from every resettable table, or only one account's rows when owner_id is set.
    Returns dict of table -> deleted count.
    """
    deleted: dict[str, int] = {}
    for table in RESETTABLE_TABLE_NAMES:
        model = _MODELS[table]
        q = db.query(model)
        if owner_id is not None:
            q = q.filter(model.owner_id == owner_id)
        deleted[table] = q.delete(synchronize_session=False)
    db.commit()
    logger.info("clear_footfall_db(owner=%s): %s", owner_id or "*", deleted)
    return deleted
