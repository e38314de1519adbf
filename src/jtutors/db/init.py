from __future__ import annotations

from pathlib import Path

from jtutors.config import get_settings
from jtutors.db.base import Base
from jtutors.db.session import SessionLocal, engine
from jtutors.db import models  # noqa: F401
from jtutors.db.seed import seed_admin_settings, seed_subjects


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [settings.data_dir]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        inserted = seed_subjects(session)
        seed_admin_settings(session)
    return {"seeded_subjects": inserted}
