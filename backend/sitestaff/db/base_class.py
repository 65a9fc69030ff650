from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

# Matches the op.f("ix_<table>_<column>") names used in migrations
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
}

Base: Any = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))
