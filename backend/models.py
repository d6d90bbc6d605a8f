# models.py
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import relationship, validates
from db import Base

PALETTE = (
    "blue", "green", "orange", "pink", "purple", "red",
    "teal", "yellow", "indigo", "mint", "cyan", "brown", "gray",
)


def category_key(name: str) -> str:
    """Case-insensitive identity of a category name (full Unicode casefolding)."""
    return name.strip().casefold()


class LifecycleMode(str, enum.Enum):
    NORMAL = "normal"
    PERSISTENT = "persistent"  # never decays, ignores kill/revive


class Category(Base):
    __tablename__ = "categories"

    id       = Column(Integer, primary_key=True)
    name     = Column(String(64), nullable=False)
    name_key = Column(String(64), nullable=False, unique=True)  # casefolded name, kept by the validator
    color    = Column(String(16), nullable=False)

    # derived back-reference; SQLAlchemy keeps it in sync with Task.category
    tasks = relationship("Task", back_populates="category", order_by="Task.id")

    @validates("name")
    def _sync_name_key(self, _key, value):
        self.name_key = category_key(value)
        return value

    def __repr__(self):
        return f"<Category {self.name!r} {self.color}>"


class Task(Base):
    __tablename__ = "tasks"

    id              = Column(Integer, primary_key=True)
    title           = Column(String(255), nullable=False)
    notes           = Column(Text, nullable=False, default="")

    # all timestamps are naive UTC
    creation_date   = Column(DateTime, nullable=False)
    last_revived_at = Column(DateTime, nullable=False)  # anchor: lifespan = deadline - anchor
    deadline_date   = Column(DateTime, nullable=False)
    killed_at       = Column(DateTime, nullable=True)

    mode = Column(
        Enum(LifecycleMode, native_enum=False, length=16,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LifecycleMode.NORMAL,
    )

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), index=True, nullable=True)
    updated_at  = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="tasks")

    def __repr__(self):
        return f"<Task {self.id} {self.title!r}>"
