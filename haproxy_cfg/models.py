"""SQLAlchemy models for stored configuration snapshots."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Config(Base):
    __tablename__ = "configs"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    source_path: Mapped[str] = mapped_column(Text(), nullable=False)
    source_hash: Mapped[str | None] = mapped_column(String(128))
    version: Mapped[int | None] = mapped_column(Integer)
    imported_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    sections: Mapped[list[ConfigSection]] = relationship(
        back_populates="config",
        cascade="all, delete-orphan",
        order_by="ConfigSection.position",
    )


class ConfigSection(Base):
    __tablename__ = "sections"
    __table_args__ = (UniqueConstraint("config_id", "position", name="uq_section_position"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    config_id: Mapped[int] = mapped_column(ForeignKey("configs.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    from_defaults: Mapped[str | None] = mapped_column(String(255))
    comment: Mapped[str | None] = mapped_column(Text())
    rendered: Mapped[str] = mapped_column(Text(), nullable=False, default="")

    config: Mapped[Config] = relationship(back_populates="sections")
    directives: Mapped[list[SectionDirective]] = relationship(
        back_populates="section",
        cascade="all, delete-orphan",
        order_by="SectionDirective.line_index",
    )


class SectionDirective(Base):
    __tablename__ = "directives"

    id: Mapped[int] = mapped_column(primary_key=True)
    section_id: Mapped[int] = mapped_column(ForeignKey("sections.id", ondelete="CASCADE"), index=True)
    line_index: Mapped[int] = mapped_column(Integer, nullable=False)
    keyword: Mapped[str] = mapped_column(String(128), nullable=False)
    text: Mapped[str] = mapped_column(Text(), nullable=False)
    comment: Mapped[str | None] = mapped_column(Text())

    section: Mapped[ConfigSection] = relationship(back_populates="directives")


class Meta(Base):
    __tablename__ = "meta"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
