"""
SQLAlchemy ORM Models: RIS Hierarchy Entities

Read-only mirror of the council information system, refreshed by the RIS
sync job. The indexer never writes these tables.

Every row is addressed by `key_enc`, the HierarchyKey.encode() of its full
parent path, so a resolved key maps to exactly one row without joins.
Numeric ids (session_id, submission_id, agenda_item_id) are the RIS
"laufende Nummer" values used to find related agenda items.

Schema: ris (set via __table_args__)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

SCHEMA = "ris"


# ---------------------------------------------------------------------------
# Declarative base: shared across all models
# ---------------------------------------------------------------------------

class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Session (Sitzung): ris.sessions
# ---------------------------------------------------------------------------

class SessionRecord(Base):
    """A committee meeting."""

    __tablename__ = "sessions"
    __table_args__ = (
        Index("idx_sessions_session_id", "session_id"),
        {"schema": SCHEMA},
    )

    key_enc: Mapped[str] = mapped_column(Text, primary_key=True)
    name:    Mapped[str] = mapped_column(Text, nullable=False)

    session_id: Mapped[int] = mapped_column(Integer, nullable=False, comment="SILFDNR")
    title:      Mapped[str] = mapped_column(Text, nullable=False, default="")
    date:       Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    committee:  Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Gremium")

    def __repr__(self) -> str:
        return f"<SessionRecord session_id={self.session_id} title={self.title!r}>"


# ---------------------------------------------------------------------------
# Submission (Vorlage): ris.submissions
# ---------------------------------------------------------------------------

class SubmissionRecord(Base):
    """A council submission (motion, report, proposal)."""

    __tablename__ = "submissions"
    __table_args__ = (
        Index("idx_submissions_submission_id", "submission_id"),
        {"schema": SCHEMA},
    )

    key_enc: Mapped[str] = mapped_column(Text, primary_key=True)
    name:    Mapped[str] = mapped_column(Text, nullable=False)

    submission_id:   Mapped[int] = mapped_column(Integer, nullable=False, comment="VOLFDNR")
    subject:         Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Betreff")
    date_created:    Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="DatumAngelegt",
    )
    lead_department: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Federfuehrend")

    def __repr__(self) -> str:
        return f"<SubmissionRecord submission_id={self.submission_id} subject={self.subject!r}>"


# ---------------------------------------------------------------------------
# Agenda item (TOP): ris.agenda_items
# ---------------------------------------------------------------------------

class AgendaItemRecord(Base):
    """
    One item on a session's agenda.

    Also serves as the "consultation" (Beratung) record: every place a
    submission was discussed is an agenda item row carrying both session_id
    and submission_id, which is why related-record queries always hit this
    table.
    """

    __tablename__ = "agenda_items"
    __table_args__ = (
        Index("idx_agenda_items_agenda_item_id", "agenda_item_id"),
        Index("idx_agenda_items_session_id",     "session_id"),
        Index("idx_agenda_items_submission_id",  "submission_id"),
        {"schema": SCHEMA},
    )

    key_enc: Mapped[str] = mapped_column(Text, primary_key=True)
    name:    Mapped[str] = mapped_column(Text, nullable=False)

    agenda_item_id: Mapped[int] = mapped_column(Integer, nullable=False, comment="TOLFDNR")
    session_id:     Mapped[int] = mapped_column(Integer, nullable=False, comment="SILFDNR")
    submission_id:  Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="VOLFDNR")

    number:  Mapped[str] = mapped_column(Text, nullable=False, default="", comment="agenda number, e.g. Ö 4.2")
    subject: Mapped[str] = mapped_column(Text, nullable=False, default="")
    date:    Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    status:          Mapped[str] = mapped_column(Text, nullable=False, default="")
    item_type:       Mapped[str] = mapped_column("type", Text, nullable=False, default="")
    resolution_ref:  Mapped[str] = mapped_column(Text, nullable=False, default="", comment="BSVV")
    decision_type:   Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Beschlussart")
    committee:       Mapped[str] = mapped_column(Text, nullable=False, default="")
    clerk:           Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Bearbeiter")
    lead_department: Mapped[str] = mapped_column(Text, nullable=False, default="")
    visibility:      Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Oeff")

    def __repr__(self) -> str:
        return (
            f"<AgendaItemRecord agenda_item_id={self.agenda_item_id} "
            f"session_id={self.session_id} number={self.number!r}>"
        )


# ---------------------------------------------------------------------------
# Attachment (Anlage / Basisanlage): ris.attachments
# ---------------------------------------------------------------------------

class AttachmentRecord(Base):
    """A scanned file attached to a session, submission or agenda item."""

    __tablename__ = "attachments"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('attachment', 'attachment_document')",
            name="attachments_kind_check",
        ),
        {"schema": SCHEMA},
    )

    key_enc: Mapped[str] = mapped_column(Text, primary_key=True)
    name:    Mapped[str] = mapped_column(Text, nullable=False)
    kind:    Mapped[str] = mapped_column(Text, nullable=False, default="attachment")
    title:   Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<AttachmentRecord name={self.name!r} title={self.title!r}>"
