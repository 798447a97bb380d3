"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from facility_router.adapters.persistence.database import Base


class TicketModel(Base):
    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    property_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str | None] = mapped_column(String(300), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    skill_group: Mapped[str | None] = mapped_column(String(20), nullable=True)
    issue_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    priority: Mapped[str | None] = mapped_column(String(20), nullable=True)
    risk_flag: Mapped[str | None] = mapped_column(Text, nullable=True)
    decision_source: Mapped[str | None] = mapped_column(String(10), nullable=True)
    assigned_to: Mapped[str | None] = mapped_column(String(64), nullable=True)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    classification_logs: Mapped[list["ClassificationLogModel"]] = relationship(
        back_populates="ticket"
    )

    __table_args__ = (
        Index("idx_tickets_property_status", "property_id", "status"),
        Index("idx_tickets_skill_group", "skill_group"),
    )


class WorkerSkillModel(Base):
    __tablename__ = "resolver_skills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    worker_id: Mapped[str] = mapped_column(String(64), nullable=False)
    property_id: Mapped[str] = mapped_column(String(64), nullable=False)
    skill_group: Mapped[str] = mapped_column(String(20), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_checked_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_assigned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("worker_id", "property_id", "skill_group", name="uq_resolver_skill"),
        Index("idx_resolver_skills_property", "property_id"),
    )


class ClassificationLogModel(Base):
    __tablename__ = "ticket_classification_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False
    )
    rule_top_bucket: Mapped[str] = mapped_column(String(20), nullable=False)
    rule_issue_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rule_scores: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    rule_margin: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    entropy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    zone: Mapped[str] = mapped_column(String(20), nullable=False)
    escalation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    llm_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    llm_output: Mapped[str | None] = mapped_column(String(20), nullable=True)
    llm_secondary: Mapped[str | None] = mapped_column(String(20), nullable=True)
    llm_rationale: Mapped[str | None] = mapped_column(Text, nullable=True)
    llm_latency_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prompt_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completion_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    final_bucket: Mapped[str] = mapped_column(String(20), nullable=False)
    issue_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    decision_source: Mapped[str] = mapped_column(String(10), nullable=False)
    actor: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    ticket: Mapped["TicketModel"] = relationship(back_populates="classification_logs")

    __table_args__ = (Index("idx_classification_logs_ticket", "ticket_id"),)
