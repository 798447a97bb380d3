"""Initial schema — tickets, resolver skills, classification logs.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Tickets
    op.create_table(
        "tickets",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("property_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(300), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("skill_group", sa.String(20), nullable=True),
        sa.Column("issue_code", sa.String(50), nullable=True),
        sa.Column("priority", sa.String(20), nullable=True),
        sa.Column("risk_flag", sa.Text, nullable=True),
        sa.Column("decision_source", sa.String(10), nullable=True),
        sa.Column("assigned_to", sa.String(64), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("idx_tickets_property_status", "tickets", ["property_id", "status"])
    op.create_index("idx_tickets_skill_group", "tickets", ["skill_group"])

    # Resolver pool
    op.create_table(
        "resolver_skills",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("worker_id", sa.String(64), nullable=False),
        sa.Column("property_id", sa.String(64), nullable=False),
        sa.Column("skill_group", sa.String(20), nullable=False),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_checked_in", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("last_assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("worker_id", "property_id", "skill_group", name="uq_resolver_skill"),
    )
    op.create_index("idx_resolver_skills_property", "resolver_skills", ["property_id"])

    # Classification audit log
    op.create_table(
        "ticket_classification_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "ticket_id",
            sa.String(64),
            sa.ForeignKey("tickets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rule_top_bucket", sa.String(20), nullable=False),
        sa.Column("rule_issue_code", sa.String(50), nullable=True),
        sa.Column("rule_scores", JSONB, nullable=False, server_default="{}"),
        sa.Column("rule_margin", sa.Float, nullable=False, server_default="0"),
        sa.Column("entropy", sa.Float, nullable=False, server_default="0"),
        sa.Column("zone", sa.String(20), nullable=False),
        sa.Column("escalation_reason", sa.Text, nullable=True),
        sa.Column("llm_used", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("llm_output", sa.String(20), nullable=True),
        sa.Column("llm_secondary", sa.String(20), nullable=True),
        sa.Column("llm_rationale", sa.Text, nullable=True),
        sa.Column("llm_latency_ms", sa.Integer, nullable=True),
        sa.Column("prompt_tokens", sa.Integer, nullable=True),
        sa.Column("completion_tokens", sa.Integer, nullable=True),
        sa.Column("total_tokens", sa.Integer, nullable=True),
        sa.Column("final_bucket", sa.String(20), nullable=False),
        sa.Column("issue_code", sa.String(50), nullable=True),
        sa.Column("decision_source", sa.String(10), nullable=False),
        sa.Column("actor", sa.String(100), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index(
        "idx_classification_logs_ticket", "ticket_classification_logs", ["ticket_id"]
    )


def downgrade() -> None:
    op.drop_table("ticket_classification_logs")
    op.drop_table("resolver_skills")
    op.drop_table("tickets")
