"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all initial tables."""

    # User profiles (written by the identity provider)
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(150), nullable=False),
        sa.Column("role", sa.Enum("member", "manager", "admin", name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), default=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
    )
    op.create_index("ix_user_profiles_email", "user_profiles", ["email"], unique=True)

    # Sales table
    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stock_number", sa.String(50), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("sale_date", sa.Date(), server_default=sa.func.current_date(), nullable=False),
        sa.Column("vehicle_type", sa.Enum("new", "used", name="vehicletype"), nullable=False),
        sa.Column("sale_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("accessories_value", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("warranty_selling_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("warranty_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("service_price", sa.Numeric(12, 2), nullable=False, server_default="0",
                  comment="Maintenance package selling price"),
        sa.Column("service_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("spiff_bonus", sa.Numeric(12, 2), nullable=False, server_default="0",
                  comment="Manager-approved flat bonus"),
        sa.Column("spiff_comments", sa.Text(), nullable=True),
        sa.Column("commission_total", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("salesperson_id", sa.Integer(), sa.ForeignKey("user_profiles.id"), nullable=False),
        sa.Column("is_shared_sale", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sales_partner_id", sa.Integer(), sa.ForeignKey("user_profiles.id"), nullable=True),
        sa.Column("status", sa.Enum("pending", "completed", name="salestatus"), nullable=False,
                  server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
    )
    op.create_index("ix_sales_stock_number", "sales", ["stock_number"], unique=True)
    op.create_index("ix_sales_sale_date", "sales", ["sale_date"])
    op.create_index("ix_sales_salesperson_id", "sales", ["salesperson_id"])
    op.create_index("ix_sales_sales_partner_id", "sales", ["sales_partner_id"])
    op.create_index("ix_sales_status", "sales", ["status"])

    # Commission ledger (one row per beneficiary per sale)
    op.create_table(
        "commissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sale_id", sa.Integer(), sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user_profiles.id"), nullable=False),
        sa.Column("role", sa.Enum("primary", "partner", name="commissionrole"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=True),
        sa.Column("stock_number", sa.String(50), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("vehicle_type", postgresql.ENUM("new", "used", name="vehicletype", create_type=False), nullable=True),
        sa.Column("status", postgresql.ENUM("pending", "completed", name="salestatus", create_type=False), nullable=True),
        sa.Column("salesperson_id", sa.Integer(), sa.ForeignKey("user_profiles.id"), nullable=True),
        sa.Column("sales_partner_id", sa.Integer(), sa.ForeignKey("user_profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_commissions_sale_id", "commissions", ["sale_id"])
    op.create_index("ix_commissions_user_id", "commissions", ["user_id"])
    op.create_index("ix_commissions_sale_date", "commissions", ["sale_date"])

    # Audit logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user_profiles.id"), nullable=False),
        sa.Column(
            "action",
            sa.Enum("create_sale", "update_sale", "delete_sale", "ledger_failure", name="auditaction"),
            nullable=False,
        ),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_target_id", "audit_logs", ["target_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("audit_logs")
    op.drop_table("commissions")
    op.drop_table("sales")
    op.drop_table("user_profiles")

    # Drop enums
    op.execute("DROP TYPE IF EXISTS auditaction")
    op.execute("DROP TYPE IF EXISTS commissionrole")
    op.execute("DROP TYPE IF EXISTS salestatus")
    op.execute("DROP TYPE IF EXISTS vehicletype")
    op.execute("DROP TYPE IF EXISTS userrole")
