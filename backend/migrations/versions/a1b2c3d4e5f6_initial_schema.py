"""Initial schema: stalls, profiles, sales, expenses, menu, stock history, audit trail

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-01-20
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "stalls",
        sa.Column("stall_id", sa.Integer(), nullable=False),
        sa.Column("stall_name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="open"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("stall_id", name="pk_stalls"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("contact_number", sa.String(32), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="staff"),
        sa.Column("status", sa.String(16), nullable=False, server_default="inactive"),
        sa.Column("stall_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'staff')", name="ck_profiles_role"),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_profiles_status"),
        sa.ForeignKeyConstraint(["stall_id"], ["stalls.stall_id"], name="fk_profiles_stall_id_stalls"),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
    )

    with op.batch_alter_table("profiles", schema=None) as batch_op:
        batch_op.create_index("ix_profiles_stall_id", ["stall_id"], unique=False)
        batch_op.create_index("ix_profiles_role_status", ["role", "status"], unique=False)

    op.create_table(
        "stall_stocks",
        sa.Column("stall_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["stall_id"], ["stalls.stall_id"], name="fk_stall_stocks_stall_id_stalls"),
        sa.PrimaryKeyConstraint("stall_id", name="pk_stall_stocks"),
    )

    op.create_table(
        "stall_status_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("stall_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("change_source", sa.String(64), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["stall_id"], ["stalls.stall_id"], name="fk_stall_status_history_stall_id_stalls"),
        sa.PrimaryKeyConstraint("id", name="pk_stall_status_history"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("stall_status_history", schema=None) as batch_op:
        batch_op.create_index("ix_stall_status_history_stall_id", ["stall_id"], unique=False)

    op.create_table(
        "stock_status_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("stall_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("stock_level", sa.Integer(), nullable=True),
        sa.Column("stock_status", sa.String(16), nullable=False, server_default="not_sold_out"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("stock_status IN ('sold_out', 'not_sold_out')", name="ck_stock_status_history_stock_status"),
        sa.ForeignKeyConstraint(["stall_id"], ["stalls.stall_id"], name="fk_stock_status_history_stall_id_stalls"),
        sa.PrimaryKeyConstraint("id", name="pk_stock_status_history"),
        sa.UniqueConstraint("stall_id", "date", name="uq_stock_status_history_stall_id"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("stock_status_history", schema=None) as batch_op:
        batch_op.create_index("ix_stock_status_history_stall_id", ["stall_id"], unique=False)

    op.create_table(
        "menu_items",
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("item_name", sa.String(255), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.CheckConstraint("price_cents >= 0", name="ck_menu_items_price_cents_non_negative"),
        sa.PrimaryKeyConstraint("item_id", name="pk_menu_items"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "sales",
        sa.Column("sale_id", sa.Integer(), nullable=False),
        sa.Column("stall_id", sa.Integer(), nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("quantity_sold", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_amount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("payment_method", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["stall_id"], ["stalls.stall_id"], name="fk_sales_stall_id_stalls"),
        sa.PrimaryKeyConstraint("sale_id", name="pk_sales"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("sales", schema=None) as batch_op:
        batch_op.create_index("ix_sales_stall_id", ["stall_id"], unique=False)
        batch_op.create_index("ix_sales_sale_date", ["sale_date"], unique=False)
        batch_op.create_index("ix_sales_stall_date", ["stall_id", "sale_date"], unique=False)

    op.create_table(
        "expenses",
        sa.Column("expense_id", sa.Integer(), nullable=False),
        sa.Column("stall_id", sa.Integer(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("expense_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("cost_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("supplier_name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["stall_id"], ["stalls.stall_id"], name="fk_expenses_stall_id_stalls"),
        sa.PrimaryKeyConstraint("expense_id", name="pk_expenses"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("expenses", schema=None) as batch_op:
        batch_op.create_index("ix_expenses_stall_id", ["stall_id"], unique=False)
        batch_op.create_index("ix_expenses_date", ["date"], unique=False)
        batch_op.create_index("ix_expenses_stall_date", ["stall_id", "date"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("entity", sa.String(64), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("user_name", sa.String(255), nullable=True),
        sa.Column("stall_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("audit_logs", schema=None) as batch_op:
        batch_op.create_index("ix_audit_logs_action", ["action"], unique=False)
        batch_op.create_index("ix_audit_logs_entity", ["entity"], unique=False)
        batch_op.create_index("ix_audit_logs_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_audit_logs_stall_id", ["stall_id"], unique=False)
        batch_op.create_index("ix_audit_logs_timestamp", ["timestamp"], unique=False)
        batch_op.create_index("ix_audit_logs_entity_action", ["entity", "action"], unique=False)


def downgrade():
    op.drop_table("audit_logs")
    op.drop_table("expenses")
    op.drop_table("sales")
    op.drop_table("menu_items")
    op.drop_table("stock_status_history")
    op.drop_table("stall_status_history")
    op.drop_table("stall_stocks")
    op.drop_table("profiles")
    op.drop_table("stalls")
