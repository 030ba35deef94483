"""create_store_schema

Revision ID: 5b1f0c9a2d41
Revises:
Create Date: 2026-10-18 09:12:44.218305
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1f0c9a2d41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # STUDENTS
    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("roll_number", sa.String(), nullable=False),
        sa.Column("standard", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("balance", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_student_status_valid"),
    )
    op.create_index("ix_students_roll_number", "students", ["roll_number"], unique=True)

    # CATEGORIES
    op.create_table(
        "categories",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # PRODUCTS
    op.create_table(
        "products",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("category_id", sa.String(length=36), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False),
        sa.Column("barcode", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        sa.CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
        sa.CheckConstraint("low_stock_threshold >= 0", name="ck_product_low_stock_non_negative"),
    )
    op.create_index("ix_products_category_id", "products", ["category_id"], unique=False)

    # SALES
    op.create_table(
        "sales",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("seller_id", sa.String(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("total_amount >= 0", name="ck_sale_total_non_negative"),
        sa.CheckConstraint("status IN ('completed', 'failed', 'refunded')", name="ck_sale_status_valid"),
    )
    op.create_index("ix_sales_student_id", "sales", ["student_id"], unique=False)
    op.create_index("ix_sales_created_at", "sales", ["created_at"], unique=False)
    op.create_index("ix_sales_status_created", "sales", ["status", "created_at"], unique=False)

    # SALE ITEMS
    op.create_table(
        "sale_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sale_id", sa.String(length=36), sa.ForeignKey("sales.id"), nullable=False),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("line_total", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_sale_item_quantity_positive"),
        sa.CheckConstraint("price >= 0", name="ck_sale_item_price_non_negative"),
    )
    op.create_index("ix_sale_items_id", "sale_items", ["id"], unique=False)
    op.create_index("ix_sale_items_sale_id", "sale_items", ["sale_id"], unique=False)
    op.create_index("ix_sale_items_product_id", "sale_items", ["product_id"], unique=False)

    # INVENTORY LOGS
    op.create_table(
        "inventory_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("quantity_change", sa.Integer(), nullable=False),
        sa.Column("previous_stock", sa.Integer(), nullable=False),
        sa.Column("new_stock", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("action IN ('sale', 'restock', 'adjustment')", name="ck_inventory_log_action_valid"),
        sa.CheckConstraint("new_stock = previous_stock + quantity_change", name="ck_inventory_log_stock_delta"),
        sa.CheckConstraint("new_stock >= 0", name="ck_inventory_log_new_stock_non_negative"),
    )
    op.create_index("ix_inventory_logs_product_id", "inventory_logs", ["product_id"], unique=False)
    op.create_index("ix_inventory_logs_action_created", "inventory_logs", ["action", "created_at"], unique=False)

    # BALANCE ADJUSTMENTS
    op.create_table(
        "balance_adjustments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("previous_balance", sa.Numeric(10, 2), nullable=False),
        sa.Column("new_balance", sa.Numeric(10, 2), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("performed_by", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("amount <> 0", name="ck_balance_adjustment_non_zero"),
    )
    op.create_index("ix_balance_adjustments_student_id", "balance_adjustments", ["student_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_balance_adjustments_student_id", table_name="balance_adjustments")
    op.drop_table("balance_adjustments")

    op.drop_index("ix_inventory_logs_action_created", table_name="inventory_logs")
    op.drop_index("ix_inventory_logs_product_id", table_name="inventory_logs")
    op.drop_table("inventory_logs")

    op.drop_index("ix_sale_items_product_id", table_name="sale_items")
    op.drop_index("ix_sale_items_sale_id", table_name="sale_items")
    op.drop_index("ix_sale_items_id", table_name="sale_items")
    op.drop_table("sale_items")

    op.drop_index("ix_sales_status_created", table_name="sales")
    op.drop_index("ix_sales_created_at", table_name="sales")
    op.drop_index("ix_sales_student_id", table_name="sales")
    op.drop_table("sales")

    op.drop_index("ix_products_category_id", table_name="products")
    op.drop_table("products")

    op.drop_table("categories")

    op.drop_index("ix_students_roll_number", table_name="students")
    op.drop_table("students")
