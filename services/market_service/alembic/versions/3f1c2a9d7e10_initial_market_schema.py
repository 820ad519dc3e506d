"""initial_market_schema

Revision ID: 3f1c2a9d7e10
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "3f1c2a9d7e10"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "user_role_enum": ("customer", "farmer", "admin"),
    "product_status_enum": ("draft", "active", "inactive"),
    "order_status_enum": (
        "pending",
        "processing",
        "shipped",
        "completed",
        "cancelled",
        "after_sale",
    ),
    "payment_method_enum": ("wechat", "alipay", "cash_on_delivery"),
    "checkpoint_kind_enum": (
        "in_transit",
        "out_for_delivery",
        "delivered",
        "exception",
        "other",
    ),
    "after_sale_type_enum": ("refund", "return_refund", "exchange"),
    "after_sale_status_enum": ("applied", "processing", "resolved", "rejected"),
    "refund_method_enum": ("original", "wallet", "bank"),
    "subscription_cycle_enum": ("weekly", "biweekly", "monthly", "seasonal"),
    "subscription_status_enum": ("active", "paused", "cancelled", "completed"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps(*, onupdate: bool = True) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if onupdate:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)
        )
    return columns


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    # --- identity -----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=True),
        sa.Column("role", _enum("user_role_enum"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)

    op.create_table(
        "farmer_profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("farm_name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("hero_image", sa.String(), nullable=True),
        sa.Column("region", sa.String(length=128), nullable=True),
        sa.Column("headline", sa.String(length=255), nullable=True),
        sa.Column("story_content", sa.Text(), nullable=True),
        sa.Column("highlights", postgresql.JSONB(), nullable=False),
        sa.Column("gallery", postgresql.JSONB(), nullable=False),
        sa.Column("certifications", postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_farmer_profiles_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_farmer_profiles"),
    )
    op.create_index(
        "ix_farmer_profiles_user_id", "farmer_profiles", ["user_id"], unique=True
    )

    op.create_table(
        "farmer_stories",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("farmer_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("labels", postgresql.JSONB(), nullable=False),
        sa.Column("media", postgresql.JSONB(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(onupdate=False),
        sa.ForeignKeyConstraint(
            ["farmer_id"],
            ["farmer_profiles.id"],
            name="fk_farmer_stories_farmer_id_farmer_profiles",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_farmer_stories"),
    )
    op.create_index("ix_farmer_stories_farmer_id", "farmer_stories", ["farmer_id"])

    # --- catalog & cart -----------------------------------------------------
    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("farmer_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("images", postgresql.JSONB(), nullable=False),
        sa.Column("price_fen", sa.Integer(), nullable=False),
        sa.Column("original_price_fen", sa.Integer(), nullable=True),
        sa.Column("unit", sa.String(length=32), nullable=False),
        sa.Column("origin", sa.String(length=128), nullable=False),
        sa.Column("category_id", sa.String(length=64), nullable=False),
        sa.Column("seasonal_tag", sa.String(length=64), nullable=True),
        sa.Column("is_organic", sa.Boolean(), nullable=True),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("status", _enum("product_status_enum"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        sa.CheckConstraint("price_fen > 0", name="ck_products_price_positive"),
        sa.ForeignKeyConstraint(
            ["farmer_id"],
            ["farmer_profiles.id"],
            name="fk_products_farmer_id_farmer_profiles",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_products"),
    )
    op.create_index("ix_products_farmer_id", "products", ["farmer_id"])
    op.create_index("ix_products_category_id", "products", ["category_id"])
    op.create_index("ix_products_status", "products", ["status"])

    op.create_table(
        "cart_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("selected", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_cart_items_user_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["product_id"],
            ["products.id"],
            name="fk_cart_items_product_id_products",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_cart_items"),
        sa.UniqueConstraint(
            "user_id", "product_id", name="uq_cart_items_user_product"
        ),
    )
    op.create_index("ix_cart_items_user_id", "cart_items", ["user_id"])
    op.create_index("ix_cart_items_product_id", "cart_items", ["product_id"])

    # --- orders -------------------------------------------------------------
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_number", sa.String(length=32), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("farmer_id", sa.Uuid(), nullable=False),
        sa.Column("subtotal_fen", sa.Integer(), nullable=False),
        sa.Column("discount_fen", sa.Integer(), nullable=False),
        sa.Column("delivery_fee_fen", sa.Integer(), nullable=False),
        sa.Column("total_fen", sa.Integer(), nullable=False),
        sa.Column("contact_name", sa.String(length=64), nullable=False),
        sa.Column("contact_phone", sa.String(length=20), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("payment_method", _enum("payment_method_enum"), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("status", _enum("order_status_enum"), nullable=False),
        sa.Column("cancel_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("total_fen >= 0", name="ck_orders_total_non_negative"),
        sa.ForeignKeyConstraint(
            ["customer_id"],
            ["users.id"],
            name="fk_orders_customer_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["farmer_id"],
            ["farmer_profiles.id"],
            name="fk_orders_farmer_id_farmer_profiles",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_orders"),
    )
    op.create_index("ix_orders_order_number", "orders", ["order_number"], unique=True)
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_index("ix_orders_farmer_id", "orders", ["farmer_id"])
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("thumbnail", sa.String(), nullable=False),
        sa.Column("unit", sa.String(length=32), nullable=False),
        sa.Column("unit_price_fen", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("subtotal_fen", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["order_id"],
            ["orders.id"],
            name="fk_order_items_order_id_orders",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_order_items"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "order_status_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("status", _enum("order_status_enum"), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        *_timestamps(onupdate=False),
        sa.ForeignKeyConstraint(
            ["order_id"],
            ["orders.id"],
            name="fk_order_status_history_order_id_orders",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_order_status_history"),
    )
    op.create_index(
        "ix_order_status_history_order_id", "order_status_history", ["order_id"]
    )

    op.create_table(
        "order_logistics",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("carrier", sa.String(length=64), nullable=False),
        sa.Column("tracking_number", sa.String(length=64), nullable=False),
        sa.Column("contact_phone", sa.String(length=20), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["order_id"],
            ["orders.id"],
            name="fk_order_logistics_order_id_orders",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_order_logistics"),
    )
    op.create_index(
        "ix_order_logistics_order_id", "order_logistics", ["order_id"], unique=True
    )

    op.create_table(
        "logistics_checkpoints",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("logistics_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=64), nullable=False),
        sa.Column("kind", _enum("checkpoint_kind_enum"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        *_timestamps(onupdate=False),
        sa.ForeignKeyConstraint(
            ["logistics_id"],
            ["order_logistics.id"],
            name="fk_logistics_checkpoints_logistics_id_order_logistics",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_logistics_checkpoints"),
    )
    op.create_index(
        "ix_logistics_checkpoints_logistics_id",
        "logistics_checkpoints",
        ["logistics_id"],
    )

    op.create_table(
        "order_after_sales",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("type", _enum("after_sale_type_enum"), nullable=False),
        sa.Column("status", _enum("after_sale_status_enum"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("attachments", postgresql.JSONB(), nullable=False),
        sa.Column("resolution_note", sa.Text(), nullable=True),
        sa.Column("refund_amount_fen", sa.Integer(), nullable=True),
        sa.Column("refund_method", _enum("refund_method_enum"), nullable=True),
        sa.Column("refund_reference_id", sa.String(length=128), nullable=True),
        sa.Column("refund_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "refund_amount_fen IS NULL OR refund_amount_fen > 0",
            name="ck_order_after_sales_refund_amount_positive",
        ),
        sa.ForeignKeyConstraint(
            ["order_id"],
            ["orders.id"],
            name="fk_order_after_sales_order_id_orders",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_order_after_sales"),
    )
    op.create_index(
        "ix_order_after_sales_order_id", "order_after_sales", ["order_id"], unique=True
    )

    # --- customer data ------------------------------------------------------
    op.create_table(
        "addresses",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("contact_name", sa.String(length=64), nullable=False),
        sa.Column("contact_phone", sa.String(length=20), nullable=False),
        sa.Column("province", sa.String(length=64), nullable=False),
        sa.Column("city", sa.String(length=64), nullable=False),
        sa.Column("district", sa.String(length=64), nullable=False),
        sa.Column("street", sa.String(length=255), nullable=False),
        sa.Column("detail", sa.String(length=255), nullable=True),
        sa.Column("postal_code", sa.String(length=16), nullable=True),
        sa.Column("tag", sa.String(length=32), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_addresses_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_addresses"),
    )
    op.create_index("ix_addresses_user_id", "addresses", ["user_id"])

    op.create_table(
        "subscription_plans",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("farmer_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("subtitle", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image", sa.String(), nullable=True),
        sa.Column("price_fen", sa.Integer(), nullable=False),
        sa.Column("original_price_fen", sa.Integer(), nullable=True),
        sa.Column("cycle", _enum("subscription_cycle_enum"), nullable=False),
        sa.Column("deliver_weekday", sa.Integer(), nullable=True),
        sa.Column("items", postgresql.JSONB(), nullable=False),
        sa.Column("benefits", postgresql.JSONB(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "deliver_weekday IS NULL OR (deliver_weekday BETWEEN 0 AND 6)",
            name="ck_subscription_plans_deliver_weekday_range",
        ),
        sa.ForeignKeyConstraint(
            ["farmer_id"],
            ["farmer_profiles.id"],
            name="fk_subscription_plans_farmer_id_farmer_profiles",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_subscription_plans"),
    )
    op.create_index(
        "ix_subscription_plans_farmer_id", "subscription_plans", ["farmer_id"]
    )

    op.create_table(
        "user_subscriptions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("plan_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", _enum("subscription_status_enum"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("next_delivery_date", sa.Date(), nullable=True),
        sa.Column("last_shipment_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_user_subscriptions_user_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["plan_id"],
            ["subscription_plans.id"],
            name="fk_user_subscriptions_plan_id_subscription_plans",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_user_subscriptions"),
    )
    op.create_index(
        "ix_user_subscriptions_user_id", "user_subscriptions", ["user_id"]
    )
    op.create_index(
        "ix_user_subscriptions_plan_id", "user_subscriptions", ["plan_id"]
    )


def downgrade() -> None:
    for table in (
        "user_subscriptions",
        "subscription_plans",
        "addresses",
        "order_after_sales",
        "logistics_checkpoints",
        "order_logistics",
        "order_status_history",
        "order_items",
        "orders",
        "cart_items",
        "products",
        "farmer_stories",
        "farmer_profiles",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name in ENUMS:
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
