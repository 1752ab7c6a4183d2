"""Initial schema: accounts, POS back office, reviews and ideabooks

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
    ]


def upgrade():
    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(64), nullable=False),
        sa.Column("last_name", sa.String(64), nullable=False),
        sa.Column("user_type", sa.String(16), nullable=False, server_default="individual"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("rating_average", sa.Float(), nullable=True),
        sa.Column("rating_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index("ix_users_email", ["email"], unique=True)
        batch_op.create_index("ix_users_user_type", ["user_type"], unique=False)

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(255), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("session_tokens", schema=None) as batch_op:
        batch_op.create_index("ix_session_tokens_token_hash", ["token_hash"], unique=True)
        batch_op.create_index("ix_session_tokens_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_session_tokens_expires_at", ["expires_at"], unique=False)
        batch_op.create_index("ix_session_tokens_is_revoked", ["is_revoked"], unique=False)
        batch_op.create_index("ix_session_tokens_user_active", ["user_id", "is_revoked"], unique=False)

    # ------------------------------------------------------------------
    # Point of sale
    # ------------------------------------------------------------------
    op.create_table(
        "registers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("seller_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="closed"),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("opening_balance_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("closing_balance_cents", sa.Integer(), nullable=True),
        sa.Column("sales_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_sales_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["seller_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("status IN ('open', 'closed')", name="ck_registers_status"),
        sa.CheckConstraint("opening_balance_cents >= 0", name="ck_registers_opening_non_negative"),
        sa.CheckConstraint("sales_count >= 0", name="ck_registers_sales_count_non_negative"),
        sa.CheckConstraint("total_sales_cents >= 0", name="ck_registers_total_sales_non_negative"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("registers", schema=None) as batch_op:
        batch_op.create_index("ix_registers_seller_id", ["seller_id"], unique=False)
        batch_op.create_index("ix_registers_seller_status", ["seller_id", "status"], unique=False)
        batch_op.create_index("ix_registers_seller_created", ["seller_id", "created_at"], unique=False)

    op.create_table(
        "loyalty_programs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("seller_id", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(128), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("customer_phone", sa.String(32), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_points_earned", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_points_spent", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("tier", sa.String(16), nullable=False, server_default="bronze"),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["seller_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("points >= 0", name="ck_loyalty_points_non_negative"),
        sa.CheckConstraint("total_points_earned >= 0", name="ck_loyalty_earned_non_negative"),
        sa.CheckConstraint("total_points_spent >= 0", name="ck_loyalty_spent_non_negative"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("loyalty_programs", schema=None) as batch_op:
        batch_op.create_index("ix_loyalty_programs_seller_id", ["seller_id"], unique=False)
        batch_op.create_index("ix_loyalty_seller_phone", ["seller_id", "customer_phone"], unique=False)
        batch_op.create_index("ix_loyalty_seller_email", ["seller_id", "customer_email"], unique=False)
        batch_op.create_index("ix_loyalty_seller_tier", ["seller_id", "tier"], unique=False)
        batch_op.create_index("ix_loyalty_seller_points", ["seller_id", "points"], unique=False)

    op.create_table(
        "loyalty_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("program_id", sa.Integer(), nullable=False),
        sa.Column("entry_type", sa.String(8), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("sale_ref", sa.String(64), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["program_id"], ["loyalty_programs.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("points > 0", name="ck_loyalty_history_points_positive"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("loyalty_history", schema=None) as batch_op:
        batch_op.create_index("ix_loyalty_history_program_id", ["program_id"], unique=False)
        batch_op.create_index("ix_loyalty_history_program_occurred", ["program_id", "occurred_at"], unique=False)

    op.create_table(
        "suppliers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("seller_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("company", sa.String(200), nullable=True),
        sa.Column("siret", sa.String(32), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(32), nullable=True),
        sa.Column("contact_address", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["seller_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("suppliers", schema=None) as batch_op:
        batch_op.create_index("ix_suppliers_seller_id", ["seller_id"], unique=False)
        batch_op.create_index("ix_suppliers_seller_created", ["seller_id", "created_at"], unique=False)

    op.create_table(
        "supplier_categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("supplier_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("supplier_id", "name", name="uq_supplier_categories_name"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("supplier_categories", schema=None) as batch_op:
        batch_op.create_index("ix_supplier_categories_supplier_id", ["supplier_id"], unique=False)
        batch_op.create_index("ix_supplier_categories_name", ["name"], unique=False)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("reviewer_id", sa.Integer(), nullable=False),
        sa.Column("reviewed_entity_id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(16), nullable=False),
        sa.Column("rating_overall", sa.Integer(), nullable=False),
        sa.Column("rating_quality", sa.Integer(), nullable=True),
        sa.Column("rating_communication", sa.Integer(), nullable=True),
        sa.Column("rating_deadlines", sa.Integer(), nullable=True),
        sa.Column("rating_value", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("project_context", sa.JSON(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("helpful_yes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("helpful_no", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("response_text", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["reviewer_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reviewer_id", "reviewed_entity_id", "entity_type", name="uq_reviews_reviewer_entity"),
        sa.CheckConstraint("rating_overall BETWEEN 1 AND 5", name="ck_reviews_rating_overall"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("reviews", schema=None) as batch_op:
        batch_op.create_index("ix_reviews_reviewer_id", ["reviewer_id"], unique=False)
        batch_op.create_index("ix_reviews_entity", ["reviewed_entity_id", "entity_type"], unique=False)
        batch_op.create_index("ix_reviews_status_created", ["status", "created_at"], unique=False)

    # ------------------------------------------------------------------
    # Ideabooks
    # ------------------------------------------------------------------
    op.create_table(
        "ideabooks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("cover_image", sa.String(1024), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("likes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("views", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("ideabooks", schema=None) as batch_op:
        batch_op.create_index("ix_ideabooks_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_ideabooks_public_created", ["is_public", "created_at"], unique=False)

    op.create_table(
        "ideabook_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ideabook_id", sa.Integer(), nullable=False),
        sa.Column("item_type", sa.String(16), nullable=False),
        sa.Column("item_id", sa.String(64), nullable=False),
        sa.Column("note", sa.String(300), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["ideabook_id"], ["ideabooks.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ideabook_id", "item_type", "item_id", name="uq_ideabook_items_item"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("ideabook_items", schema=None) as batch_op:
        batch_op.create_index("ix_ideabook_items_ideabook_id", ["ideabook_id"], unique=False)

    op.create_table(
        "ideabook_collaborators",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ideabook_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("permission", sa.String(16), nullable=False, server_default="view"),
        sa.Column("invited_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["ideabook_id"], ["ideabooks.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ideabook_id", "user_id", name="uq_ideabook_collaborators_user"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("ideabook_collaborators", schema=None) as batch_op:
        batch_op.create_index("ix_ideabook_collaborators_ideabook_id", ["ideabook_id"], unique=False)
        batch_op.create_index("ix_ideabook_collaborators_user", ["user_id"], unique=False)

    op.create_table(
        "ideabook_tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ideabook_id", sa.Integer(), nullable=False),
        sa.Column("tag", sa.String(64), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["ideabook_id"], ["ideabooks.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ideabook_id", "tag", name="uq_ideabook_tags_tag"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("ideabook_tags", schema=None) as batch_op:
        batch_op.create_index("ix_ideabook_tags_ideabook_id", ["ideabook_id"], unique=False)
        batch_op.create_index("ix_ideabook_tags_tag", ["tag"], unique=False)


def downgrade():
    for table in (
        "ideabook_tags",
        "ideabook_collaborators",
        "ideabook_items",
        "ideabooks",
        "reviews",
        "supplier_categories",
        "suppliers",
        "loyalty_history",
        "loyalty_programs",
        "registers",
        "session_tokens",
        "users",
    ):
        op.drop_table(table)
