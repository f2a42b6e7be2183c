"""initial_ledger_tables

Revision ID: 3f1c2a9b7d40
Revises:
Create Date: 2026-10-19 09:12:44.104518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "acquisitions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("total_price_cent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_fees_cent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_shipping_cent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_cost_cent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(10), nullable=False, server_default="EUR"),
        sa.Column("allocation_method", sa.String(40), nullable=False, server_default="equal_per_card"),
        sa.Column("allocated_at", sa.DateTime(), nullable=True),
        sa.Column("purchased_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_acquisitions")),
    )

    op.create_table(
        "card_lots",
        sa.Column("id", sa.BigInteger(), autoincrement=True),
        sa.Column("card_id", sa.String(255), nullable=False),
        sa.Column("fingerprint", sa.String(255), nullable=False),
        sa.Column("finish", sa.String(20), nullable=False, server_default="nonfoil"),
        sa.Column("language", sa.String(10), nullable=False, server_default="EN"),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unit_cost", sa.Numeric(20, 8), nullable=False, server_default="0"),
        sa.Column("condition", sa.String(50), nullable=False, server_default="Near Mint"),
        sa.Column("foil", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("source", sa.String(20), nullable=False, server_default="purchase"),
        sa.Column("purchased_at", sa.DateTime(), nullable=False),
        sa.Column("acquisition_id", sa.Uuid(), sa.ForeignKey("acquisitions.id", name=op.f("fk_card_lots_acquisition_id_acquisitions")), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_card_lots")),
    )
    op.create_index(op.f("ix_card_lots_card_id"), "card_lots", ["card_id"])
    op.create_index(op.f("ix_card_lots_fingerprint"), "card_lots", ["fingerprint"])
    op.create_index(op.f("ix_card_lots_acquisition_id"), "card_lots", ["acquisition_id"])
    op.create_index("ix_card_lots_identity", "card_lots", ["card_id", "finish", "language"])

    op.create_table(
        "sell_transactions",
        sa.Column("id", sa.BigInteger(), autoincrement=True),
        sa.Column("card_id", sa.String(255), nullable=True),
        sa.Column("set_code", sa.String(20), nullable=True),
        sa.Column("number", sa.String(20), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("fingerprint", sa.String(255), nullable=False),
        sa.Column("finish", sa.String(20), nullable=False),
        sa.Column("language", sa.String(10), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_cent", sa.BigInteger(), nullable=False),
        sa.Column("fees_cent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("shipping_cent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(10), nullable=False, server_default="EUR"),
        sa.Column("happened_at", sa.DateTime(), nullable=False),
        sa.Column("external_ref", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sell_transactions")),
    )
    op.create_index(op.f("ix_sell_transactions_card_id"), "sell_transactions", ["card_id"])
    op.create_index(op.f("ix_sell_transactions_fingerprint"), "sell_transactions", ["fingerprint"])

    op.create_table(
        "scans",
        sa.Column("id", sa.BigInteger(), autoincrement=True),
        sa.Column("card_id", sa.String(255), nullable=True),
        sa.Column("set_code", sa.String(20), nullable=True),
        sa.Column("number", sa.String(20), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("fingerprint", sa.String(255), nullable=False),
        sa.Column("finish", sa.String(20), nullable=False),
        sa.Column("language", sa.String(10), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("observed_at", sa.DateTime(), nullable=False),
        sa.Column("acquisition_id", sa.Uuid(), sa.ForeignKey("acquisitions.id", name=op.f("fk_scans_acquisition_id_acquisitions")), nullable=True),
        sa.Column("lot_id", sa.BigInteger(), sa.ForeignKey("card_lots.id", name=op.f("fk_scans_lot_id_card_lots")), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_scans")),
    )
    op.create_index(op.f("ix_scans_card_id"), "scans", ["card_id"])
    op.create_index(op.f("ix_scans_fingerprint"), "scans", ["fingerprint"])
    op.create_index(op.f("ix_scans_lot_id"), "scans", ["lot_id"])

    op.create_table(
        "sell_allocations",
        sa.Column("id", sa.BigInteger(), autoincrement=True),
        sa.Column("transaction_id", sa.BigInteger(), sa.ForeignKey("sell_transactions.id", name=op.f("fk_sell_allocations_transaction_id_sell_transactions")), nullable=False),
        sa.Column("lot_id", sa.BigInteger(), sa.ForeignKey("card_lots.id", name=op.f("fk_sell_allocations_lot_id_card_lots")), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sell_allocations")),
        sa.CheckConstraint("quantity > 0", name=op.f("ck_sell_allocations_quantity_positive")),
    )
    op.create_index(op.f("ix_sell_allocations_transaction_id"), "sell_allocations", ["transaction_id"])
    op.create_index(op.f("ix_sell_allocations_lot_id"), "sell_allocations", ["lot_id"])

    op.create_table(
        "price_points",
        sa.Column("id", sa.BigInteger(), autoincrement=True),
        sa.Column("card_id", sa.String(255), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("finish", sa.String(20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False, server_default="EUR"),
        sa.Column("price_cent", sa.BigInteger(), nullable=False),
        sa.Column("as_of", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_price_points")),
        sa.UniqueConstraint("card_id", "provider", "finish", "date", name="uq_price_points_identity"),
    )
    op.create_index(op.f("ix_price_points_card_id"), "price_points", ["card_id"])


def downgrade() -> None:
    op.drop_table("price_points")
    op.drop_table("sell_allocations")
    op.drop_table("scans")
    op.drop_table("sell_transactions")
    op.drop_table("card_lots")
    op.drop_table("acquisitions")
