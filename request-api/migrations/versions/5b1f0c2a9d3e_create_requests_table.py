"""Create requests table

Revision ID: 5b1f0c2a9d3e
Revises:
Create Date: 2025-03-04 10:12:41.207315

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5b1f0c2a9d3e"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("emp_id", sa.String(50), nullable=False),
        sa.Column("program", sa.String(255), nullable=False),
        sa.Column("program_time", sa.String(255), nullable=True),
        sa.Column("request_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="Pending"),
        sa.Column("loan_type", sa.String(100), nullable=True),
        sa.Column("amount", sa.Numeric(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("document_path", sa.String(255), nullable=True),
    )
    op.create_index(
        "idx_requests_emp_id_program",
        "requests",
        ["emp_id", "program"],
        unique=False,
    )
    op.create_index(
        "idx_requests_request_date",
        "requests",
        ["request_date"],
        unique=False,
    )


def downgrade():
    op.drop_index("idx_requests_request_date", table_name="requests")
    op.drop_index("idx_requests_emp_id_program", table_name="requests")
    op.drop_table("requests")
