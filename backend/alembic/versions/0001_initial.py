"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the users, posts, votes, likes, comments, notifications, follows,
topics and locations tables from the SQLAlchemy `Base` metadata.
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all tables declared on Base.metadata."""
    # Register every model on Base.metadata before create_all
    import repositories.db_models  # noqa: F401
    from repositories.database import Base

    Base.metadata.create_all(bind=op.get_bind())


def downgrade() -> None:
    """Drop all tables declared on Base.metadata.

    WARNING: This will drop all tables and result in data loss. Use only in
    development/test environments or when you're certain.
    """
    import repositories.db_models  # noqa: F401
    from repositories.database import Base

    Base.metadata.drop_all(bind=op.get_bind())
