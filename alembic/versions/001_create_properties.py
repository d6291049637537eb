from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB, ARRAY

# revision identifiers, used by Alembic.
revision = '001_create_properties'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'properties',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('price', sa.Numeric, nullable=False),
        sa.Column('address', JSONB, nullable=False),
        sa.Column('beds', sa.Numeric, nullable=False),
        sa.Column('baths', sa.Numeric, nullable=False),
        sa.Column('sqft', sa.Numeric, nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('year_built', sa.Integer),
        sa.Column('images', ARRAY(sa.Text), server_default=sa.text("'{}'")),
        sa.Column('featured', sa.Boolean, server_default=sa.false()),
        sa.Column('amenities', ARRAY(sa.Text), server_default=sa.text("'{}'")),
        sa.Column('location', JSONB, nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True)),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.CheckConstraint("type in ('house', 'apartment', 'condo', 'townhouse')", name='ck_properties_type'),
        sa.CheckConstraint("status in ('sale', 'rent', 'sold', 'pending')", name='ck_properties_status'),
    )
    op.create_index('idx_properties_status', 'properties', ['status'])
    op.create_index('idx_properties_featured', 'properties', ['featured'])
    op.create_index('idx_properties_user_id', 'properties', ['user_id'])

    op.create_table(
        'ListingLogs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('action', sa.String(255), nullable=False),
        sa.Column('entity_id', sa.String(64)),
        sa.Column('details', JSONB),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now())
    )
    op.create_index('idx_listinglogs_user_id', 'ListingLogs', ['user_id'])


def downgrade():
    op.drop_table('ListingLogs')
    op.drop_table('properties')
