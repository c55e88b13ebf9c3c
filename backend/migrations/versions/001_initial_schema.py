"""Create initial UAE Trails schema

Revision ID: 001
Revises:
Create Date: 2026-02-02 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

UPDATED_AT_TABLES = (
    'user', 'profile', 'tenant', 'tenant_membership', 'organizer_application',
    'location', 'event', 'event_request',
)


def _id():
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _created_at():
    return sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False)


def _updated_at():
    return sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False)


def _jsonb(name, default="'[]'::jsonb", nullable=False):
    return sa.Column(
        name,
        postgresql.JSONB(astext_type=sa.Text()),
        server_default=sa.text(default) if default else None,
        nullable=nullable,
    )


def upgrade():
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Reusable updated_at trigger function
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.updated_at = NOW();
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    # Users and profiles
    op.create_table(
        'user',
        _id(),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), server_default='visitor', nullable=False),
        sa.Column('status', sa.Text(), server_default='active', nullable=False),
        sa.Column('email_verified_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_user_email'),
        sa.CheckConstraint(
            "role IN ('platform_admin', 'tenant_owner', 'tenant_admin', 'tenant_guide', 'visitor')",
            name='ck_user_role'
        ),
        sa.CheckConstraint("status IN ('active', 'suspended')", name='ck_user_status'),
    )

    op.create_table(
        'profile',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('display_name', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', name='uq_profile_user_id'),
    )

    # Tenants
    op.create_table(
        'tenant',
        _id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default='active', nullable=False),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['user.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('slug', name='uq_tenant_slug'),
        sa.CheckConstraint("type IN ('company', 'guide_owned')", name='ck_tenant_type'),
        sa.CheckConstraint("status IN ('active', 'suspended')", name='ck_tenant_status'),
    )

    op.create_table(
        'tenant_membership',
        _id(),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenant.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('tenant_id', 'user_id', name='uq_tenant_membership_tenant_user'),
        sa.CheckConstraint(
            "role IN ('tenant_owner', 'tenant_admin', 'tenant_guide')",
            name='ck_tenant_membership_role'
        ),
    )
    op.create_index('ix_tenant_membership_user_id', 'tenant_membership', ['user_id'])

    op.create_table(
        'organizer_application',
        _id(),
        sa.Column('applicant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('requested_name', sa.Text(), nullable=False),
        sa.Column('requested_slug', sa.Text(), nullable=False),
        sa.Column('requested_type', sa.Text(), nullable=False),
        sa.Column('requested_tenant_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('reviewer_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('reviewer_note', sa.Text(), nullable=True),
        sa.Column('reviewed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['applicant_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['requested_tenant_id'], ['tenant.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['reviewer_id'], ['user.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='ck_organizer_application_status'
        ),
        sa.CheckConstraint(
            "requested_type IN ('company', 'guide_owned')",
            name='ck_organizer_application_type'
        ),
    )

    # Locations
    op.create_table(
        'location',
        _id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('region', sa.Text(), nullable=False),
        sa.Column('activity_type', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('difficulty', sa.Text(), nullable=False),
        _jsonb('season'),
        sa.Column('child_friendly', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('max_group_size', sa.Integer(), nullable=False),
        sa.Column('accessibility', sa.Text(), nullable=False),
        _jsonb('images'),
        sa.Column('featured', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('status', sa.Text(), server_default='active', nullable=False),
        sa.Column('distance', sa.Text(), nullable=True),
        sa.Column('duration', sa.Text(), nullable=True),
        sa.Column('elevation', sa.Text(), nullable=True),
        sa.Column('camping_type', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        _jsonb('highlights'),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("activity_type IN ('hiking', 'camping')", name='ck_location_activity_type'),
        sa.CheckConstraint("difficulty IN ('easy', 'moderate', 'hard')", name='ck_location_difficulty'),
        sa.CheckConstraint("accessibility IN ('car-accessible', 'remote')", name='ck_location_accessibility'),
        sa.CheckConstraint("status IN ('draft', 'active', 'inactive')", name='ck_location_status'),
        sa.CheckConstraint("max_group_size > 0", name='ck_location_max_group_size'),
    )
    op.create_index('ix_location_status_featured', 'location', ['status', 'featured'])

    # Events, join requests, participants
    op.create_table(
        'event',
        _id(),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_by_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('guide_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('start_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('end_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('meeting_point', sa.Text(), nullable=True),
        _jsonb('itinerary'),
        _jsonb('requirements'),
        sa.Column('price_aed', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('status', sa.Text(), server_default='draft', nullable=False),
        sa.Column('published_at', sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenant.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['location_id'], ['location.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['created_by_id'], ['user.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['guide_id'], ['user.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "status IN ('draft', 'published', 'cancelled', 'suspended')",
            name='ck_event_status'
        ),
        sa.CheckConstraint("capacity > 0", name='ck_event_capacity'),
        sa.CheckConstraint("price_aed >= 0", name='ck_event_price'),
    )
    op.create_index('ix_event_tenant_id_start_at', 'event', ['tenant_id', 'start_at'])
    op.create_index('ix_event_status_start_at', 'event', ['status', 'start_at'])

    op.create_table(
        'event_request',
        _id(),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('organizer_note', sa.Text(), nullable=True),
        sa.Column('reviewed_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('reviewed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reviewed_by_id'], ['user.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_request_event_user'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name='ck_event_request_status'
        ),
    )

    op.create_table(
        'event_participant',
        _id(),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('request_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('approved_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['request_id'], ['event_request.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['approved_by_id'], ['user.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('request_id', name='uq_event_participant_request_id'),
    )
    op.create_index('ix_event_participant_event_id', 'event_participant', ['event_id'])

    # Notifications
    op.create_table(
        'notification',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('type', sa.Text(), server_default='system', nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        _jsonb('meta', default=None, nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "type IN ('request_update', 'system', 'event')",
            name='ck_notification_type'
        ),
    )
    op.create_index('ix_notification_user_id_created_at', 'notification', ['user_id', 'created_at'])

    # Auth tokens
    op.create_table(
        'refresh_token',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('token_hash', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('token_hash', name='uq_refresh_token_token_hash'),
    )
    op.create_index('ix_refresh_token_user_id', 'refresh_token', ['user_id'])

    for table in ('email_verification_token', 'password_reset_token'):
        op.create_table(
            table,
            _id(),
            sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column('token', sa.Text(), nullable=False),
            sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
            sa.Column('used_at', sa.TIMESTAMP(timezone=True), nullable=True),
            _created_at(),
            sa.PrimaryKeyConstraint('id'),
            sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
            sa.UniqueConstraint('token', name=f'uq_{table}_token'),
        )

    # Media
    op.create_table(
        'media_asset',
        _id(),
        sa.Column('key', sa.Text(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('bucket', sa.Text(), nullable=False),
        sa.Column('mime_type', sa.Text(), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('kind', sa.Text(), server_default='general', nullable=False),
        sa.Column('uploaded_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['uploaded_by_id'], ['user.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenant.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('key', name='uq_media_asset_key'),
    )

    # Audit log (append-only)
    op.create_table(
        'audit_log',
        _id(),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.Text(), nullable=True),
        sa.Column('entity_id', sa.Text(), nullable=True),
        _jsonb('metadata_json', default=None, nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenant.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['actor_id'], ['user.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_audit_log_tenant_id', 'audit_log', ['tenant_id'])
    op.create_index('ix_audit_log_tenant_id_created_at', 'audit_log', ['tenant_id', 'created_at'])
    op.create_index('ix_audit_log_action', 'audit_log', ['action'])

    for table in UPDATED_AT_TABLES:
        op.execute(f"""
            CREATE TRIGGER update_{table}_updated_at
            BEFORE UPDATE ON "{table}"
            FOR EACH ROW
            EXECUTE FUNCTION update_updated_at_column();
        """)


def downgrade():
    for table in UPDATED_AT_TABLES:
        op.execute(f'DROP TRIGGER IF EXISTS update_{table}_updated_at ON "{table}"')

    for table in (
        'audit_log', 'media_asset', 'password_reset_token', 'email_verification_token',
        'refresh_token', 'notification', 'event_participant', 'event_request', 'event',
        'location', 'organizer_application', 'tenant_membership', 'tenant', 'profile', 'user',
    ):
        op.drop_table(table)

    op.execute('DROP FUNCTION IF EXISTS update_updated_at_column()')
