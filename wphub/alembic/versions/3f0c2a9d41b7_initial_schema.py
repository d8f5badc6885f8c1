"""initial_schema

Revision ID: 3f0c2a9d41b7
Revises:
Create Date: 2026-10-12 09:14:02.418311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '3f0c2a9d41b7'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    'userrole': ('user', 'admin'),
    'userstatus': ('active', 'inactive'),
    'teamrole': ('owner', 'admin', 'manager', 'member'),
    'invitestatus': ('pending', 'accepted', 'declined'),
    'ownertype': ('user', 'team'),
    'connectionstatus': ('active', 'inactive', 'error'),
    'pluginsource': ('upload', 'wplibrary'),
    'recipienttype': (
        'user', 'team', 'admin', 'multiple_users', 'all_users',
        'all_team_owners', 'multiple_teams', 'all_team_inboxes',
    ),
    'messagepriority': ('low', 'normal', 'high', 'urgent'),
    'notificationtype': ('info', 'success', 'warning', 'error', 'team_invite'),
    'entitytype': (
        'user', 'team', 'site', 'plugin', 'project', 'message', 'connector',
    ),
    'projectstatus': ('planning', 'in_progress', 'completed', 'on_hold'),
    'projectpriority': ('low', 'medium', 'high'),
}


def _enum(name: str) -> sa.Enum:
    return sa.Enum(*ENUMS[name], name=name)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('created_by', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('external_id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('full_name', sqlmodel.sql.sqltypes.AutoString(length=120), nullable=False),
        sa.Column('role', _enum('userrole'), nullable=False),
        sa.Column('status', _enum('userstatus'), nullable=False),
        sa.Column('company', sqlmodel.sql.sqltypes.AutoString(length=120), nullable=True),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(length=40), nullable=True),
        sa.Column('two_fa_enabled', sa.Boolean(), nullable=False),
        sa.Column('two_fa_verified_session', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_external_id'), 'users', ['external_id'], unique=True)

    op.create_table(
        'teams',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=120), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('members', sa.JSON(), nullable=False),
        sa.Column('is_blocked', sa.Boolean(), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_teams_owner_id'), 'teams', ['owner_id'], unique=False)

    op.create_table(
        'team_invites',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('team_id', sa.Uuid(), nullable=False),
        sa.Column('invited_email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('team_role_id', _enum('teamrole'), nullable=False),
        sa.Column('invited_by', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('status', _enum('invitestatus'), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_team_invites_team_id'), 'team_invites', ['team_id'], unique=False)
    op.create_index(op.f('ix_team_invites_invited_email'), 'team_invites', ['invited_email'], unique=False)

    op.create_table(
        'sites',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('url', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=False),
        sa.Column('api_key', sqlmodel.sql.sqltypes.AutoString(length=128), nullable=False),
        sa.Column('owner_type', _enum('ownertype'), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('shared_with_teams', sa.JSON(), nullable=False),
        sa.Column('connection_status', _enum('connectionstatus'), nullable=False),
        sa.Column('wp_version', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column('connection_checked_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sites_owner_type'), 'sites', ['owner_type'], unique=False)
    op.create_index(op.f('ix_sites_owner_id'), 'sites', ['owner_id'], unique=False)

    op.create_table(
        'plugins',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('slug', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('author', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('author_url', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column('owner_type', _enum('ownertype'), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('source', _enum('pluginsource'), nullable=False),
        sa.Column('versions', sa.JSON(), nullable=False),
        sa.Column('latest_version', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column('installed_on', sa.JSON(), nullable=False),
        sa.Column('shared_with_teams', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_type', 'owner_id', 'slug', name='uq_plugins_owner_slug'),
    )
    op.create_index(op.f('ix_plugins_slug'), 'plugins', ['slug'], unique=False)
    op.create_index(op.f('ix_plugins_owner_type'), 'plugins', ['owner_type'], unique=False)
    op.create_index(op.f('ix_plugins_owner_id'), 'plugins', ['owner_id'], unique=False)

    op.create_table(
        'messages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('sender_email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('sender_name', sqlmodel.sql.sqltypes.AutoString(length=120), nullable=False),
        sa.Column('recipient_type', _enum('recipienttype'), nullable=False),
        sa.Column('recipient_id', sa.Uuid(), nullable=True),
        sa.Column('recipient_email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('recipient_ids', sa.JSON(), nullable=False),
        sa.Column('team_id', sa.Uuid(), nullable=True),
        sa.Column('subject', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('message', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('priority', _enum('messagepriority'), nullable=False),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('replies', sa.JSON(), nullable=False),
        sa.Column('context', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_messages_sender_id'), 'messages', ['sender_id'], unique=False)
    op.create_index(op.f('ix_messages_recipient_type'), 'messages', ['recipient_type'], unique=False)
    op.create_index(op.f('ix_messages_recipient_id'), 'messages', ['recipient_id'], unique=False)
    op.create_index(op.f('ix_messages_team_id'), 'messages', ['team_id'], unique=False)
    op.create_index(op.f('ix_messages_is_read'), 'messages', ['is_read'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('recipient_id', sa.Uuid(), nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('message', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('type', _enum('notificationtype'), nullable=False),
        sa.Column('team_invite_id', sa.Uuid(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notifications_recipient_id'), 'notifications', ['recipient_id'], unique=False)
    op.create_index(op.f('ix_notifications_team_invite_id'), 'notifications', ['team_invite_id'], unique=False)
    op.create_index(op.f('ix_notifications_is_read'), 'notifications', ['is_read'], unique=False)

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('action', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=False),
        sa.Column('entity_type', _enum('entitytype'), nullable=False),
        sa.Column('entity_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column('details', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_activity_logs_user_email'), 'activity_logs', ['user_email'], unique=False)
    op.create_index(op.f('ix_activity_logs_entity_type'), 'activity_logs', ['entity_type'], unique=False)
    op.create_index(op.f('ix_activity_logs_entity_id'), 'activity_logs', ['entity_id'], unique=False)
    op.create_index(op.f('ix_activity_logs_created_at'), 'activity_logs', ['created_at'], unique=False)

    op.create_table(
        'project_templates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('team_id', sa.Uuid(), nullable=True),
        sa.Column('plugins', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_project_templates_team_id'), 'project_templates', ['team_id'], unique=False)

    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('team_id', sa.Uuid(), nullable=False),
        sa.Column('site_id', sa.Uuid(), nullable=False),
        sa.Column('template_id', sa.Uuid(), nullable=True),
        sa.Column('status', _enum('projectstatus'), nullable=False),
        sa.Column('priority', _enum('projectpriority'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('plugins', sa.JSON(), nullable=False),
        sa.Column('assigned_members', sa.JSON(), nullable=False),
        sa.Column('timeline_events', sa.JSON(), nullable=False),
        sa.Column('notes', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_projects_team_id'), 'projects', ['team_id'], unique=False)
    op.create_index(op.f('ix_projects_site_id'), 'projects', ['site_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'projects',
        'project_templates',
        'activity_logs',
        'notifications',
        'messages',
        'plugins',
        'sites',
        'team_invites',
        'teams',
        'users',
    ):
        op.drop_table(table)

    # Drop the enum types (PostgreSQL)
    for name in ENUMS:
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
