"""
initial mentormatch schema

Revision ID: 20261001_initial_schema
Revises:
Create Date: 2026-10-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

OPEN_STATUS_FILTER = "status IN ('pending', 'accepted')"


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('student', 'mentor', name='profilerole'), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('interests', sa.JSON(), nullable=False),
        sa.Column('profile_pic', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_profiles_id', 'profiles', ['id'])
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'repositories',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('github_url', sa.String(), nullable=False),
        sa.Column('language', sa.String(), nullable=True),
        sa.Column('stars', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_repositories_name', 'repositories', ['name'])
    op.create_index('ix_repositories_language', 'repositories', ['language'])

    op.create_table(
        'mentor_repositories',
        sa.Column('mentor_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('repository_id', sa.String(), sa.ForeignKey('repositories.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'mentorship_requests',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mentor_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('repository_id', sa.String(), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_mentorship_requests_student_id', 'mentorship_requests', ['student_id'])
    op.create_index('ix_mentorship_requests_mentor_id', 'mentorship_requests', ['mentor_id'])
    op.create_index(
        'uq_mentorship_requests_open_tuple',
        'mentorship_requests',
        ['student_id', 'mentor_id', 'repository_id'],
        unique=True,
        postgresql_where=sa.text(OPEN_STATUS_FILTER),
        sqlite_where=sa.text(OPEN_STATUS_FILTER),
    )

    op.create_table(
        'sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mentor_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('repository_id', sa.String(), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('meeting_id', sa.String(), nullable=True),
        sa.Column('join_url', sa.String(), nullable=True),
        sa.Column('start_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_sessions_student_id', 'sessions', ['student_id'])
    op.create_index('ix_sessions_mentor_id', 'sessions', ['mentor_id'])

    op.create_table(
        'mentorship_feedback',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('mentorship_request_id', sa.String(),
                  sa.ForeignKey('mentorship_requests.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('mentor_id', sa.String(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('feedback_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_mentorship_feedback_rating'),
    )
    op.create_index('ix_mentorship_feedback_student_id', 'mentorship_feedback', ['student_id'])
    op.create_index('ix_mentorship_feedback_mentor_id', 'mentorship_feedback', ['mentor_id'])

    op.create_table(
        'session_feedback',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('sessions.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('mentor_id', sa.String(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('feedback_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_session_feedback_rating'),
    )
    op.create_index('ix_session_feedback_student_id', 'session_feedback', ['student_id'])
    op.create_index('ix_session_feedback_mentor_id', 'session_feedback', ['mentor_id'])

    op.create_table(
        'messages',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('sender_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('kind', sa.String(), nullable=False, server_default='text'),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('voice_duration_seconds', sa.Float(), nullable=True),
        sa.Column('voice_audio_data', sa.Text(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_messages_receiver_id', 'messages', ['receiver_id'])
    op.create_index('ix_messages_pair_created', 'messages', ['sender_id', 'receiver_id', 'created_at'])

    op.create_table(
        'device_tokens',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('fcm_token', sa.String(), nullable=False),
        sa.Column('platform', sa.Enum('ios', 'android', 'web', name='deviceplatform'), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_used', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('is_active', sa.String(), server_default='true'),
    )
    op.create_index('ix_device_tokens_user_id', 'device_tokens', ['user_id'])
    op.create_index('ix_device_tokens_fcm_token', 'device_tokens', ['fcm_token'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_device_tokens_fcm_token', table_name='device_tokens')
    op.drop_index('ix_device_tokens_user_id', table_name='device_tokens')
    op.drop_table('device_tokens')
    op.drop_index('ix_messages_pair_created', table_name='messages')
    op.drop_index('ix_messages_receiver_id', table_name='messages')
    op.drop_table('messages')
    op.drop_table('session_feedback')
    op.drop_table('mentorship_feedback')
    op.drop_table('sessions')
    op.drop_index('uq_mentorship_requests_open_tuple', table_name='mentorship_requests')
    op.drop_table('mentorship_requests')
    op.drop_table('mentor_repositories')
    op.drop_table('repositories')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_index('ix_profiles_id', table_name='profiles')
    op.drop_table('profiles')
    sa.Enum(name='deviceplatform').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='profilerole').drop(op.get_bind(), checkfirst=True)
