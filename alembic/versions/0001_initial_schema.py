"""Initial pipeline schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Candidates and applications
    op.create_table(
        'candidates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_candidates_email', 'candidates', ['email'], unique=False)

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('candidate_id', sa.Integer(), nullable=False),
        sa.Column('job_role', sa.String(length=255), nullable=True),
        sa.Column('resume_url', sa.String(length=1024), nullable=True),
        sa.Column('resume_text', sa.Text(), nullable=True),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='pending'),
        sa.Column('analysis_lease_token', sa.String(length=64), nullable=True),
        sa.Column('analysis_lease_expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['candidate_id'], ['candidates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_applications_candidate_id', 'applications', ['candidate_id'], unique=False)
    op.create_index('ix_applications_job_role', 'applications', ['job_role'], unique=False)
    op.create_index('ix_applications_status', 'applications', ['status'], unique=False)

    op.create_table(
        'application_status_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('old_status', sa.String(length=50), nullable=True),
        sa.Column('new_status', sa.String(length=50), nullable=False),
        sa.Column('changed_by', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_application_status_history_application_id',
        'application_status_history',
        ['application_id'],
        unique=False,
    )

    # Analysis results
    op.create_table(
        'ai_analysis',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('skills_score', sa.Integer(), nullable=False),
        sa.Column('experience_score', sa.Integer(), nullable=False),
        sa.Column('education_score', sa.Integer(), nullable=False),
        sa.Column('overall_score', sa.Integer(), nullable=False),
        sa.Column('recommendations', sa.Text(), nullable=True),
        sa.Column('analysis_summary', sa.JSON(), nullable=True),
        sa.Column('analyzed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('application_id')
    )

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('skill_name', sa.String(length=255), nullable=False),
        sa.Column('proficiency_level', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_skills_application_id', 'skills', ['application_id'], unique=False)

    op.create_table(
        'interview_questions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('questions', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_interview_questions_application_id',
        'interview_questions',
        ['application_id'],
        unique=False,
    )

    # Matching
    op.create_table(
        'job_requirements',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_role', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('min_experience_years', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('required_skills', sa.JSON(), nullable=False),
        sa.Column('preferred_skills', sa.JSON(), nullable=False),
        sa.Column('education_level', sa.String(length=255), nullable=True),
        sa.Column('requirements', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_role')
    )

    op.create_table(
        'candidate_job_matches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('job_requirement_id', sa.Integer(), nullable=False),
        sa.Column('match_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('skills_match', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('experience_match', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('education_match', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('match_details', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['job_requirement_id'], ['job_requirements.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('application_id', 'job_requirement_id', name='uq_match_application_requirement')
    )
    op.create_index('ix_candidate_job_matches_application_id', 'candidate_job_matches', ['application_id'], unique=False)
    op.create_index('ix_candidate_job_matches_job_requirement_id', 'candidate_job_matches', ['job_requirement_id'], unique=False)

    # Notifications
    op.create_table(
        'notification_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('notification_type', sa.String(length=50), nullable=False),
        sa.Column('recipient_email', sa.String(length=1024), nullable=False),
        sa.Column('recipient_name', sa.String(length=255), nullable=True),
        sa.Column('subject', sa.String(length=500), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('retry_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_retry_at', sa.DateTime(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notification_history_notification_type', 'notification_history', ['notification_type'], unique=False)
    op.create_index('ix_notification_history_status', 'notification_history', ['status'], unique=False)
    op.create_index('ix_notification_history_created_at', 'notification_history', ['created_at'], unique=False)

    op.create_table(
        'email_templates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('template_key', sa.String(length=100), nullable=False),
        sa.Column('subject_template', sa.String(length=500), nullable=False),
        sa.Column('html_template', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('template_key')
    )

    op.create_table(
        'app_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('setting_key')
    )

    op.create_table(
        'staff_members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='recruiter'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table(
        'push_subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('endpoint', sa.String(length=1024), nullable=False),
        sa.Column('p256dh', sa.String(length=255), nullable=False),
        sa.Column('auth', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('endpoint')
    )

    op.create_table(
        'reminders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('reminder_type', sa.String(length=50), nullable=False),
        sa.Column('reminder_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('scheduled_for', sa.DateTime(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reminders_application_id', 'reminders', ['application_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_reminders_application_id', table_name='reminders')
    op.drop_table('reminders')
    op.drop_table('push_subscriptions')
    op.drop_table('staff_members')
    op.drop_table('app_settings')
    op.drop_table('email_templates')
    op.drop_index('ix_notification_history_created_at', table_name='notification_history')
    op.drop_index('ix_notification_history_status', table_name='notification_history')
    op.drop_index('ix_notification_history_notification_type', table_name='notification_history')
    op.drop_table('notification_history')
    op.drop_index('ix_candidate_job_matches_job_requirement_id', table_name='candidate_job_matches')
    op.drop_index('ix_candidate_job_matches_application_id', table_name='candidate_job_matches')
    op.drop_table('candidate_job_matches')
    op.drop_table('job_requirements')
    op.drop_index('ix_interview_questions_application_id', table_name='interview_questions')
    op.drop_table('interview_questions')
    op.drop_index('ix_skills_application_id', table_name='skills')
    op.drop_table('skills')
    op.drop_table('ai_analysis')
    op.drop_index('ix_application_status_history_application_id', table_name='application_status_history')
    op.drop_table('application_status_history')
    op.drop_index('ix_applications_status', table_name='applications')
    op.drop_index('ix_applications_job_role', table_name='applications')
    op.drop_index('ix_applications_candidate_id', table_name='applications')
    op.drop_table('applications')
    op.drop_index('ix_candidates_email', table_name='candidates')
    op.drop_table('candidates')
