"""initial placement portal schema

Revision ID: portal_v1
Revises:
Create Date: 2026-10-19 10:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'portal_v1'
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create users, profiles, jobs, applications and saved jobs."""
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_demo', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'company_profiles',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('industry', sa.String(length=100), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('size', sa.String(length=50), nullable=True),
        sa.Column('founded', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo', sa.String(length=500), nullable=True),
        sa.Column('contact_person', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', JSONType, nullable=True),
        sa.Column('social_links', JSONType, nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_company_profiles_id'), 'company_profiles', ['id'], unique=False)
    op.create_index(op.f('ix_company_profiles_company_name'), 'company_profiles', ['company_name'], unique=False)

    op.create_table(
        'student_profiles',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('college', sa.String(length=255), nullable=True),
        sa.Column('course', sa.String(length=255), nullable=True),
        sa.Column('specialization', sa.String(length=255), nullable=True),
        sa.Column('branch', sa.String(length=100), nullable=True),
        sa.Column('graduation_year', sa.Integer(), nullable=True),
        sa.Column('tenth_percentage', sa.Float(), nullable=True),
        sa.Column('twelfth_percentage', sa.Float(), nullable=True),
        sa.Column('cgpa', sa.Float(), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('skills', JSONType, nullable=True),
        sa.Column('social_links', JSONType, nullable=True),
        sa.Column('resume', sa.String(length=500), nullable=True),
        sa.Column('profile_completion', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_student_profiles_id'), 'student_profiles', ['id'], unique=False)

    op.create_table(
        'jobs',
        *_base_columns(),
        sa.Column('posted_by', sa.Uuid(), nullable=False),
        sa.Column('company_profile_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('job_type', sa.String(length=50), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('salary', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('experience_level', sa.String(length=20), nullable=True),
        sa.Column('requirements', JSONType, nullable=True),
        sa.Column('responsibilities', JSONType, nullable=True),
        sa.Column('benefits', JSONType, nullable=True),
        sa.Column('skills', JSONType, nullable=True),
        sa.Column('min_cgpa', sa.Float(), nullable=True),
        sa.Column('min_tenth_percentage', sa.Float(), nullable=True),
        sa.Column('min_twelfth_percentage', sa.Float(), nullable=True),
        sa.Column('required_graduation_year', sa.Integer(), nullable=True),
        sa.Column('allowed_branches', JSONType, nullable=True),
        sa.Column('vacancies', sa.Integer(), nullable=True),
        sa.Column('application_deadline', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['posted_by'], ['users.id']),
        sa.ForeignKeyConstraint(['company_profile_id'], ['company_profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'], unique=False)
    op.create_index(op.f('ix_jobs_posted_by'), 'jobs', ['posted_by'], unique=False)
    op.create_index(op.f('ix_jobs_company_profile_id'), 'jobs', ['company_profile_id'], unique=False)
    op.create_index(op.f('ix_jobs_title'), 'jobs', ['title'], unique=False)
    op.create_index(op.f('ix_jobs_is_active'), 'jobs', ['is_active'], unique=False)

    op.create_table(
        'job_questions',
        *_base_columns(),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_job_questions_id'), 'job_questions', ['id'], unique=False)
    op.create_index(op.f('ix_job_questions_job_id'), 'job_questions', ['job_id'], unique=False)

    op.create_table(
        'applications',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('personal_info', JSONType, nullable=True),
        sa.Column('education', JSONType, nullable=True),
        sa.Column('skills', JSONType, nullable=True),
        sa.Column('projects', sa.Text(), nullable=True),
        sa.Column('extracurricular', sa.Text(), nullable=True),
        sa.Column('resume', sa.String(length=500), nullable=True),
        sa.Column('cover_letter_file', sa.String(length=500), nullable=True),
        sa.Column('cover_letter_text', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('eligibility_ok', sa.Boolean(), nullable=False),
        sa.Column('applied_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['users.id']),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'job_id', name='unique_student_job_application'),
    )
    op.create_index(op.f('ix_applications_id'), 'applications', ['id'], unique=False)
    op.create_index(op.f('ix_applications_student_id'), 'applications', ['student_id'], unique=False)
    op.create_index(op.f('ix_applications_job_id'), 'applications', ['job_id'], unique=False)
    op.create_index(op.f('ix_applications_status'), 'applications', ['status'], unique=False)
    op.create_index(op.f('ix_applications_applied_at'), 'applications', ['applied_at'], unique=False)

    op.create_table(
        'application_answers',
        *_base_columns(),
        sa.Column('application_id', sa.Uuid(), nullable=False),
        sa.Column('question_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['job_questions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('application_id', 'question_id', name='unique_application_question'),
    )
    op.create_index(op.f('ix_application_answers_id'), 'application_answers', ['id'], unique=False)
    op.create_index(
        op.f('ix_application_answers_application_id'), 'application_answers', ['application_id'], unique=False
    )

    op.create_table(
        'saved_jobs',
        *_base_columns(),
        sa.Column('student_profile_id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('saved_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['student_profile_id'], ['student_profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_saved_jobs_id'), 'saved_jobs', ['id'], unique=False)
    op.create_index('idx_saved_jobs_job', 'saved_jobs', ['job_id'], unique=False)
    op.create_index('idx_saved_jobs_profile_job', 'saved_jobs', ['student_profile_id', 'job_id'], unique=True)


def downgrade() -> None:
    """Drop all portal tables."""
    op.drop_table('saved_jobs')
    op.drop_table('application_answers')
    op.drop_table('applications')
    op.drop_table('job_questions')
    op.drop_table('jobs')
    op.drop_table('student_profiles')
    op.drop_table('company_profiles')
    op.drop_table('users')
