"""create_attempt_tables

Revision ID: 3f1c9a7b2d40
Revises:
Create Date: 2026-10-18 09:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7b2d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='student'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('progress_states',
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('high_water_mark', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('student_id'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE')
    )

    op.create_table('papers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('paper_title', sa.String(200), nullable=False),
        sa.Column('paper_type', sa.String(50), nullable=False, server_default=''),
        sa.Column('time_minutes', sa.Integer(), nullable=False),
        sa.Column('question_count', sa.Integer(), nullable=False),
        sa.Column('answers_per_question', sa.Integer(), nullable=False),
        sa.Column('payment_type', sa.String(20), nullable=False, server_default='free'),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('attempts_allowed', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'attempts_allowed >= 1 AND attempts_allowed <= 3',
            name='ck_paper_attempts_allowed'
        )
    )
    op.create_index('ix_papers_id', 'papers', ['id'])
    op.create_index('ix_papers_payment_type', 'papers', ['payment_type'])

    op.create_table('questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('paper_id', sa.Integer(), nullable=False),
        sa.Column('question_number', sa.Integer(), nullable=False),
        sa.Column('lesson_name', sa.String(200), nullable=False, server_default=''),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('answers_json', sa.Text(), nullable=True),
        sa.Column('correct_indexes_json', sa.Text(), nullable=True),
        sa.Column('point', sa.Float(), nullable=False, server_default='5'),
        sa.Column('explanation_text', sa.Text(), nullable=False, server_default=''),
        sa.Column('explanation_video_url', sa.String(500), nullable=False, server_default=''),
        sa.Column('image_url', sa.String(500), nullable=False, server_default=''),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['paper_id'], ['papers.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('paper_id', 'question_number', name='uq_question_paper_number')
    )
    op.create_index('ix_questions_id', 'questions', ['id'])
    op.create_index('ix_questions_paper_id', 'questions', ['paper_id'])

    op.create_table('payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('paper_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['paper_id'], ['papers.id'], ondelete='CASCADE')
    )
    op.create_index('ix_payments_id', 'payments', ['id'])
    op.create_index('ix_payments_user_id', 'payments', ['user_id'])
    op.create_index('ix_payments_paper_id', 'payments', ['paper_id'])
    op.create_index('ix_payments_status', 'payments', ['status'])

    op.create_table('attempts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('paper_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('attempt_no', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='in_progress'),
        sa.Column('payment_type', sa.String(20), nullable=False),
        sa.Column('question_count', sa.Integer(), nullable=False),
        sa.Column('answers_per_question', sa.Integer(), nullable=False),
        sa.Column('time_minutes', sa.Integer(), nullable=False),
        sa.Column('total_possible_points', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_points_earned', sa.Float(), nullable=False, server_default='0'),
        sa.Column('correct_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('wrong_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('percentage', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['paper_id'], ['papers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint(
            'paper_id', 'student_id', 'attempt_no', name='uq_attempt_paper_student_no'
        )
    )
    op.create_index('ix_attempts_id', 'attempts', ['id'])
    op.create_index('ix_attempts_paper_id', 'attempts', ['paper_id'])
    op.create_index('ix_attempts_student_id', 'attempts', ['student_id'])
    op.create_index('ix_attempts_status', 'attempts', ['status'])
    op.create_index('ix_attempts_payment_type', 'attempts', ['payment_type'])
    op.create_index('ix_attempts_submitted_at', 'attempts', ['submitted_at'])

    op.create_table('attempt_answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('attempt_id', sa.Integer(), nullable=False),
        sa.Column('paper_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('question_number', sa.Integer(), nullable=False),
        sa.Column('selected_indexes_json', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('earned_points', sa.Float(), nullable=False, server_default='0'),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['attempt_id'], ['attempts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['paper_id'], ['papers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('attempt_id', 'question_id', name='uq_attempt_answer_question')
    )
    op.create_index('ix_attempt_answers_id', 'attempt_answers', ['id'])
    op.create_index('ix_attempt_answers_attempt_id', 'attempt_answers', ['attempt_id'])
    op.create_index('ix_attempt_answers_paper_id', 'attempt_answers', ['paper_id'])
    op.create_index('ix_attempt_answers_question_id', 'attempt_answers', ['question_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('attempt_answers')
    op.drop_table('attempts')
    op.drop_table('payments')
    op.drop_table('questions')
    op.drop_table('papers')
    op.drop_table('progress_states')
    op.drop_table('users')
