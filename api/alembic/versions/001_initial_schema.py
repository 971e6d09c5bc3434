"""Initial schema: topics, cards, ownership references, friends, challenges, XP

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create topic table
    op.create_table(
        'topic',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        sa.Column('card_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_topic_user_id'), 'topic', ['user_id'], unique=False)

    # Create card table
    op.create_table(
        'card',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(), nullable=False, server_default='owned'),
        sa.Column('vocabulary', sa.String(), nullable=False),
        sa.Column('definition', sa.String(), nullable=False),
        sa.Column('sentence', sa.String(), nullable=False, server_default=''),
        sa.Column('pronunciation', sa.String(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('topic_id', sa.Integer(), nullable=True),
        sa.Column('creator_user_id', sa.Integer(), nullable=True),
        sa.Column('shared_by_user_id', sa.Integer(), nullable=True),
        sa.Column('recipient_user_id', sa.Integer(), nullable=True),
        sa.Column('user_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('added_from', sa.String(), nullable=True),
        sa.Column('last_edited_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_card_vocabulary'), 'card', ['vocabulary'], unique=False)
    op.create_index(op.f('ix_card_topic_id'), 'card', ['topic_id'], unique=False)
    op.create_index(op.f('ix_card_creator_user_id'), 'card', ['creator_user_id'], unique=False)
    op.create_index(op.f('ix_card_shared_by_user_id'), 'card', ['shared_by_user_id'], unique=False)
    op.create_index(op.f('ix_card_recipient_user_id'), 'card', ['recipient_user_id'], unique=False)

    # Create ownership_reference table
    op.create_table(
        'ownership_reference',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('card_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(), nullable=False, server_default='owned'),
        sa.Column('topic_id', sa.Integer(), nullable=True),
        sa.Column('source_sender_id', sa.Integer(), nullable=True),
        sa.Column('added_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['card_id'], ['card.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'card_id', name='uq_ownership_reference_user_card')
    )
    op.create_index(op.f('ix_ownership_reference_user_id'), 'ownership_reference', ['user_id'], unique=False)
    op.create_index(op.f('ix_ownership_reference_card_id'), 'ownership_reference', ['card_id'], unique=False)
    op.create_index(op.f('ix_ownership_reference_topic_id'), 'ownership_reference', ['topic_id'], unique=False)

    # Create friend_request table
    op.create_table(
        'friend_request',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('from_user_id', sa.Integer(), nullable=False),
        sa.Column('to_user_id', sa.Integer(), nullable=False),
        sa.Column('from_display_name', sa.String(), nullable=False, server_default=''),
        sa.Column('to_display_name', sa.String(), nullable=False, server_default=''),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_friend_request_from_user_id'), 'friend_request', ['from_user_id'], unique=False)
    op.create_index(op.f('ix_friend_request_to_user_id'), 'friend_request', ['to_user_id'], unique=False)
    op.create_index(op.f('ix_friend_request_status'), 'friend_request', ['status'], unique=False)

    # Create friendship table
    op.create_table(
        'friendship',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_low_id', sa.Integer(), nullable=False),
        sa.Column('user_high_id', sa.Integer(), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_low_id', 'user_high_id', name='uq_friendship_pair')
    )
    op.create_index(op.f('ix_friendship_user_low_id'), 'friendship', ['user_low_id'], unique=False)
    op.create_index(op.f('ix_friendship_user_high_id'), 'friendship', ['user_high_id'], unique=False)

    # Create challenge table
    op.create_table(
        'challenge',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('sender_name', sa.String(), nullable=False, server_default='Someone'),
        sa.Column('card', sa.JSON(), nullable=False),
        sa.Column('recipients', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_challenge_sender_id'), 'challenge', ['sender_id'], unique=False)

    # Create completed_challenge table
    op.create_table(
        'completed_challenge',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('challenge_id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('sender_name', sa.String(), nullable=False),
        sa.Column('card', sa.JSON(), nullable=False),
        sa.Column('user_answer', sa.String(), nullable=False),
        sa.Column('user_score', sa.Integer(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_completed_challenge_user_id'), 'completed_challenge', ['user_id'], unique=False)
    op.create_index(op.f('ix_completed_challenge_challenge_id'), 'completed_challenge', ['challenge_id'], unique=False)
    op.create_index(op.f('ix_completed_challenge_completed_at'), 'completed_challenge', ['completed_at'], unique=False)

    # Create user_xp table
    op.create_table(
        'user_xp',
        sa.Column('user_id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('total_xp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id')
    )


def downgrade() -> None:
    op.drop_table('user_xp')
    op.drop_index(op.f('ix_completed_challenge_completed_at'), table_name='completed_challenge')
    op.drop_index(op.f('ix_completed_challenge_challenge_id'), table_name='completed_challenge')
    op.drop_index(op.f('ix_completed_challenge_user_id'), table_name='completed_challenge')
    op.drop_table('completed_challenge')
    op.drop_index(op.f('ix_challenge_sender_id'), table_name='challenge')
    op.drop_table('challenge')
    op.drop_index(op.f('ix_friendship_user_high_id'), table_name='friendship')
    op.drop_index(op.f('ix_friendship_user_low_id'), table_name='friendship')
    op.drop_table('friendship')
    op.drop_index(op.f('ix_friend_request_status'), table_name='friend_request')
    op.drop_index(op.f('ix_friend_request_to_user_id'), table_name='friend_request')
    op.drop_index(op.f('ix_friend_request_from_user_id'), table_name='friend_request')
    op.drop_table('friend_request')
    op.drop_index(op.f('ix_ownership_reference_topic_id'), table_name='ownership_reference')
    op.drop_index(op.f('ix_ownership_reference_card_id'), table_name='ownership_reference')
    op.drop_index(op.f('ix_ownership_reference_user_id'), table_name='ownership_reference')
    op.drop_table('ownership_reference')
    op.drop_index(op.f('ix_card_recipient_user_id'), table_name='card')
    op.drop_index(op.f('ix_card_shared_by_user_id'), table_name='card')
    op.drop_index(op.f('ix_card_creator_user_id'), table_name='card')
    op.drop_index(op.f('ix_card_topic_id'), table_name='card')
    op.drop_index(op.f('ix_card_vocabulary'), table_name='card')
    op.drop_table('card')
    op.drop_index(op.f('ix_topic_user_id'), table_name='topic')
    op.drop_table('topic')
