"""Create personnel and status tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


STATUS_SEED = [
    ('status_draft', 'status'),
    ('status_new', 'status'),
    ('status_tb_passed', 'status'),
    ('status_processed', 'status'),
    ('status_card_draft', 'status_card'),
    ('status_card_completed', 'status_card'),
    ('status_active_employed', 'status_active'),
    ('status_active_fired', 'status_active'),
    ('status_active_inactive', 'status_active'),
    ('status_active_fired_compl', 'status_active'),
    ('status_hr_new_compl', 'status_hr'),
    ('status_hr_edited', 'status_hr'),
    ('status_hr_edited_compl', 'status_hr'),
    ('status_hr_fired_off', 'status_hr'),
    ('status_hr_fired_compl', 'status_hr'),
    ('status_secure_allow', 'status_secure'),
    ('status_secure_block', 'status_secure'),
    ('status_secure_block_compl', 'status_secure'),
]


def upgrade() -> None:
    # Tenants and users
    op.create_table(
        'counterparties',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('inn', sa.String(length=12), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_counterparties_id'), 'counterparties', ['id'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('counterparty_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['counterparty_id'], ['counterparties.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_counterparty_id'), 'users', ['counterparty_id'], unique=False)

    op.create_table(
        'citizenships',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('code', sa.String(length=10), nullable=True),
        sa.Column('requires_patent', sa.Boolean(), nullable=True, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_citizenships_id'), 'citizenships', ['id'], unique=False)

    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_settings_id'), 'settings', ['id'], unique=False)
    op.create_index(op.f('ix_settings_key'), 'settings', ['key'], unique=True)

    # Employees
    op.create_table(
        'employees',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('middle_name', sa.String(), nullable=True),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('birth_country_id', sa.Integer(), nullable=True),
        sa.Column('position_id', sa.Integer(), nullable=True),
        sa.Column('citizenship_id', sa.Integer(), nullable=True),
        sa.Column('inn', sa.String(length=12), nullable=True),
        sa.Column('snils', sa.String(length=14), nullable=True),
        sa.Column('kig', sa.String(length=50), nullable=True),
        sa.Column('kig_end_date', sa.Date(), nullable=True),
        sa.Column('passport_type', sa.String(length=20), nullable=True),
        sa.Column('passport_number', sa.String(), nullable=True),
        sa.Column('passport_date', sa.Date(), nullable=True),
        sa.Column('passport_issuer', sa.Text(), nullable=True),
        sa.Column('passport_expiry_date', sa.Date(), nullable=True),
        sa.Column('patent_number', sa.String(), nullable=True),
        sa.Column('patent_issue_date', sa.Date(), nullable=True),
        sa.Column('blank_number', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('registration_address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['birth_country_id'], ['citizenships.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['citizenship_id'], ['citizenships.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('inn'),
        sa.UniqueConstraint('snils'),
        sa.UniqueConstraint('kig'),
        sa.UniqueConstraint('passport_number')
    )

    op.create_table(
        'employee_counterparty_mapping',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('counterparty_id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['counterparty_id'], ['counterparties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'counterparty_id', name='unique_employee_counterparty')
    )
    op.create_index('idx_ecm_employee_id', 'employee_counterparty_mapping', ['employee_id'])
    op.create_index('idx_ecm_counterparty_id', 'employee_counterparty_mapping', ['counterparty_id'])

    op.create_table(
        'user_employee_mapping',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('counterparty_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['counterparty_id'], ['counterparties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'employee_id', name='unique_user_employee')
    )
    op.create_index('idx_uem_user_id', 'user_employee_mapping', ['user_id'])
    op.create_index('idx_uem_employee_id', 'user_employee_mapping', ['employee_id'])

    # Status catalog and per-employee history
    statuses = op.create_table(
        'statuses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('group', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_statuses_group'), 'statuses', ['group'], unique=False)

    op.create_table(
        'employees_statuses_mapping',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('status_group', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_upload', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['status_id'], ['statuses.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_esm_employee_id', 'employees_statuses_mapping', ['employee_id'])
    op.create_index('idx_esm_status_id', 'employees_statuses_mapping', ['status_id'])
    op.create_index('idx_esm_status_group', 'employees_statuses_mapping', ['status_group'])
    op.create_index(
        'idx_esm_employee_group_active',
        'employees_statuses_mapping',
        ['employee_id', 'status_group', 'is_active']
    )

    # Seed the status catalog
    op.bulk_insert(statuses, [{'name': name, 'group': group} for name, group in STATUS_SEED])


def downgrade() -> None:
    op.drop_index('idx_esm_employee_group_active', table_name='employees_statuses_mapping')
    op.drop_index('idx_esm_status_group', table_name='employees_statuses_mapping')
    op.drop_index('idx_esm_status_id', table_name='employees_statuses_mapping')
    op.drop_index('idx_esm_employee_id', table_name='employees_statuses_mapping')
    op.drop_table('employees_statuses_mapping')

    op.drop_index(op.f('ix_statuses_group'), table_name='statuses')
    op.drop_table('statuses')

    op.drop_index('idx_uem_employee_id', table_name='user_employee_mapping')
    op.drop_index('idx_uem_user_id', table_name='user_employee_mapping')
    op.drop_table('user_employee_mapping')

    op.drop_index('idx_ecm_counterparty_id', table_name='employee_counterparty_mapping')
    op.drop_index('idx_ecm_employee_id', table_name='employee_counterparty_mapping')
    op.drop_table('employee_counterparty_mapping')

    op.drop_table('employees')

    op.drop_index(op.f('ix_settings_key'), table_name='settings')
    op.drop_index(op.f('ix_settings_id'), table_name='settings')
    op.drop_table('settings')

    op.drop_index(op.f('ix_citizenships_id'), table_name='citizenships')
    op.drop_table('citizenships')

    op.drop_index(op.f('ix_users_counterparty_id'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')

    op.drop_index(op.f('ix_counterparties_id'), table_name='counterparties')
    op.drop_table('counterparties')
