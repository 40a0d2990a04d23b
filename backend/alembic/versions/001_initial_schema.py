"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from pgvector.sqlalchemy import Vector

from catalog_assistant.models.product import EMBEDDING_DIMENSIONS

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS vector')

    # Create productos table
    op.create_table(
        'productos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('categoria_id', sa.Integer(), nullable=True),
        sa.Column('sku', sa.String(64), nullable=False),
        sa.Column('nombre', sa.String(255), nullable=False),
        sa.Column('marca', sa.String(120), nullable=False, server_default=''),
        sa.Column('descripcion', sa.Text(), nullable=False, server_default=''),
        sa.Column('precio_lista', sa.Numeric(12, 2), nullable=False),
        sa.Column('stock_actual', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('unidad_medida', sa.String(30), nullable=False, server_default='pieza'),
        sa.Column('especificaciones_tecnicas', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('embedding', Vector(EMBEDDING_DIMENSIONS), nullable=True),
        sa.Column('es_activo', sa.Boolean(), nullable=False, server_default='true'),
        sa.CheckConstraint('stock_actual >= 0', name='ck_productos_stock_no_negativo'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_productos_sku', 'productos', ['sku'], unique=True)
    op.execute(
        'CREATE INDEX ix_productos_embedding ON productos '
        'USING hnsw (embedding vector_cosine_ops)'
    )

    # Create ordenes table
    op.create_table(
        'ordenes',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('usuario_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('monto_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('estado', sa.String(30), nullable=False, server_default='cotizacion'),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ordenes_usuario_id', 'ordenes', ['usuario_id'])

    # Create detalles_orden table
    op.create_table(
        'detalles_orden',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('orden_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('producto_id', sa.Integer(), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('precio_unitario', sa.Numeric(12, 2), nullable=False),
        sa.CheckConstraint('cantidad > 0', name='ck_detalles_orden_cantidad_positiva'),
        sa.ForeignKeyConstraint(['orden_id'], ['ordenes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['producto_id'], ['productos.id']),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    op.drop_table('detalles_orden')
    op.drop_table('ordenes')
    op.drop_index('ix_productos_embedding', table_name='productos')
    op.drop_table('productos')
