import sqlalchemy as sa

metadata = sa.MetaData()

batch_table = sa.Table(
    "batch",
    metadata,
    sa.Column("id", sa.Uuid, primary_key=True),
    sa.Column("sku", sa.String(255), nullable=False, index=True),
    sa.Column("qty", sa.Integer, nullable=False),
    sa.Column("eta", sa.DateTime(timezone=True), nullable=False),
)

allocation_table = sa.Table(
    "allocation",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("batch_id", sa.ForeignKey("batch.id"), nullable=False),
    sa.Column("order_line_id", sa.Uuid, nullable=False),
    sa.Column("sku", sa.String(255), nullable=False),
    sa.Column("qty", sa.Integer, nullable=False),
    sa.UniqueConstraint("order_line_id", "batch_id"),
)
