"""Saved grid queries: named filter and order states of a grid."""
from datetime import datetime, timezone
from .base import db


class SavedQuery(db.Model):
    __tablename__ = 'grid_saved_queries'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    grid_name = db.Column(db.String(100), nullable=False, index=True)
    # grid state as parsed from the request: {'f': {...}, 'order': ..., 'order_direction': ...}
    state = db.Column('query', db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint('grid_name', 'name', name='uq_grid_saved_query_name'),
    )

    def __repr__(self):
        return f'<SavedQuery {self.grid_name}:{self.name}>'

    @classmethod
    def get_for_grid(cls, grid_name):
        """Fetch the saved queries of a grid, ordered by name."""
        return cls.query.filter_by(grid_name=grid_name).order_by(cls.name).all()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'grid_name': self.grid_name,
            'state': self.state,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
