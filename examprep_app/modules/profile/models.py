from datetime import datetime, timezone

from examprep_app.core.extensions import db


class KeyValueEntry(db.Model):
    """One JSON-encoded value under a string key."""
    __tablename__ = 'kv_entries'

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f'<KeyValueEntry {self.key}>'
