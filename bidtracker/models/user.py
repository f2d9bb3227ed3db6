# bidtracker/models/user.py

from flask_login import UserMixin
from .base import db, utcnow

class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), index=True, unique=True, nullable=False)
    role = db.Column(db.String(20), default='VIEWER', nullable=False) # 'ADMIN', 'MANAGER', 'ESTIMATOR', 'VIEWER'
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def __repr__(self):
        return f'<User id={self.id} username={self.username} role={self.role}>'
