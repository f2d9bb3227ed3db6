# bidtracker/models/note.py

from .base import db, utcnow, iso_or_none

class Note(db.Model):
    __tablename__ = 'notes'

    id = db.Column(db.Integer, primary_key=True)
    bid_id = db.Column(db.Integer, db.ForeignKey('bids.id'), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    body = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'bidId': self.bid_id,
            'authorId': self.author_id,
            'body': self.body,
            'createdAt': iso_or_none(self.created_at),
        }


class Attachment(db.Model):
    __tablename__ = 'attachments'

    id = db.Column(db.Integer, primary_key=True)
    bid_id = db.Column(db.Integer, db.ForeignKey('bids.id'), nullable=False, index=True)
    original_name = db.Column(db.String(255), nullable=False)
    path = db.Column(db.String(500), nullable=False)
    mimetype = db.Column(db.String(100))
    size = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'bidId': self.bid_id,
            'originalName': self.original_name,
            'path': self.path,
            'mimetype': self.mimetype,
            'size': self.size,
            'createdAt': iso_or_none(self.created_at),
        }


class Tag(db.Model):
    __tablename__ = 'tags'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


class BidTag(db.Model):
    __tablename__ = 'bid_tags'

    bid_id = db.Column(db.Integer, db.ForeignKey('bids.id'), primary_key=True)
    tag_id = db.Column(db.Integer, db.ForeignKey('tags.id'), primary_key=True)

    tag = db.relationship('Tag')

    def to_dict(self):
        return {'bidId': self.bid_id, 'tagId': self.tag_id, 'tag': self.tag.to_dict() if self.tag else None}
