# bidtracker/models/bid.py

from .base import db, utcnow, iso_or_none

class Bid(db.Model):
    __tablename__ = 'bids'

    id = db.Column(db.Integer, primary_key=True)
    project_name = db.Column(db.String(255), nullable=False)
    client_company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    contact_id = db.Column(db.Integer, db.ForeignKey('contacts.id'), nullable=True)
    proposal_date = db.Column(db.Date, nullable=True)
    due_date = db.Column(db.Date, nullable=True)
    follow_up_on = db.Column(db.Date, nullable=True)
    job_location = db.Column(db.String(255))
    lead_source = db.Column(db.String(255))
    bid_status = db.Column(db.String(20), nullable=False, default='Active')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    client_company = db.relationship('Company')
    contact = db.relationship('Contact')
    scopes = db.relationship('Scope', backref='bid', cascade="all, delete-orphan", order_by='Scope.id')
    notes = db.relationship('Note', backref='bid', cascade="all, delete-orphan", order_by='Note.id')
    attachments = db.relationship('Attachment', backref='bid', cascade="all, delete-orphan")
    tag_links = db.relationship('BidTag', backref='bid', cascade="all, delete-orphan")

    def to_dict(self):
        """Bid-level fields only; derived totals and children are added by the service layer."""
        return {
            'id': self.id,
            'projectName': self.project_name,
            'clientCompanyId': self.client_company_id,
            'contactId': self.contact_id,
            'proposalDate': iso_or_none(self.proposal_date),
            'dueDate': iso_or_none(self.due_date),
            'followUpOn': iso_or_none(self.follow_up_on),
            'jobLocation': self.job_location,
            'leadSource': self.lead_source,
            'bidStatus': self.bid_status,
            'createdAt': iso_or_none(self.created_at),
            'updatedAt': iso_or_none(self.updated_at),
        }

    def __repr__(self):
        return f'<Bid id={self.id} project={self.project_name!r} status={self.bid_status}>'


class Scope(db.Model):
    __tablename__ = 'scopes'

    id = db.Column(db.Integer, primary_key=True)
    bid_id = db.Column(db.Integer, db.ForeignKey('bids.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    cost = db.Column(db.Float, nullable=False, default=0.0)
    status = db.Column(db.String(20), nullable=False, default='Pending')

    def to_dict(self):
        return {
            'id': self.id,
            'bidId': self.bid_id,
            'name': self.name,
            'cost': self.cost,
            'status': self.status,
        }
