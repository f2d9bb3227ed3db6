# bidtracker/models/company.py

from .base import db, utcnow

class Company(db.Model):
    __tablename__ = 'companies'

    id = db.Column(db.Integer, primary_key=True)
    # Looked up by exact name; uniqueness is a convention, not a constraint
    name = db.Column(db.String(200), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    contacts = db.relationship('Contact', backref='company', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }

    def __repr__(self):
        return f'<Company id={self.id} name={self.name!r}>'


class Contact(db.Model):
    __tablename__ = 'contacts'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    email = db.Column(db.String(120))
    phone = db.Column(db.String(40))
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'companyId': self.company_id,
            'email': self.email,
            'phone': self.phone,
        }
