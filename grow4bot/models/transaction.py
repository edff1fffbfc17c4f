from grow4bot import db
from datetime import datetime

TOPUP = 'topup'
PURCHASE = 'purchase'
REFUND = 'refund'
ADMIN_ADD = 'admin_add'

TRANSACTION_TYPES = (TOPUP, PURCHASE, REFUND, ADMIN_ADD)


class Transaction(db.Model):
    __tablename__ = 'transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)  # topup, purchase, refund, admin_add
    amount = db.Column(db.Float, nullable=False)
    description = db.Column(db.String(250), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = db.relationship('User', backref=db.backref('transactions', lazy=True))

    def __repr__(self):
        return f'<Transaction {self.id} - {self.type} - Amount: {self.amount}>'
