from grow4bot import db
from datetime import datetime


class Purchase(db.Model):
    __tablename__ = 'purchases'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False)  # товар может быть удалён, снимок ниже остаётся
    product_name = db.Column(db.String(200), nullable=False)
    price = db.Column(db.Float, nullable=False)
    stock_data = db.Column(db.Text, nullable=False)
    purchase_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = db.relationship('User', backref=db.backref('purchases', lazy=True))

    def __repr__(self):
        return f'<Purchase {self.id} - {self.product_name} - Price: {self.price}>'
