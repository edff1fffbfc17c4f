from grow4bot import db
from datetime import datetime


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Float, nullable=False)
    image = db.Column(db.String(500), nullable=True)
    category = db.Column(db.String(100), nullable=False, default='general')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Склад: одна строка = одна единица товара, порядок выдачи по id
    stock_items = db.relationship(
        'StockItem',
        backref='product',
        order_by='StockItem.id',
        cascade='all, delete-orphan',
        lazy=True,
    )

    @property
    def stock_data(self):
        return [item.payload for item in self.stock_items]

    def __repr__(self):
        return f'<Product {self.name}>'


class StockItem(db.Model):
    __tablename__ = 'stock_items'

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True)
    payload = db.Column(db.Text, nullable=False)

    def __repr__(self):
        return f'<StockItem {self.id} of product {self.product_id}>'
