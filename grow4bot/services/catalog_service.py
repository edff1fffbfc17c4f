import logging

from grow4bot.errors import NotFound

logger = logging.getLogger(__name__)


class CatalogService:
    """Каталог товаров: чтение для всех, изменение для администратора"""

    def __init__(self, store):
        self.store = store

    def list_products(self):
        return self.store.list_products()

    def get_product(self, product_id):
        product = self.store.get_product(product_id)
        if not product:
            raise NotFound('Product not found')
        return product

    def create_product(self, data):
        """data - ProductRequest после валидации"""
        with self.store.unit_of_work():
            product = self.store.add_product(
                name=data.name,
                price=data.price,
                description=data.description,
                image=data.image,
                category=data.category,
                stock_data=data.stock_data,
            )
        logger.info(f"Создан товар {product.id} '{product.name}', на складе {len(data.stock_data or [])}")
        return product

    def update_product(self, product_id, data):
        """data - ProductUpdate: меняются только переданные поля, склад заменяется целиком"""
        with self.store.unit_of_work():
            product = self.store.update_product(product_id, data.fields)
            if not product:
                raise NotFound('Product not found')
            if data.stock_data is not None:
                product = self.store.replace_stock(product.id, data.stock_data)
        logger.info(f"Обновлён товар {product_id}: {sorted(data.fields)}"
                    f"{', склад заменён' if data.stock_data is not None else ''}")
        return product

    def delete_product(self, product_id):
        with self.store.unit_of_work():
            if not self.store.delete_product(product_id):
                raise NotFound('Product not found')
        logger.info(f"Удалён товар {product_id}")
