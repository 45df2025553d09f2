# nursery/exceptions.py
# Ошибки слоя хранилища заказов


class RepositoryError(Exception):
    """Любой сбой при обращении к хранилищу заказов."""


class NotFoundError(RepositoryError):
    """Запись с указанным идентификатором отсутствует."""

    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id):
        super().__init__("Order", order_id)


class OrderItemNotFoundError(NotFoundError):
    def __init__(self, item_id):
        super().__init__("Order item", item_id)


class MerchantNotFoundError(NotFoundError):
    def __init__(self, merchant_code):
        super().__init__("Merchant", merchant_code)
