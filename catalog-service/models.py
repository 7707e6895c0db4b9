import threading
import uuid
from typing import Dict, List, Optional

from pydantic import BaseModel


class Product(BaseModel):
    id: str
    name: str
    details: str
    price: str  # Gardé en texte, validé comme nombre à l'entrée
    productImage: str


class ProductNotFound(Exception):
    """Raised when no product carries the requested id."""

    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


# Catalogue initial (les ids de démo sont séquentiels, pas d'id "5")
SEED_PRODUCTS: List[Dict[str, str]] = [
    {
        "id": "1",
        "name": "Banana Split Ice Cream",
        "details": "Ok, so we're a little bananas.  Maybe it's the Vanilla, Chocolate, Strawberry and Banana blend in our Banana Split Ice Cream.  Or maybe it's our colorful personality.",
        "price": "74.95",
        "productImage": "uploads/banana.png",
    },
    {
        "id": "2",
        "name": "Birthday Cake Ice Cream",
        "details": "What's better than cake and ice cream?  How about cake IN ice cream!  Birthday Cake Dippin' Dots are a blend of White & Yellow Cake Batter Ice Cream, Icing flavored Ice Cream and Cake Bits!  Who wants seconds?!",
        "price": "94.95",
        "productImage": "uploads/birthday-cake.png",
    },
    {
        "id": "3",
        "name": "Blue Raspberry Ice",
        "details": "Blue Raspberry flavored ice.",
        "price": "54.95",
        "productImage": "uploads/blu-raspberry.png",
    },
    {
        "id": "4",
        "name": "Candy Cane Ice Cream",
        "details": "Candy Cane is a festive mix of cool red and green peppermint ice creams, swirled together with classic Vanilla ice cream, for your holiday enjoy-mint.",
        "price": "44.95",
        "productImage": "uploads/candy-cane.png",
    },
    {
        "id": "6",
        "name": "Chocolate Ice Cream",
        "details": "Creamy Milk Chocolate Ice Cream. Someone pass the spoon!",
        "price": "60.95",
        "productImage": "uploads/chocolate-icecream.png",
    },
    {
        "id": "7",
        "name": "Cookie Monster Ice Cream",
        "details": "Cookie Monster features blue Sugar Cookie flavored ice cream dots, packed with not one, but two delicious cookie doughs: Chocolate Chip Cookie Dough and Chocolate Sandwich Cookie Dough.",
        "price": "74.95",
        "productImage": "uploads/cookie-monster.png",
    },
    {
        "id": "8",
        "name": "Cookies 'n Cream Ice Cream",
        "details": "It's a cookie invasion!  Oreo® Cookie Pieces surrounded by sweet Vanilla Ice Cream make Cookies 'n Cream America's #1 most wanted Dippin' Dots flavor.",
        "price": "70.95",
        "productImage": "uploads/cookies-cream.png",
    },
]


def seed_products() -> List[Product]:
    return [Product(**p) for p in SEED_PRODUCTS]


class ProductRepository:
    """Ordered in-memory collection of products.

    Insertion order is kept; every operation takes the same lock so the
    sequence stays consistent under a threaded server.
    """

    def __init__(self, products: Optional[List[Product]] = None):
        self._products: List[Product] = list(products or [])
        self._lock = threading.Lock()

    def _index_of(self, product_id: str) -> int:
        for index, product in enumerate(self._products):
            if product.id == product_id:
                return index
        raise ProductNotFound(product_id)

    def _new_id(self) -> str:
        existing = {p.id for p in self._products}
        new_id = str(uuid.uuid4())
        while new_id in existing:
            new_id = str(uuid.uuid4())
        return new_id

    def list(self) -> List[Product]:
        with self._lock:
            return list(self._products)

    def get(self, product_id: str) -> Product:
        with self._lock:
            return self._products[self._index_of(product_id)]

    def create(self, name: str, details: str, price: str, product_image: str) -> Product:
        with self._lock:
            product = Product(
                id=self._new_id(),
                name=name,
                details=details,
                price=price,
                productImage=product_image,
            )
            self._products.append(product)
            return product

    def update(
        self,
        product_id: str,
        name: str,
        details: str,
        price: str,
        product_image: Optional[str] = None,
    ) -> Product:
        with self._lock:
            index = self._index_of(product_id)
            changes = {"name": name, "details": details, "price": price}
            if product_image:
                changes["productImage"] = product_image
            updated = self._products[index].model_copy(update=changes)
            self._products[index] = updated
            return updated

    def delete(self, product_id: str) -> List[Product]:
        with self._lock:
            del self._products[self._index_of(product_id)]
            return list(self._products)
