# bookkeeper/models/__init__.py
from .user import User
from .ledger import LedgerKind, LedgerType, LedgerEntry
from .customer import Customer
from .sale import Sale
from .product import Product, PriceHistory
from .vendor import Vendor, Purchase, PurchaseUnit
from .category import Category, Subcategory
from .expense import Expense
