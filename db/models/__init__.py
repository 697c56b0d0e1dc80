from .user import User
from .catalog import Category, Product, ProductSize, SizeQuantity
from .supplier_price import SupplierPrice

from .quote import Quote, QuoteItem
from .supplier_job import SupplierJob
from .setting import SystemSetting

__all__ = [n for n in dir() if n[:1].isupper()]
