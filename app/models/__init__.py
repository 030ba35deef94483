# Importing the package registers every table on Base.metadata

from app.models.students import Student
from app.models.categories import Category
from app.models.products import Product
from app.models.sales import Sale
from app.models.sale_items import SaleItem
from app.models.inventory_logs import InventoryLog
from app.models.balance_adjustments import BalanceAdjustment
