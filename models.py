DEFAULT_TAX_RATE = 8.75


#product model
class Product:
    def __init__(self, id, name, price=0.0, quantity=0):
        self.id = id
        self.name = name
        self.price = price
        self.quantity = quantity

    @property
    def total(self):
        return self.price * self.quantity

    def to_dict(self):
        return {"id": self.id, "name": self.name, "price": self.price, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=float(data.get("price", 0) or 0),
            quantity=int(data.get("quantity", 0) or 0),
        )


#product group model
class ProductGroup:
    def __init__(self, id, name, products=None, order=0, color=None, is_open=True):
        self.id = id
        self.name = name
        self.products = products if products is not None else []
        self.order = order
        self.color = color or None
        self.is_open = is_open

    def find_product(self, product_id):
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def to_dict(self):
        data = {
            "id": self.id,
            "name": self.name,
            "products": [p.to_dict() for p in self.products],
            "isOpen": self.is_open,
            "order": self.order,
        }
        if self.color:
            data["color"] = self.color
        return data

    @classmethod
    def from_dict(cls, data, index=0):
        # groups saved before display ordering existed fall back to their position
        order = data.get("order")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            products=[Product.from_dict(p) for p in data.get("products", [])],
            order=int(order) if order is not None else index,
            color=data.get("color"),
            is_open=bool(data.get("isOpen", True)),
        )


#payment line snapshot, no reference back to the catalog
class PaymentItem:
    def __init__(self, product_name, group_name, quantity, price, group_color=None):
        self.product_name = product_name
        self.group_name = group_name
        self.group_color = group_color or None
        self.quantity = quantity
        self.price = price

    @property
    def total(self):
        return self.price * self.quantity

    def to_dict(self):
        data = {
            "productName": self.product_name,
            "groupName": self.group_name,
            "quantity": self.quantity,
            "price": self.price,
        }
        if self.group_color:
            data["groupColor"] = self.group_color
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            product_name=str(data["productName"]),
            group_name=str(data.get("groupName", "")),
            quantity=int(data["quantity"]),
            price=float(data["price"]),
            group_color=data.get("groupColor"),
        )


#payment model
class Payment:
    def __init__(self, id, date, items, total, timestamp, subtotal=None, tax=None,
                 tax_rate=None, include_tax=False, event_name=None):
        self.id = id
        self.date = date
        self.event_name = event_name or None
        self.items = items
        self.subtotal = subtotal
        self.tax = tax
        self.tax_rate = tax_rate
        self.include_tax = include_tax
        self.total = total
        self.timestamp = timestamp

    def to_dict(self):
        data = {
            "id": self.id,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "includeTax": self.include_tax,
            "timestamp": self.timestamp,
        }
        if self.event_name:
            data["eventName"] = self.event_name
        if self.subtotal is not None:
            data["subtotal"] = self.subtotal
        if self.tax is not None:
            data["tax"] = self.tax
        if self.tax_rate is not None:
            data["taxRate"] = self.tax_rate
        return data

    @classmethod
    def from_dict(cls, data):
        def _opt_float(key):
            value = data.get(key)
            return float(value) if value is not None else None

        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            items=[PaymentItem.from_dict(i) for i in data.get("items", [])],
            total=float(data["total"]),
            timestamp=str(data.get("timestamp", "")),
            subtotal=_opt_float("subtotal"),
            tax=_opt_float("tax"),
            tax_rate=_opt_float("taxRate"),
            include_tax=bool(data.get("includeTax", False)),
            event_name=data.get("eventName"),
        )


#cart line shown when reviewing an order
class CartLine:
    def __init__(self, group, product):
        self.group = group
        self.product = product

    @property
    def total(self):
        return self.product.total


#cart model: derived totals over the catalog quantities
class Cart:
    def __init__(self, groups, tax_rate=DEFAULT_TAX_RATE):
        self.groups = groups
        self.tax_rate = tax_rate

    @property
    def items(self):
        lines = []
        for group in sorted(self.groups, key=lambda g: g.order):
            for product in group.products:
                if product.quantity > 0:
                    lines.append(CartLine(group, product))
        return lines

    @property
    def subtotal(self):
        return sum(p.price * p.quantity for g in self.groups for p in g.products)

    @property
    def tax(self):
        return self.subtotal * self.tax_rate / 100

    def total(self, include_tax=False):
        subtotal = self.subtotal
        if include_tax:
            return subtotal + subtotal * self.tax_rate / 100
        return subtotal

    def is_empty(self):
        return self.subtotal <= 0
