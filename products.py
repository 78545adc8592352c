"""Catalog transformations.

Every function takes the current list of groups and returns a new list. The
input is never modified. A rejected command (blank name, unknown id, bad
price text) returns the input list itself so callers can tell nothing changed.
"""
import copy
import math

from models import Product, ProductGroup

NEW_PRODUCT_NAME = "New product"
CUSTOM_GROUP_NAME = "Custom Items"


def sorted_groups(groups):
    # sorted() is stable, so equal order values keep insertion order
    return sorted(groups, key=lambda g: g.order)


def get_group(groups, group_id):
    for group in groups:
        if group.id == group_id:
            return group
    return None


def parse_price(text):
    """Return the price in `text` as a float, or None if it is not a usable price."""
    try:
        price = float(str(text).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


def _update_group(groups, group_id, change):
    if get_group(groups, group_id) is None:
        return groups
    updated = copy.deepcopy(groups)
    change(get_group(updated, group_id))
    return updated


def _update_product(groups, group_id, product_id, change):
    group = get_group(groups, group_id)
    if group is None or group.find_product(product_id) is None:
        return groups
    updated = copy.deepcopy(groups)
    change(get_group(updated, group_id).find_product(product_id))
    return updated


# --- GROUPS ---
def add_group(groups, name, color, new_id):
    name = (name or "").strip()
    if not name:
        return groups
    updated = copy.deepcopy(groups)
    updated.append(ProductGroup(id=new_id(), name=name, order=len(groups), color=color, is_open=True))
    return updated


def rename_group(groups, group_id, name, color):
    name = (name or "").strip()
    if not name:
        return groups

    def change(group):
        group.name = name
        group.color = color or None

    return _update_group(groups, group_id, change)


def delete_group(groups, group_id):
    if get_group(groups, group_id) is None:
        return groups
    # remaining order values are left as they are
    return [copy.deepcopy(g) for g in groups if g.id != group_id]


def toggle_group(groups, group_id):
    def change(group):
        group.is_open = not group.is_open

    return _update_group(groups, group_id, change)


def reorder_group(groups, moved_id, target_id):
    if moved_id == target_id:
        return groups
    ordered = copy.deepcopy(sorted_groups(groups))
    ids = [g.id for g in ordered]
    if moved_id not in ids or target_id not in ids:
        return groups

    source_index = ids.index(moved_id)
    target_index = ids.index(target_id)
    moved = ordered.pop(source_index)
    ordered.insert(target_index, moved)
    for index, group in enumerate(ordered):
        group.order = index
    return ordered


# --- PRODUCTS ---
def add_product(groups, group_id, new_id):
    def change(group):
        group.products.append(Product(f"{group_id}-{new_id()}", NEW_PRODUCT_NAME, 0.0, 0))

    return _update_group(groups, group_id, change)


def rename_product(groups, group_id, product_id, name):
    def change(product):
        product.name = name

    return _update_product(groups, group_id, product_id, change)


def set_product_price(groups, group_id, product_id, price_text):
    price = parse_price(price_text)
    if price is None:
        return groups

    def change(product):
        product.price = price

    return _update_product(groups, group_id, product_id, change)


def delete_product(groups, group_id, product_id):
    def change(group):
        group.products = [p for p in group.products if p.id != product_id]

    group = get_group(groups, group_id)
    if group is None or group.find_product(product_id) is None:
        return groups
    return _update_group(groups, group_id, change)


def move_product(groups, source_group_id, source_product_id, target_group_id, target_product_id, new_id):
    source = get_group(groups, source_group_id)
    target = get_group(groups, target_group_id)
    if source is None or target is None:
        return groups

    source_ids = [p.id for p in source.products]
    target_ids = [p.id for p in target.products]
    if source_product_id not in source_ids or target_product_id not in target_ids:
        return groups

    updated = copy.deepcopy(groups)
    new_source = get_group(updated, source_group_id)
    new_target = get_group(updated, target_group_id)
    source_index = source_ids.index(source_product_id)
    target_index = target_ids.index(target_product_id)

    if source_group_id == target_group_id:
        if source_index == target_index:
            return groups
        moved = new_source.products.pop(source_index)
        new_source.products.insert(target_index, moved)
        return updated

    moved = new_source.products.pop(source_index)
    moved.id = f"{target_group_id}-{new_id()}"
    new_target.products.insert(target_index + 1, moved)
    return updated


# --- QUANTITIES ---
def set_quantity(groups, group_id, product_id, delta):
    def change(product):
        product.quantity = max(0, product.quantity + int(delta))

    return _update_product(groups, group_id, product_id, change)


def clear_all_quantities(groups):
    updated = copy.deepcopy(groups)
    for group in updated:
        for product in group.products:
            product.quantity = 0
    return updated


def add_custom_item(groups, name, price_text, quantity, new_id):
    """Put a one-off item in the cart, under the shared custom items group."""
    name = (name or "").strip()
    price = parse_price(price_text)
    if not name or price is None or price <= 0:
        return groups
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        return groups
    if quantity < 1:
        return groups

    updated = copy.deepcopy(groups)
    custom = None
    for group in updated:
        if group.name == CUSTOM_GROUP_NAME:
            custom = group
            break
    if custom is None:
        custom = ProductGroup(id=f"custom-{new_id()}", name=CUSTOM_GROUP_NAME, order=len(updated), is_open=True)
        updated.append(custom)

    custom.products.append(Product(f"custom-product-{new_id()}", name, price, quantity))
    return updated
