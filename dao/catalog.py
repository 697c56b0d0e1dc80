# dao/catalog.py
import logging
from typing import Dict, List
from sqlalchemy.exc import SQLAlchemyError
from configs import db
from db.models.catalog import Category, Product, ProductSize, SizeQuantity
from schemas.recommendation import (
    GENERAL_CATEGORY_ID,
    GENERAL_CATEGORY_NAME,
    CategoryGroup,
    ClassifiedItem,
    LineItemRequest,
)

logger = logging.getLogger(__name__)


def _unit_info(unit_id: int):
    """unit -> size -> product -> category; None for a dangling unit id."""
    return (
        db.session.query(
            Product.name.label("product_name"),
            Product.category_id,
            Category.name.label("category_name"),
            ProductSize.name.label("size_name"),
        )
        .select_from(SizeQuantity)
        .join(ProductSize, ProductSize.id == SizeQuantity.size_id)
        .join(Product, Product.id == ProductSize.product_id)
        .outerjoin(Category, Category.id == Product.category_id)
        .filter(SizeQuantity.id == int(unit_id))
        .first()
    )


def classify(items: List[LineItemRequest]) -> Dict[int, ClassifiedItem]:
    """
    Resolve each requested line to its category, keyed by line item id.
    Lines whose unit cannot be resolved are logged and left out.
    """
    out: Dict[int, ClassifiedItem] = {}
    for item in items:
        try:
            row = _unit_info(item.unit_id)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(
                "Category lookup failed for line %s (unit %s), skipping",
                item.line_item_id,
                item.unit_id,
            )
            continue

        if row is None:
            logger.warning(
                "Unknown unit %s on line %s, skipping", item.unit_id, item.line_item_id
            )
            continue

        category_id = row.category_id or GENERAL_CATEGORY_ID
        category_name = row.category_name if row.category_id else GENERAL_CATEGORY_NAME
        out[item.line_item_id] = ClassifiedItem(
            line_item_id=item.line_item_id,
            unit_id=item.unit_id,
            category_id=category_id,
            category_name=category_name or GENERAL_CATEGORY_NAME,
            product_name=item.display_name or f"{row.product_name} - {row.size_name}",
            quantity=item.quantity,
        )
    return out


def group_by_category(classified: Dict[int, ClassifiedItem]) -> List[CategoryGroup]:
    """Groups in first-seen order; items keep request order inside a group."""
    groups: Dict[int, CategoryGroup] = {}
    for info in classified.values():
        g = groups.get(info.category_id)
        if g is None:
            g = CategoryGroup(
                category_id=info.category_id, category_name=info.category_name, items=[]
            )
            groups[info.category_id] = g
        g.items.append(info)
    return list(groups.values())
