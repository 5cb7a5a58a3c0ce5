from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from typing import Optional, List
from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.models.category import Category, Subcategory
from bookkeeper.logger_config import logger


def _clean_names(names: Optional[List[str]]) -> List[str]:
    """Trim, drop blanks and keep the first occurrence of each name."""
    cleaned = []
    for name in names or []:
        name = (name or "").strip()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


def get_category_by_id(db: Session, category_id: str) -> Optional[Category]:
    """Get category by ID."""
    return (
        db.query(Category)
        .options(selectinload(Category.subcategories))
        .filter(Category.id == category_id)
        .first()
    )


def get_category_by_name(db: Session, name: str) -> Optional[Category]:
    """Get category by name."""
    return db.query(Category).filter(Category.name == name).first()


def get_all_categories(db: Session) -> tuple[List[Category], int]:
    """All categories sorted by name."""
    categories = (
        db.query(Category)
        .options(selectinload(Category.subcategories))
        .order_by(Category.name)
        .all()
    )
    return categories, len(categories)


def create_category(db: Session, name: str, subcategories: Optional[List[str]] = None) -> Category:
    """Create a new category with its initial subcategories."""
    name = (name or "").strip()
    if not name:
        raise ValueError("Category name is required.")

    if get_category_by_name(db, name):
        raise ValueError("Category already exists.")

    category = Category(name=name)
    category.subcategories = [
        Subcategory(name=sub, position=index) for index, sub in enumerate(_clean_names(subcategories))
    ]
    db.add(category)

    try:
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating category: {str(e)}")
        raise ValueError("Failed to create category. Category name may already exist.")


def update_category(
    db: Session,
    category_id: str,
    name: str,
    subcategories: Optional[List[str]] = None,
) -> Optional[Category]:
    """
    Rename a category. When subcategories is given the list is replaced:
    names that survive keep their id, new names get a fresh one.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Category name is required.")

    category = get_category_by_id(db, category_id)
    if not category:
        return None

    existing_category = get_category_by_name(db, name)
    if existing_category and existing_category.id != category_id:
        raise ValueError("Category name already exists.")
    category.name = name

    if subcategories is not None:
        current = {sub.name: sub for sub in category.subcategories}
        replacement = []
        for index, sub_name in enumerate(_clean_names(subcategories)):
            sub = current.get(sub_name) or Subcategory(name=sub_name)
            sub.position = index
            replacement.append(sub)
        category.subcategories = replacement

    try:
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating category: {str(e)}")
        raise ValueError("Failed to update category.")


def delete_category(db: Session, category_id: str) -> bool:
    """Delete a category and its subcategories."""
    category = get_category_by_id(db, category_id)
    if not category:
        return False

    db.delete(category)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting category: {str(e)}")
        raise ValueError("Failed to delete category.")


# ==================== SUBCATEGORIES ====================

def _get_subcategory(category: Category, subcategory_id: str) -> Subcategory:
    for sub in category.subcategories:
        if sub.id == subcategory_id:
            return sub
    raise NotFoundError("Subcategory not found.")


def add_subcategory(db: Session, category_id: str, name: str) -> Optional[Category]:
    name = (name or "").strip()
    if not name:
        raise ValueError("Subcategory name is required.")

    category = get_category_by_id(db, category_id)
    if not category:
        return None

    if any(sub.name == name for sub in category.subcategories):
        raise ValueError("Subcategory already exists.")

    position = max((sub.position for sub in category.subcategories), default=-1) + 1
    category.subcategories.append(Subcategory(name=name, position=position))

    try:
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error adding subcategory: {str(e)}")
        raise ValueError("Failed to add subcategory.")


def rename_subcategory(db: Session, category_id: str, subcategory_id: str, name: str) -> Optional[Category]:
    name = (name or "").strip()
    if not name:
        raise ValueError("Subcategory name is required.")

    category = get_category_by_id(db, category_id)
    if not category:
        return None

    sub = _get_subcategory(category, subcategory_id)
    if any(other.name == name and other.id != sub.id for other in category.subcategories):
        raise ValueError("Subcategory name already exists.")
    sub.name = name

    try:
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating subcategory: {str(e)}")
        raise ValueError("Failed to update subcategory.")


def delete_subcategory(db: Session, category_id: str, subcategory_id: str) -> Optional[Category]:
    category = get_category_by_id(db, category_id)
    if not category:
        return None

    sub = _get_subcategory(category, subcategory_id)
    category.subcategories.remove(sub)

    try:
        db.commit()
        db.refresh(category)
        return category
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting subcategory: {str(e)}")
        raise ValueError("Failed to delete subcategory.")
