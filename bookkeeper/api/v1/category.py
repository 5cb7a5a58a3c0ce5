from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.core.dependencies import get_db, get_current_active_user
from bookkeeper.models.user import User
from bookkeeper.services.category_service import (
    get_category_by_id,
    get_all_categories,
    create_category,
    update_category,
    delete_category,
    add_subcategory,
    rename_subcategory,
    delete_subcategory,
)
from bookkeeper.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryListResponse,
    CategoryMessageResponse,
    SubcategoryRequest,
)
from bookkeeper.logger_config import logger

router = APIRouter()


def _category_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Category not found."
    )


@router.get("", response_model=CategoryListResponse)
def get_categories(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get all categories sorted by name.
    Requires authentication.
    """
    try:
        categories, total = get_all_categories(db)

        return CategoryListResponse(
            total=total,
            categories=[CategoryResponse.model_validate(category) for category in categories]
        )
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch categories."
        )


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get category by ID.
    Requires authentication.
    """
    category = get_category_by_id(db, category_id)
    if not category:
        raise _category_not_found()

    return CategoryResponse.model_validate(category)


@router.post("", response_model=CategoryMessageResponse, status_code=status.HTTP_201_CREATED)
def create_category_route(
    category_data: CategoryCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create a new category with optional subcategories.
    """
    try:
        category = create_category(db, name=category_data.name, subcategories=category_data.subcategories)
        logger.info(f"Category {category.id} created by {current_user.user_id}")
        return CategoryMessageResponse(
            message="Category created successfully!",
            category=CategoryResponse.model_validate(category)
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create category."
        )


@router.put("/{category_id}", response_model=CategoryMessageResponse)
def update_category_route(
    category_id: str,
    category_data: CategoryUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Rename a category and optionally replace its subcategory list.
    """
    try:
        category = update_category(
            db,
            category_id=category_id,
            name=category_data.name,
            subcategories=category_data.subcategories,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not category:
        raise _category_not_found()

    return CategoryMessageResponse(
        message="Category updated successfully!",
        category=CategoryResponse.model_validate(category)
    )


@router.delete("/{category_id}", response_model=CategoryMessageResponse)
def delete_category_route(
    category_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        deleted = delete_category(db, category_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not deleted:
        raise _category_not_found()

    return CategoryMessageResponse(message="Category deleted successfully!")


# ==================== SUBCATEGORIES ====================

@router.post("/{category_id}/subcategories", response_model=CategoryMessageResponse)
def add_subcategory_route(
    category_id: str,
    data: SubcategoryRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        category = add_subcategory(db, category_id, data.subcategory)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not category:
        raise _category_not_found()

    return CategoryMessageResponse(
        message="Subcategory added successfully!",
        category=CategoryResponse.model_validate(category)
    )


@router.put("/{category_id}/subcategories/{subcategory_id}", response_model=CategoryMessageResponse)
def rename_subcategory_route(
    category_id: str,
    subcategory_id: str,
    data: SubcategoryRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        category = rename_subcategory(db, category_id, subcategory_id, data.subcategory)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not category:
        raise _category_not_found()

    return CategoryMessageResponse(
        message="Subcategory updated successfully!",
        category=CategoryResponse.model_validate(category)
    )


@router.delete("/{category_id}/subcategories/{subcategory_id}", response_model=CategoryMessageResponse)
def delete_subcategory_route(
    category_id: str,
    subcategory_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        category = delete_subcategory(db, category_id, subcategory_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not category:
        raise _category_not_found()

    return CategoryMessageResponse(
        message="Subcategory deleted successfully!",
        category=CategoryResponse.model_validate(category)
    )
