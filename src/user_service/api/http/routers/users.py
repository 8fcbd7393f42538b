"""User API router with CRUD operations."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Path, Query, Response, status

from user_service.api.http.deps import get_user_service
from user_service.core.services import UserService
from user_service.entities.user import User, UserCreate, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])

UserId = Annotated[int, Path(gt=0, description="User id")]


@router.get("", response_model=list[User])
async def list_users(
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1),
    order: Literal["asc", "desc"] = Query("asc"),
    service: UserService = Depends(get_user_service),
) -> list[User]:
    """List users ordered by id."""
    return await service.find_all(offset=offset, limit=limit, order=order)


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: UserId,
    service: UserService = Depends(get_user_service),
) -> User:
    """Get a user by ID."""
    return await service.find_one(user_id)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
) -> User:
    """Create a new user."""
    return await service.create(payload)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    payload: UserUpdate,
    user_id: UserId,
    service: UserService = Depends(get_user_service),
) -> User:
    """Update a user."""
    return await service.update(user_id, payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UserId,
    service: UserService = Depends(get_user_service),
) -> Response:
    """Soft-delete a user."""
    await service.remove(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
