from fastapi import APIRouter, Depends, status

from routers.deps import get_user_service
from schemas.base import ErrorResponse
from schemas.user import UserCreate, UserResponse
from services.user_service import UserService

router = APIRouter(
    responses={404: {"model": ErrorResponse, "description": "Not found"}},
)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
):
    """Register a user. Emails are unique, compared case-insensitively."""
    return service.create_user(payload.email)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
):
    return service.get_user(user_id)
