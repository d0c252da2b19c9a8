# server/api/users.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from server.core.service import UserService
from server.database import get_db
from server.schemas.response import ApiResponse
from server.schemas.user import UserCreate, UserOut, UserUpdate


router = APIRouter()


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


# -------------------------------
# User Endpoints
# -------------------------------

@router.get("", response_model=ApiResponse[list[UserOut]], response_model_exclude_none=True)
@router.get("/", response_model=ApiResponse[list[UserOut]], response_model_exclude_none=True, include_in_schema=False)
def list_users(service: UserService = Depends(get_user_service)):
    """
    Returns every user. Password hashes are never included.
    """
    return ApiResponse(data=service.get_all())


@router.get("/{user_id}", response_model=ApiResponse[UserOut], response_model_exclude_none=True)
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return ApiResponse(data=service.get_by_id(user_id))


@router.post(
    "",
    response_model=ApiResponse[UserOut],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/",
    response_model=ApiResponse[UserOut],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
def create_user(req: UserCreate, service: UserService = Depends(get_user_service)):
    """
    Creates a user after checking that neither the username nor the
    (lowercased) email is taken.
    """
    user = service.create(req.username, req.email, req.password)
    return ApiResponse(message="User created successfully", data=user)


@router.put("/{user_id}", response_model=ApiResponse[UserOut], response_model_exclude_none=True)
def update_user(user_id: str, req: UserUpdate, service: UserService = Depends(get_user_service)):
    """
    Updates only the fields present in the body.
    """
    user = service.update(user_id, **req.model_dump(exclude_none=True))
    return ApiResponse(message="User updated successfully", data=user)


@router.delete("/{user_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    service.delete(user_id)
    return ApiResponse(message="User deleted successfully")
