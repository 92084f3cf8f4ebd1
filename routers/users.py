from fastapi import APIRouter, BackgroundTasks, status
from utils.deps import user_dependency, session_manager_dependency, bearer_dependency
from schemas.auth_schemas import UserResponse
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/users",
    tags=["users"]
)

@router.get("/me", status_code=status.HTTP_200_OK, response_model=UserResponse)
def get_user_info(user: user_dependency, manager: session_manager_dependency):
    """
    Get current user info (protected endpoint).
    """
    model = manager.fetch_user(user_id=user.subject)

    return UserResponse(id=model.id, email=model.email, role=model.role)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(token: bearer_dependency, user: user_dependency,
                manager: session_manager_dependency, bg: BackgroundTasks):
    """
    Delete the current account and revoke the presented access token.
    """
    manager.remove_user(user.subject)
    manager.sign_out(token, background=bg)

    logger.info("Account deleted", extra={"user_id": user.subject})
