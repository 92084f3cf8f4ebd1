from fastapi import APIRouter, Depends, BackgroundTasks
from fastapi.security import OAuth2PasswordRequestForm
from utils.deps import session_manager_dependency, bearer_dependency
from starlette import status
from schemas.auth_schemas import Token, CreateUserRequest, UserResponse, MessageResponse



router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)



@router.post("/token", response_model=Token)
def login_for_access_token(manager: session_manager_dependency, form_data: OAuth2PasswordRequestForm = Depends()):
    pair = manager.sign_in(form_data.username, form_data.password)

    return Token(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type
    )


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
def create_user(body: CreateUserRequest, manager: session_manager_dependency):
    user = manager.register(body.email, body.password)

    return UserResponse(id=user.id, email=user.email, role=user.role)


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
def logout(token: bearer_dependency, manager: session_manager_dependency, bg: BackgroundTasks):
    """
    Revoke the bearer access token (logout).

    Expired revocations are swept after the response is sent.
    """
    manager.sign_out(token or "", background=bg)

    return MessageResponse(message="Logged out successfully")
