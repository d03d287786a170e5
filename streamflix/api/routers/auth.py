from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from streamflix.api.deps import get_login_local_use_case, get_register_user_use_case
from streamflix.api.schemas.auth import AuthTokenResponse, LoginRequest, RegisterRequest, RegisterResponse
from streamflix.application.dto.auth import AuthUserOutput, LoginLocalInput, RegisterUserInput
from streamflix.application.use_cases.login_local import LoginLocalUseCase
from streamflix.application.use_cases.register_user import RegisterUserUseCase
from streamflix.domain.exceptions import EmailAlreadyExistsError, InvalidCredentialsError, UserInactiveError


router = APIRouter()


def _user_payload(user: AuthUserOutput) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
    }


@router.post("/v1/auth/register", response_model=RegisterResponse)
def register_user(
    req: RegisterRequest,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    try:
        output = use_case.execute(
            RegisterUserInput(
                name=req.name,
                email=req.email,
                password=req.password,
            )
        )
    except EmailAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return RegisterResponse(user=_user_payload(output.user))


@router.post("/v1/auth/login", response_model=AuthTokenResponse)
def login_local(
    req: LoginRequest,
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    try:
        output = use_case.execute(LoginLocalInput(email=req.email, password=req.password))
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except UserInactiveError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc

    return AuthTokenResponse(
        access_token=output.access_token,
        access_expires_at=output.access_expires_at,
        user=_user_payload(output.user),
    )
