from fastapi import APIRouter, Depends, status

from .. import models, schemas
from ..core.responses import ok
from ..deps import get_current_user, get_user_service
from ..services.user_service import UserService

router = APIRouter(prefix="/users")


@router.get("/me", response_model=schemas.Envelope[schemas.UserOut])
def get_me(user: models.User = Depends(get_current_user)):
    return ok(user)


@router.patch("/me", response_model=schemas.Envelope[schemas.UserOut])
def update_me(
    data: schemas.UserUpdate,
    user: models.User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return ok(service.update_profile(user.id, data))


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    user: models.User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.delete_account(user.id)


@router.get("/me/preferences", response_model=schemas.Envelope[schemas.PreferencesOut])
def get_my_preferences(
    user: models.User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return ok(service.get_preferences(user.id))


@router.patch("/me/preferences", response_model=schemas.Envelope[schemas.PreferencesOut])
def update_my_preferences(
    data: schemas.PreferencesUpdate,
    user: models.User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return ok(service.update_preferences(user.id, data))
