from fastapi import APIRouter, Depends, HTTPException
from pymongo import ReturnDocument

from serenmind.db.database import get_user_collection
from serenmind.models.user import UserProfileResponse, UserProfileUpdateRequest
from serenmind.routers.auth_dependency import get_current_user_id

router = APIRouter(
    prefix="/user",
    tags=["User"],
    dependencies=[Depends(get_current_user_id)]
)


@router.get("/profile", response_model=UserProfileResponse)
async def get_user_profile(user_id: str = Depends(get_current_user_id)):
    user = get_user_collection().find_one({"_id": user_id}, {"password_hash": 0})
    if user:
        return user
    raise HTTPException(status_code=404, detail="User not found")


@router.put("/profile", response_model=UserProfileResponse)
async def update_user_profile(
    request: UserProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id)
):
    update_data = request.model_dump(exclude_unset=True)

    if not update_data:
        raise HTTPException(status_code=400, detail="Nothing to update")

    updated_user = get_user_collection().find_one_and_update(
        {"_id": user_id},
        {"$set": update_data},
        projection={"password_hash": 0},
        return_document=ReturnDocument.AFTER,
    )

    if updated_user:
        return updated_user
    raise HTTPException(status_code=404, detail="User not found")
