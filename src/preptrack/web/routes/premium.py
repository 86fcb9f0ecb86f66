"""Premium code redemption."""

from fastapi import APIRouter, Depends

from preptrack.core import premium
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_actor
from preptrack.web.schemas import RedeemRequest, UserResponse

router = APIRouter(prefix="/api/premium", tags=["premium"])


@router.post("/redeem", response_model=UserResponse)
def redeem(body: RedeemRequest, user: UserProfile = Depends(get_actor)) -> dict:
    """Redeem a single-use code and upgrade the account."""
    return premium.redeem_code(user.uid, body.code).to_dict()
