"""SQLAlchemy ORM models for SwapEngine."""

from swapengine.models.item import Item, ItemCategory, ItemCondition
from swapengine.models.swipe import Swipe
from swapengine.models.match import Match
from swapengine.models.deal_invite import DealInvite, DealInviteStatus
from swapengine.models.profile import Profile
from swapengine.models.algorithm_policy import AlgorithmPolicy
from swapengine.models.user_affinity import UserAffinity
from swapengine.models.swap_opportunity import (
    CycleType,
    OpportunityStatus,
    SwapOpportunity,
)

__all__ = [
    "Item", "ItemCategory", "ItemCondition",
    "Swipe",
    "Match",
    "DealInvite", "DealInviteStatus",
    "Profile",
    "AlgorithmPolicy",
    "UserAffinity",
    "CycleType", "OpportunityStatus", "SwapOpportunity",
]
