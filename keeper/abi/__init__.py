from .fluid_proposals import FLUID_PROPOSALS_ABI

__all__ = ["FLUID_PROPOSALS_ABI"]
