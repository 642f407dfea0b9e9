"""Human-readable interface of the FluidProposals contract.

Only the zero-argument entries are reachable from the cron endpoint; the rest
are listed so the definition matches the deployed contract.
"""

from typing import Tuple

FLUID_PROPOSALS_ABI: Tuple[str, ...] = (
    "function propose()",
    "function execute()",
    "function queue()",
    "function cancelExpired()",
    "function proposalCount() view returns (uint256)",
    "function proposalThreshold() view returns (uint256)",
    "function votingPeriod() view returns (uint256)",
    "function state(uint256 proposalId) view returns (uint8)",
    "function castVote(uint256 proposalId, uint8 support)",
    "function cancel(uint256 proposalId)",
    "event ProposalCreated(uint256 indexed proposalId, address proposer)",
    "event ProposalExecuted(uint256 indexed proposalId)",
)
