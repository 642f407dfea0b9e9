"""Fluid Keeper: cron-triggered caller for FluidProposals lifecycle functions."""

__version__ = "0.1.0"
