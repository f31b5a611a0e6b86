"""
Voter implementations.

Voters stand in for a person answering "which of these two do you prefer?".

Available implementations:
- SimulatedVoter: Latent scores with optional noise
- ScriptedVoter: Fixed preference list
"""

from .scripted_voter import ScriptedVoter
from .sim_voter import SimulatedVoter

__all__ = ["ScriptedVoter", "SimulatedVoter"]
