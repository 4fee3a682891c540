"""Interest signal engine: privacy-preserving interest and purchase-intent profiles.

Observations of page visits are matched against a three-level taxonomy,
folded into time-decayed counters and summarized as an exported profile
with a hiding commitment.

Public API::

    from interest_signal import InterestSignalEngine, EngineConfig
    from interest_signal.taxonomy import load_taxonomy_file

    engine = InterestSignalEngine(load_taxonomy_file("taxonomy.yaml"))
    profile = engine.process_observation({"url": ..., "content": ...})
"""

from interest_signal.config import EngineConfig
from interest_signal.engine import InterestSignalEngine

__all__ = ["EngineConfig", "InterestSignalEngine"]
__version__ = "0.1.0"
