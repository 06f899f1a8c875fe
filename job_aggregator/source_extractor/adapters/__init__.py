"""Career Site Adapters.

This package contains concrete implementations of the SourceAdapter interface
for each supported employer.

Available adapters:
- BPCEAdapter: Opendatasoft open data API (bpce_adapter.py)
- LyraAdapter: WordPress REST API (lyra_adapter.py)
- BergerLevraultAdapter: Talentsoft HTML list (berger_levrault_adapter.py)
- EstreemAdapter: TeamTailor jobs page (estreem_adapter.py)
- InfomilAdapter: Gestmax search page (infomil_adapter.py)
- AirFranceAdapter: offers list page (airfrance_adapter.py)
- MockAdapter: For testing purposes (mock_adapter.py)
"""

from .airfrance_adapter import AirFranceAdapter
from .berger_levrault_adapter import BergerLevraultAdapter
from .bpce_adapter import BPCEAdapter
from .estreem_adapter import EstreemAdapter
from .infomil_adapter import InfomilAdapter
from .lyra_adapter import LyraAdapter
from .mock_adapter import MockAdapter

__all__ = [
    "AirFranceAdapter",
    "BPCEAdapter",
    "BergerLevraultAdapter",
    "EstreemAdapter",
    "InfomilAdapter",
    "LyraAdapter",
    "MockAdapter",
]
